"""Domain layer of the catalog synchronisation engine."""
