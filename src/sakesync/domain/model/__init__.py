"""Domain model of the catalog synchronisation engine."""

from __future__ import annotations

from .catalog import (
    COMPARABLE_FIELDS,
    FLAVOR_FIELDS,
    CandidateRecord,
    CatalogEntry,
    FlavorProfile,
    MasterRecord,
)
from .enums import ChangeImpact, GenerationStatus, HistoryOperation
from .generation import DRY_RUN_LABEL, ChangeSummary, Generation, GenerationCounts
from .history import HistoryEntry

__all__ = [
    "COMPARABLE_FIELDS",
    "DRY_RUN_LABEL",
    "FLAVOR_FIELDS",
    "CandidateRecord",
    "CatalogEntry",
    "ChangeImpact",
    "ChangeSummary",
    "FlavorProfile",
    "Generation",
    "GenerationCounts",
    "GenerationStatus",
    "HistoryEntry",
    "HistoryOperation",
    "MasterRecord",
]
