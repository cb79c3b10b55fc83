"""Error taxonomy of a synchronisation run."""

from __future__ import annotations


class SyncError(RuntimeError):
    """Base class for failures raised by the synchronisation engine."""


class CatalogFetchError(SyncError):
    """The external catalog could not be fetched or did not match its schema."""


class MasterStoreNotFoundError(SyncError):
    """The master table does not exist yet (bootstrap case)."""


class ChangeApplicationError(SyncError):
    """A store write failed while applying a change set."""

    def __init__(self, message: str, *, brand_id: int, operation: str) -> None:
        super().__init__(message)
        self.brand_id = brand_id
        self.operation = operation


class GenerationStateError(SyncError):
    """A generation was asked to leave a terminal state."""


class SyncAlreadyRunningError(SyncError):
    """Another synchronisation run holds the store lock."""
