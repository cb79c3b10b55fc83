"""Domain port definitions for adapters."""

from __future__ import annotations

from .fetching import CatalogFetcher
from .locking import SyncLock
from .persistence import (
    ChangeSummaryRepository,
    GenerationRepository,
    HistoryRepository,
    MasterRecordRepository,
)
from .reporting import RunReporter
from .unit_of_work import RepositoryCollection, SyncRepositories, SyncUnitOfWork, UnitOfWork

__all__ = [
    "CatalogFetcher",
    "ChangeSummaryRepository",
    "GenerationRepository",
    "HistoryRepository",
    "MasterRecordRepository",
    "RepositoryCollection",
    "RunReporter",
    "SyncLock",
    "SyncRepositories",
    "SyncUnitOfWork",
    "UnitOfWork",
]
