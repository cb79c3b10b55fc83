"""SQLAlchemy adapter package for the master store."""

from __future__ import annotations

from .lock import SqlAlchemySyncLock
from .mappings import create_all_tables, metadata
from .repositories import (
    SqlAlchemyChangeSummaryRepository,
    SqlAlchemyGenerationRepository,
    SqlAlchemyHistoryRepository,
    SqlAlchemyMasterRecordRepository,
)
from .unit_of_work import (
    SqlAlchemyUnitOfWork,
    StartupError,
    is_started,
    missing_tables,
    shutdown,
    startup,
)

__all__ = [
    "SqlAlchemyChangeSummaryRepository",
    "SqlAlchemyGenerationRepository",
    "SqlAlchemyHistoryRepository",
    "SqlAlchemyMasterRecordRepository",
    "SqlAlchemySyncLock",
    "SqlAlchemyUnitOfWork",
    "StartupError",
    "create_all_tables",
    "is_started",
    "metadata",
    "missing_tables",
    "shutdown",
    "startup",
]
