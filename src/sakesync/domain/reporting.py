"""Run statistics and the report documents written after every run."""

from __future__ import annotations

import traceback
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import datetime

    from sakesync.domain.changes import ChangeSet
    from sakesync.domain.model import Generation


@dataclass(slots=True)
class SyncStats:
    """Statistics accumulated over one run, also reported when it fails."""

    started_at: datetime
    processed: int = 0
    inserted: int = 0
    updated: int = 0
    deleted: int = 0
    unchanged: int = 0
    errors: list[str] = field(default_factory=list[str])

    def to_dict(self) -> dict[str, object]:
        return {
            "started_at": self.started_at.isoformat(),
            "processed": self.processed,
            "inserted": self.inserted,
            "updated": self.updated,
            "deleted": self.deleted,
            "unchanged": self.unchanged,
            "errors": list(self.errors),
        }


@dataclass(frozen=True, slots=True)
class RunReport:
    generation: str | None
    started_at: datetime
    finished_at: datetime
    dry_run: bool
    stats: SyncStats
    inserts: int
    updates: int
    deletes: int
    unchanged: int
    failed: bool = False

    @classmethod
    def build(
        cls,
        *,
        generation: Generation | None,
        change_set: ChangeSet,
        stats: SyncStats,
        finished_at: datetime,
        dry_run: bool,
        failed: bool = False,
    ) -> RunReport:
        return cls(
            generation=generation.label if generation is not None else None,
            started_at=stats.started_at,
            finished_at=finished_at,
            dry_run=dry_run,
            stats=stats,
            inserts=len(change_set.inserts),
            updates=len(change_set.updates),
            deletes=len(change_set.deletes),
            unchanged=change_set.unchanged,
            failed=failed,
        )

    @property
    def duration_ms(self) -> int:
        return int((self.finished_at - self.started_at).total_seconds() * 1000)

    def to_dict(self) -> dict[str, object]:
        return {
            "generation_id": self.generation,
            "sync_date": self.finished_at.isoformat(),
            "duration_ms": self.duration_ms,
            "statistics": self.stats.to_dict(),
            "changes_summary": {
                "inserts": self.inserts,
                "updates": self.updates,
                "deletes": self.deletes,
                "unchanged": self.unchanged,
            },
            "dry_run": self.dry_run,
            "status": "failed" if self.failed else "completed",
        }


@dataclass(frozen=True, slots=True)
class ErrorReport:
    started_at: datetime
    timestamp: datetime
    error_type: str
    message: str
    stack: str
    stats: SyncStats
    generation: str | None = None

    @classmethod
    def from_exception(
        cls,
        error: BaseException,
        *,
        stats: SyncStats,
        timestamp: datetime,
        generation: Generation | None = None,
    ) -> ErrorReport:
        return cls(
            started_at=stats.started_at,
            timestamp=timestamp,
            error_type=type(error).__name__,
            message=str(error),
            stack="".join(traceback.format_exception(error)),
            stats=stats,
            generation=generation.label if generation is not None else None,
        )

    def to_dict(self) -> dict[str, object]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "generation_id": self.generation,
            "error": {"type": self.error_type, "message": self.message, "stack": self.stack},
            "stats": self.stats.to_dict(),
        }
