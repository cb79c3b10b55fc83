"""Apply a classified change set to the master store with one history entry each."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from sakesync.domain.errors import ChangeApplicationError
from sakesync.domain.hashing import compute_content_hash
from sakesync.domain.model import HistoryEntry, HistoryOperation, MasterRecord

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime

    from sakesync.domain.changes import ChangeSet, RecordUpdate
    from sakesync.domain.model import CandidateRecord
    from sakesync.domain.ports.unit_of_work import SyncRepositories

log = getLogger(__name__)


@dataclass(slots=True)
class ApplyResult:
    inserted: int = 0
    updated: int = 0
    deleted: int = 0

    @property
    def total(self) -> int:
        return self.inserted + self.updated + self.deleted


class ChangeApplier:
    """Writes master rows and history entries for one generation.

    Changes are applied one by one in the order inserts, updates, deletes. The
    applier never commits; transaction scope belongs to the caller.
    """

    def __init__(self, repositories: SyncRepositories, *, generation_id: int) -> None:
        self.repositories = repositories
        self.generation_id = generation_id
        self.result = ApplyResult()

    def apply(self, change_set: ChangeSet, *, now: datetime) -> ApplyResult:
        """Apply every change; ``result`` keeps the counts reached if a write fails."""

        result = self.result

        for candidate in change_set.inserts:
            self._guarded(HistoryOperation.INSERT, candidate.brand_id, self._insert, candidate, now)
            result.inserted += 1

        for update in change_set.updates:
            self._guarded(HistoryOperation.UPDATE, update.new.brand_id, self._update, update, now)
            result.updated += 1

        for record in change_set.deletes:
            self._guarded(HistoryOperation.DELETE, record.brand_id, self._delete, record, now)
            result.deleted += 1

        log.info(
            "Applied generation #%s: inserted=%s, updated=%s, deleted=%s",
            self.generation_id,
            result.inserted,
            result.updated,
            result.deleted,
        )
        return result

    def _guarded[T](
        self,
        operation: HistoryOperation,
        brand_id: int,
        action: Callable[[T, datetime], None],
        change: T,
        now: datetime,
    ) -> None:
        try:
            action(change, now)
        except ChangeApplicationError:
            raise
        except Exception as exc:
            raise ChangeApplicationError(
                f"Failed to apply {operation} for brand {brand_id}: {exc}",
                brand_id=brand_id,
                operation=operation,
            ) from exc

    def _insert(self, candidate: CandidateRecord, now: datetime) -> None:
        record = MasterRecord.from_candidate(
            candidate,
            data_hash=compute_content_hash(candidate),
            generation_id=self.generation_id,
            now=now,
        )
        self.repositories.masters.insert(record)
        snapshot = candidate.snapshot()
        self.repositories.history.append(
            HistoryEntry(
                brand_id=candidate.brand_id,
                generation_id=self.generation_id,
                operation=HistoryOperation.INSERT,
                old_data=None,
                new_data=snapshot,
                changed_fields=tuple(snapshot),
                recorded_at=now,
            )
        )

    def _update(self, update: RecordUpdate, now: datetime) -> None:
        record = update.old.with_candidate(
            update.new,
            data_hash=compute_content_hash(update.new),
            generation_id=self.generation_id,
            now=now,
        )
        self.repositories.masters.update(update.old.brand_id, record)
        self.repositories.history.append(
            HistoryEntry(
                brand_id=update.new.brand_id,
                generation_id=self.generation_id,
                operation=HistoryOperation.UPDATE,
                old_data=update.old.snapshot(),
                new_data=update.new.snapshot(),
                changed_fields=update.changed_fields,
                recorded_at=now,
            )
        )

    def _delete(self, record: MasterRecord, now: datetime) -> None:
        self.repositories.masters.soft_delete(
            record.brand_id, generation_id=self.generation_id, deleted_at=now
        )
        self.repositories.history.append(
            HistoryEntry(
                brand_id=record.brand_id,
                generation_id=self.generation_id,
                operation=HistoryOperation.DELETE,
                old_data=record.snapshot(),
                new_data=None,
                changed_fields=(),
                recorded_at=now,
            )
        )
