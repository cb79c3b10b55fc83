"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING, cast

from sqlalchemy import func, insert, inspect, select, update

from sakesync.adapters.sqlalchemy.mappings import (
    change_summary_from_row,
    change_summary_values,
    generation_changes_summary_table,
    generation_from_row,
    generation_values,
    history_entry_from_row,
    history_entry_values,
    master_record_from_row,
    master_record_values,
    sake_master_history_table,
    sake_master_table,
    sync_generation_table,
)
from sakesync.domain.errors import MasterStoreNotFoundError
from sakesync.domain.model import Generation, GenerationStatus

if TYPE_CHECKING:
    from collections.abc import Mapping
    from datetime import datetime

    from sqlalchemy import CursorResult
    from sqlalchemy.orm import Session

    from sakesync.domain.model import (
        ChangeSummary,
        GenerationCounts,
        HistoryEntry,
        MasterRecord,
    )


class SqlAlchemyMasterRecordRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def list_active(self) -> list[MasterRecord]:
        if not inspect(self.session.connection()).has_table(sake_master_table.name):
            raise MasterStoreNotFoundError(f"Table {sake_master_table.name} does not exist")
        stmt = (
            select(sake_master_table)
            .where(sake_master_table.c.is_active.is_(True))
            .order_by(sake_master_table.c.brand_id)
        )
        return [master_record_from_row(row) for row in self.session.execute(stmt).mappings()]

    def get(self, brand_id: int) -> MasterRecord | None:
        stmt = select(sake_master_table).where(sake_master_table.c.brand_id == brand_id)
        row = self.session.execute(stmt).mappings().one_or_none()
        return master_record_from_row(row) if row is not None else None

    def insert(self, record: MasterRecord) -> None:
        """Insert ``record``; a deactivated row with the same brand id is revived in place."""

        existing = self.get(record.brand_id)
        if existing is None:
            self.session.execute(insert(sake_master_table).values(master_record_values(record)))
            return
        if existing.is_active:
            raise ValueError(f"Master record {record.brand_id} already exists and is active")

        values = master_record_values(record)
        values["created_at"] = existing.created_at
        values["deleted_at"] = None
        values["is_active"] = True
        self.session.execute(
            update(sake_master_table)
            .where(sake_master_table.c.brand_id == record.brand_id)
            .values(values)
        )

    def update(self, brand_id: int, record: MasterRecord) -> None:
        values = master_record_values(record)
        del values["brand_id"]
        del values["created_at"]
        self._update_row(brand_id, values)

    def soft_delete(self, brand_id: int, *, generation_id: int, deleted_at: datetime) -> None:
        self._update_row(
            brand_id,
            {
                "is_active": False,
                "deleted_at": deleted_at,
                "generation_id": generation_id,
            },
        )

    def _update_row(self, brand_id: int, values: Mapping[str, object]) -> None:
        stmt = (
            update(sake_master_table)
            .where(sake_master_table.c.brand_id == brand_id)
            .values(dict(values))
        )
        result = cast("CursorResult[object]", self.session.execute(stmt))
        if result.rowcount == 0:
            raise LookupError(f"Master record {brand_id} not found")


class SqlAlchemyHistoryRepository:
    """Append-only: exposes no update or delete."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def append(self, entry: HistoryEntry) -> None:
        self.session.execute(insert(sake_master_history_table).values(history_entry_values(entry)))

    def list_for_generation(self, generation_id: int) -> list[HistoryEntry]:
        stmt = (
            select(sake_master_history_table)
            .where(sake_master_history_table.c.generation_id == generation_id)
            .order_by(sake_master_history_table.c.history_id)
        )
        return [history_entry_from_row(row) for row in self.session.execute(stmt).mappings()]

    def count_for_generation(self, generation_id: int) -> int:
        stmt = (
            select(func.count())
            .select_from(sake_master_history_table)
            .where(sake_master_history_table.c.generation_id == generation_id)
        )
        return self.session.execute(stmt).scalar_one()


class SqlAlchemyGenerationRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def create(self, *, started_at: datetime) -> Generation:
        generation = Generation(
            generation_id=None, started_at=started_at, status=GenerationStatus.RUNNING
        )
        result = cast(
            "CursorResult[object]",
            self.session.execute(
                insert(sync_generation_table).values(generation_values(generation))
            ),
        )
        generation.generation_id = int(result.inserted_primary_key[0])
        return generation

    def get(self, generation_id: int) -> Generation | None:
        stmt = select(sync_generation_table).where(
            sync_generation_table.c.generation_id == generation_id
        )
        row = self.session.execute(stmt).mappings().one_or_none()
        return generation_from_row(row) if row is not None else None

    def latest(self) -> Generation | None:
        stmt = (
            select(sync_generation_table)
            .order_by(sync_generation_table.c.generation_id.desc())
            .limit(1)
        )
        row = self.session.execute(stmt).mappings().one_or_none()
        return generation_from_row(row) if row is not None else None

    def complete(
        self, generation_id: int, counts: GenerationCounts, *, completed_at: datetime
    ) -> Generation:
        generation = self._require(generation_id)
        generation.complete(counts, at=completed_at)
        self._save(generation)
        return generation

    def fail(
        self,
        generation_id: int,
        message: str,
        *,
        completed_at: datetime,
        details: Mapping[str, object] | None = None,
    ) -> Generation:
        generation = self._require(generation_id)
        generation.fail(message, at=completed_at, details=details)
        self._save(generation)
        return generation

    def _require(self, generation_id: int) -> Generation:
        generation = self.get(generation_id)
        if generation is None:
            raise LookupError(f"Generation {generation_id} not found")
        return generation

    def _save(self, generation: Generation) -> None:
        self.session.execute(
            update(sync_generation_table)
            .where(sync_generation_table.c.generation_id == generation.generation_id)
            .values(generation_values(generation))
        )


class SqlAlchemyChangeSummaryRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, summary: ChangeSummary) -> None:
        self.session.execute(
            insert(generation_changes_summary_table).values(change_summary_values(summary))
        )

    def get_for_generation(self, generation_id: int) -> ChangeSummary | None:
        stmt = select(generation_changes_summary_table).where(
            generation_changes_summary_table.c.generation_id == generation_id
        )
        row = self.session.execute(stmt).mappings().one_or_none()
        return change_summary_from_row(row) if row is not None else None


if TYPE_CHECKING:
    from sakesync.domain.ports.persistence import (
        ChangeSummaryRepository,
        GenerationRepository,
        HistoryRepository,
        MasterRecordRepository,
    )

    def _check_ports(session: Session) -> None:
        _masters: MasterRecordRepository = SqlAlchemyMasterRecordRepository(session)
        _history: HistoryRepository = SqlAlchemyHistoryRepository(session)
        _generations: GenerationRepository = SqlAlchemyGenerationRepository(session)
        _summaries: ChangeSummaryRepository = SqlAlchemyChangeSummaryRepository(session)
