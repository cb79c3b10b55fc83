"""Ports for persisting the master dataset and its audit trail."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping
    from datetime import datetime

    from sakesync.domain.model import (
        ChangeSummary,
        Generation,
        GenerationCounts,
        HistoryEntry,
        MasterRecord,
    )


@runtime_checkable
class MasterRecordRepository(Protocol):
    """Current-state catalog rows. Rows are deactivated, never removed."""

    def list_active(self) -> list[MasterRecord]:
        """Raise ``MasterStoreNotFoundError`` when the master table does not exist."""
        ...

    def get(self, brand_id: int) -> MasterRecord | None: ...

    def insert(self, record: MasterRecord) -> None: ...

    def update(self, brand_id: int, record: MasterRecord) -> None: ...

    def soft_delete(self, brand_id: int, *, generation_id: int, deleted_at: datetime) -> None: ...


@runtime_checkable
class HistoryRepository(Protocol):
    """Append-only history; entries are never updated or removed."""

    def append(self, entry: HistoryEntry) -> None: ...

    def list_for_generation(self, generation_id: int) -> list[HistoryEntry]: ...

    def count_for_generation(self, generation_id: int) -> int: ...


@runtime_checkable
class GenerationRepository(Protocol):
    def create(self, *, started_at: datetime) -> Generation: ...

    def get(self, generation_id: int) -> Generation | None: ...

    def latest(self) -> Generation | None: ...

    def complete(
        self, generation_id: int, counts: GenerationCounts, *, completed_at: datetime
    ) -> Generation: ...

    def fail(
        self,
        generation_id: int,
        message: str,
        *,
        completed_at: datetime,
        details: Mapping[str, object] | None = None,
    ) -> Generation: ...


@runtime_checkable
class ChangeSummaryRepository(Protocol):
    def add(self, summary: ChangeSummary) -> None: ...

    def get_for_generation(self, generation_id: int) -> ChangeSummary | None: ...
