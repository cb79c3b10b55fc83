"""Synchronisation generations and their change summaries."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Final

from sakesync.domain.errors import GenerationStateError

from .enums import ChangeImpact, GenerationStatus

if TYPE_CHECKING:
    from collections.abc import Mapping
    from datetime import datetime

DRY_RUN_LABEL: Final[str] = "DRY_RUN"


@dataclass(frozen=True, slots=True)
class GenerationCounts:
    inserted: int = 0
    updated: int = 0
    deleted: int = 0
    unchanged: int = 0
    total_records: int = 0

    @property
    def changes(self) -> int:
        return self.inserted + self.updated + self.deleted


@dataclass(eq=False, kw_only=True)
class Generation:
    """One execution of the engine; the unit of audit correlation for its writes.

    ``generation_id`` is assigned by the store. Dry runs use an unpersisted
    generation without an id.
    """

    generation_id: int | None
    started_at: datetime
    status: GenerationStatus = GenerationStatus.RUNNING
    completed_at: datetime | None = None
    total_records: int = 0
    inserted_count: int = 0
    updated_count: int = 0
    deleted_count: int = 0
    unchanged_count: int = 0
    error_message: str | None = None
    error_details: Mapping[str, object] | None = None

    @property
    def is_dry_run(self) -> bool:
        return self.generation_id is None

    @property
    def label(self) -> str:
        return DRY_RUN_LABEL if self.generation_id is None else str(self.generation_id)

    @property
    def counts(self) -> GenerationCounts:
        return GenerationCounts(
            inserted=self.inserted_count,
            updated=self.updated_count,
            deleted=self.deleted_count,
            unchanged=self.unchanged_count,
            total_records=self.total_records,
        )

    def complete(self, counts: GenerationCounts, *, at: datetime) -> None:
        self._ensure_running("complete")
        self.status = GenerationStatus.COMPLETED
        self.completed_at = at
        self.total_records = counts.total_records
        self.inserted_count = counts.inserted
        self.updated_count = counts.updated
        self.deleted_count = counts.deleted
        self.unchanged_count = counts.unchanged

    def fail(
        self,
        message: str,
        *,
        at: datetime,
        details: Mapping[str, object] | None = None,
    ) -> None:
        self._ensure_running("fail")
        self.status = GenerationStatus.FAILED
        self.completed_at = at
        self.error_message = message
        self.error_details = details

    def _ensure_running(self, action: str) -> None:
        if self.status is not GenerationStatus.RUNNING:
            raise GenerationStateError(
                f"Cannot {action} generation {self.label}: status is {self.status}"
            )


@dataclass(frozen=True, kw_only=True)
class ChangeSummary:
    """Impact summary of one completed generation."""

    generation_id: int
    new_brands: tuple[str, ...] = ()
    removed_brands: tuple[str, ...] = ()
    updated_brands: tuple[str, ...] = ()
    change_impact: ChangeImpact = ChangeImpact.NONE
    details: Mapping[str, int] = field(default_factory=dict)

    @property
    def total_changes(self) -> int:
        return len(self.new_brands) + len(self.removed_brands) + len(self.updated_brands)
