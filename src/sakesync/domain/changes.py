"""Classify fetched candidates against the active master snapshot."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Final

from sakesync.domain.hashing import compute_content_hash
from sakesync.domain.model import COMPARABLE_FIELDS

if TYPE_CHECKING:
    from collections.abc import Iterable

    from sakesync.domain.model import CandidateRecord, CatalogEntry, MasterRecord

log = getLogger(__name__)

NUMERIC_EPSILON: Final[float] = 0.001


@dataclass(frozen=True, slots=True)
class RecordUpdate:
    old: MasterRecord
    new: CandidateRecord
    changed_fields: tuple[str, ...]


@dataclass(slots=True)
class ChangeSet:
    inserts: list[CandidateRecord] = field(default_factory=list["CandidateRecord"])
    updates: list[RecordUpdate] = field(default_factory=list[RecordUpdate])
    deletes: list[MasterRecord] = field(default_factory=list["MasterRecord"])
    unchanged: int = 0

    @property
    def total_changes(self) -> int:
        return len(self.inserts) + len(self.updates) + len(self.deletes)

    @property
    def has_changes(self) -> bool:
        return self.total_changes > 0


def changed_fields(old: CatalogEntry, new: CatalogEntry) -> tuple[str, ...]:
    """Return the comparable fields whose values differ between two entries."""

    changed: list[str] = []
    for name in COMPARABLE_FIELDS:
        old_value = getattr(old, name)
        new_value = getattr(new, name)
        if _is_number(old_value) and _is_number(new_value):
            if not math.isclose(old_value, new_value, rel_tol=0.0, abs_tol=NUMERIC_EPSILON):
                changed.append(name)
        elif old_value != new_value:
            changed.append(name)
    return tuple(changed)


def _is_number(value: object) -> bool:
    return isinstance(value, int | float) and not isinstance(value, bool)


def detect_changes(
    candidates: Iterable[CandidateRecord],
    current: Iterable[MasterRecord],
) -> ChangeSet:
    """Split a run's candidates into inserts, updates, deletes and unchanged records.

    Candidates whose content hash equals the stored hash are counted as unchanged
    without a field-level comparison. Every active master key that no candidate
    claimed is a delete.
    """

    remaining: dict[int, MasterRecord] = {record.brand_id: record for record in current}
    change_set = ChangeSet()

    for candidate in candidates:
        existing = remaining.pop(candidate.brand_id, None)
        if existing is None:
            change_set.inserts.append(candidate)
            continue

        if compute_content_hash(candidate) == existing.data_hash:
            change_set.unchanged += 1
            continue

        fields = changed_fields(existing, candidate)
        if not fields:
            log.debug(
                "Brand %s hash differs without a field-level difference", candidate.brand_id
            )
        change_set.updates.append(RecordUpdate(old=existing, new=candidate, changed_fields=fields))

    change_set.deletes.extend(remaining.values())

    log.info(
        "Detected changes: inserts=%s, updates=%s, deletes=%s, unchanged=%s",
        len(change_set.inserts),
        len(change_set.updates),
        len(change_set.deletes),
        change_set.unchanged,
    )
    return change_set
