"""Append-only audit records of master-record mutations."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from .enums import HistoryOperation

if TYPE_CHECKING:
    from collections.abc import Mapping


@dataclass(frozen=True, kw_only=True)
class HistoryEntry:
    """One insert/update/delete applied to a master record within a generation."""

    brand_id: int
    generation_id: int
    operation: HistoryOperation
    old_data: Mapping[str, object] | None
    new_data: Mapping[str, object] | None
    changed_fields: tuple[str, ...] = ()
    recorded_at: datetime = field(default_factory=lambda: datetime.now(tz=UTC))
    history_id: int | None = None

    def __post_init__(self) -> None:
        match self.operation:
            case HistoryOperation.INSERT:
                if self.old_data is not None or self.new_data is None:
                    raise ValueError("INSERT history requires new_data only")
            case HistoryOperation.UPDATE:
                if self.old_data is None or self.new_data is None:
                    raise ValueError("UPDATE history requires old_data and new_data")
            case HistoryOperation.DELETE:
                if self.old_data is None or self.new_data is not None:
                    raise ValueError("DELETE history requires old_data only")
                if self.changed_fields:
                    raise ValueError("DELETE history carries no changed fields")
