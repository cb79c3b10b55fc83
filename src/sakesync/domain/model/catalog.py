"""Catalog entries: per-run candidates and the durable master records."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from datetime import datetime

FLAVOR_FIELDS: Final[tuple[str, ...]] = (
    "f1_floral",
    "f2_mellow",
    "f3_heavy",
    "f4_mild",
    "f5_dry",
    "f6_light",
)

# Order is significant: it is the canonical order used for content hashing.
COMPARABLE_FIELDS: Final[tuple[str, ...]] = (
    "brand_name",
    "brewery_name",
    "sweetness",
    "richness",
    *FLAVOR_FIELDS,
)


@dataclass(frozen=True, slots=True)
class FlavorProfile:
    """Raw flavor chart of one brand; f1..f6 are in [0, 1]."""

    brand_id: int
    f1: float
    f2: float
    f3: float
    f4: float
    f5: float
    f6: float

    def scalars(self) -> tuple[float, float, float, float, float, float]:
        return (self.f1, self.f2, self.f3, self.f4, self.f5, self.f6)


@dataclass(frozen=True, kw_only=True)
class CatalogEntry:
    """Fields shared by candidates and master records."""

    brand_id: int
    brand_name: str
    brewery_id: int
    brewery_name: str
    sweetness: float
    richness: float
    f1_floral: float
    f2_mellow: float
    f3_heavy: float
    f4_mild: float
    f5_dry: float
    f6_light: float
    flavor_vector: tuple[float, ...] = ()

    def comparable_values(self) -> dict[str, object]:
        return {name: getattr(self, name) for name in COMPARABLE_FIELDS}

    def catalog_snapshot(self) -> dict[str, object]:
        return {
            "brand_id": self.brand_id,
            "brand_name": self.brand_name,
            "brewery_id": self.brewery_id,
            "brewery_name": self.brewery_name,
            "sweetness": self.sweetness,
            "richness": self.richness,
            **{name: getattr(self, name) for name in FLAVOR_FIELDS},
            "flavor_vector": list(self.flavor_vector),
        }


@dataclass(frozen=True, kw_only=True)
class CandidateRecord(CatalogEntry):
    """One joined brand/brewery/flavor triple fetched during a run. Never persisted."""

    def snapshot(self) -> dict[str, object]:
        return self.catalog_snapshot()


@dataclass(frozen=True, kw_only=True)
class MasterRecord(CatalogEntry):
    """Current-state row of one catalog entry; deactivated rather than removed."""

    data_hash: str
    generation_id: int
    is_active: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None
    deleted_at: datetime | None = None

    @classmethod
    def from_candidate(
        cls,
        candidate: CandidateRecord,
        *,
        data_hash: str,
        generation_id: int,
        now: datetime,
    ) -> MasterRecord:
        return cls(
            **_entry_fields(candidate),
            data_hash=data_hash,
            generation_id=generation_id,
            is_active=True,
            created_at=now,
            updated_at=now,
        )

    def with_candidate(
        self,
        candidate: CandidateRecord,
        *,
        data_hash: str,
        generation_id: int,
        now: datetime,
    ) -> MasterRecord:
        """Return this record overwritten with the candidate's catalog fields."""

        if candidate.brand_id != self.brand_id:
            raise ValueError(
                f"Cannot apply brand {candidate.brand_id} onto master record {self.brand_id}"
            )
        return dataclasses.replace(
            self,
            **_entry_fields(candidate),
            data_hash=data_hash,
            generation_id=generation_id,
            updated_at=now,
        )

    def deactivated(self, *, generation_id: int, now: datetime) -> MasterRecord:
        return dataclasses.replace(
            self, is_active=False, deleted_at=now, generation_id=generation_id
        )

    def snapshot(self) -> dict[str, object]:
        return {
            **self.catalog_snapshot(),
            "data_hash": self.data_hash,
            "generation_id": self.generation_id,
            "is_active": self.is_active,
            "created_at": _isoformat(self.created_at),
            "updated_at": _isoformat(self.updated_at),
            "deleted_at": _isoformat(self.deleted_at),
        }


def _entry_fields(entry: CatalogEntry) -> dict[str, object]:
    return {f.name: getattr(entry, f.name) for f in dataclasses.fields(CatalogEntry)}


def _isoformat(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None
