"""Stable content hashes over the comparable fields of a catalog entry."""

from __future__ import annotations

import hashlib
import json
from typing import TYPE_CHECKING, Final

from sakesync.domain.model import COMPARABLE_FIELDS

if TYPE_CHECKING:
    from collections.abc import Mapping

    from sakesync.domain.model import CatalogEntry

HASH_PRECISION: Final[int] = 3


def _canonical_value(value: object) -> object:
    if isinstance(value, bool):
        return value
    if isinstance(value, int | float):
        # + 0.0 folds -0.0 into 0.0 so both serialise identically
        return round(float(value), HASH_PRECISION) + 0.0
    return value


def canonical_payload(fields: Mapping[str, object]) -> str:
    missing = [name for name in COMPARABLE_FIELDS if name not in fields]
    if missing:
        raise ValueError(f"Missing comparable fields: {', '.join(missing)}")
    ordered = {name: _canonical_value(fields[name]) for name in COMPARABLE_FIELDS}
    return json.dumps(ordered, ensure_ascii=False, sort_keys=True, separators=(",", ":"))


def hash_fields(fields: Mapping[str, object]) -> str:
    """Return the SHA-256 hex digest of the canonical form of ``fields``.

    Only the comparable fields are considered; extra keys are ignored.
    """

    return hashlib.sha256(canonical_payload(fields).encode("utf-8")).hexdigest()


def compute_content_hash(record: CatalogEntry) -> str:
    return hash_fields(record.comparable_values())
