"""Map raw flavor charts onto the sweetness/richness plane.

Both axes lie in [-3, 3]. The arithmetic order below is part of the contract:
content hashes are computed over the derived values, so any reformulation that
changes floating-point rounding would mark every record as updated.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from sakesync.domain.model import FlavorProfile

AXIS_LIMIT: Final[float] = 3.0


@dataclass(frozen=True, slots=True)
class Coordinates:
    sweetness: float
    richness: float


def _clamp(value: float, lower: float, upper: float) -> float:
    return max(lower, min(upper, value))


def map_flavor_to_coordinates(profile: FlavorProfile) -> Coordinates:
    # sweet: mellow (f2) against dry (f5); rich: heavy (f3) against light (f6)
    sweetness_raw = profile.f2 * 2 - profile.f5 * 2
    sweetness = _clamp(sweetness_raw * 3, -AXIS_LIMIT, AXIS_LIMIT)

    richness_raw = profile.f3 * 2 - profile.f6 * 2
    richness = _clamp(richness_raw * 3, -AXIS_LIMIT, AXIS_LIMIT)

    return Coordinates(sweetness=sweetness, richness=richness)


def build_flavor_vector(profile: FlavorProfile, coordinates: Coordinates) -> tuple[float, ...]:
    """Six raw scalars followed by both axes rescaled to roughly [-1, 1]."""

    return (
        *profile.scalars(),
        coordinates.sweetness / AXIS_LIMIT,
        coordinates.richness / AXIS_LIMIT,
    )
