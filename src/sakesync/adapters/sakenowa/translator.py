"""Join the three Sakenowa collections into candidate records."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from sakesync.domain.coordinates import build_flavor_vector, map_flavor_to_coordinates
from sakesync.domain.model import CandidateRecord, FlavorProfile

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .schema import BrandPayload, BreweryPayload, FlavorChartPayload

log = getLogger(__name__)


def to_flavor_profile(chart: FlavorChartPayload) -> FlavorProfile:
    return FlavorProfile(
        brand_id=chart.brand_id,
        f1=chart.f1,
        f2=chart.f2,
        f3=chart.f3,
        f4=chart.f4,
        f5=chart.f5,
        f6=chart.f6,
    )


def build_candidate(
    brand: BrandPayload, brewery: BreweryPayload, profile: FlavorProfile
) -> CandidateRecord:
    coordinates = map_flavor_to_coordinates(profile)
    return CandidateRecord(
        brand_id=brand.id,
        brand_name=brand.name,
        brewery_id=brewery.id,
        brewery_name=brewery.name,
        sweetness=coordinates.sweetness,
        richness=coordinates.richness,
        f1_floral=profile.f1,
        f2_mellow=profile.f2,
        f3_heavy=profile.f3,
        f4_mild=profile.f4,
        f5_dry=profile.f5,
        f6_light=profile.f6,
        flavor_vector=build_flavor_vector(profile, coordinates),
    )


def join_catalog(
    brands: Iterable[BrandPayload],
    breweries: Iterable[BreweryPayload],
    flavor_charts: Iterable[FlavorChartPayload],
) -> list[CandidateRecord]:
    """Inner-join brands with their brewery and flavor chart.

    Brands missing either side are dropped. The first occurrence of a duplicated
    brand id wins.
    """

    breweries_by_id = {brewery.id: brewery for brewery in breweries}
    profiles_by_brand: dict[int, FlavorProfile] = {}
    for chart in flavor_charts:
        profiles_by_brand.setdefault(chart.brand_id, to_flavor_profile(chart))

    candidates: list[CandidateRecord] = []
    seen: set[int] = set()
    missing_brewery = 0
    missing_flavor = 0
    duplicates = 0
    for brand in brands:
        if brand.id in seen:
            duplicates += 1
            continue
        seen.add(brand.id)
        brewery = breweries_by_id.get(brand.brewery_id)
        if brewery is None:
            missing_brewery += 1
            continue
        profile = profiles_by_brand.get(brand.id)
        if profile is None:
            missing_flavor += 1
            continue
        candidates.append(build_candidate(brand, brewery, profile))

    if duplicates:
        log.warning(f"Ignored {duplicates} duplicate brand id(s) in the catalog")
    if missing_brewery or missing_flavor:
        log.info(
            f"Excluded {missing_brewery} brand(s) without brewery and "
            f"{missing_flavor} without flavor chart"
        )
    log.info(f"Joined {len(candidates)} candidate records")
    return candidates
