"""Public interface for the Sakenowa adapter."""

from __future__ import annotations

from .client import SakenowaAPIError, SakenowaFetcher
from .schema import (
    BrandPayload,
    BrandsResponse,
    BreweriesResponse,
    BreweryPayload,
    FlavorChartPayload,
    FlavorChartsResponse,
)
from .translator import join_catalog

__all__ = [
    "BrandPayload",
    "BrandsResponse",
    "BreweriesResponse",
    "BreweryPayload",
    "FlavorChartPayload",
    "FlavorChartsResponse",
    "SakenowaAPIError",
    "SakenowaFetcher",
    "join_catalog",
]
