"""HTTP client for the Sakenowa data API."""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, cast

import httpx
from pydantic import BaseModel, ValidationError

from sakesync.adapters.http_resilience import ResilienceConfig, ResilientClient
from sakesync.config.sakenowa import SakenowaConfig, get_sakenowa_config
from sakesync.domain.errors import CatalogFetchError
from sakesync.domain.ports.fetching import CatalogFetcher

from .schema import BrandsResponse, BreweriesResponse, FlavorChartsResponse
from .translator import join_catalog

if TYPE_CHECKING:
    from collections.abc import Callable

    from sakesync.domain.model import CandidateRecord

log = getLogger(__name__)

BRANDS_PATH = "brands"
BREWERIES_PATH = "breweries"
FLAVOR_CHARTS_PATH = "flavor-charts"

_COLLECTION_KEYS = ("brands", "breweries", "flavorCharts")


def _should_cache_payload(payload: object) -> bool:
    """Only keep responses that carry a non-empty collection."""

    if not isinstance(payload, Mapping):
        return False
    mapping = cast(Mapping[str, object], payload)
    return any(isinstance(mapping.get(key), list) and mapping[key] for key in _COLLECTION_KEYS)


def _default_config() -> SakenowaConfig:
    return get_sakenowa_config(cache_predicate=_should_cache_payload)


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


class SakenowaAPIError(CatalogFetchError):
    """Raised when a Sakenowa collection cannot be fetched or validated."""

    def __init__(self, message: str, *, endpoint: str | None = None) -> None:
        super().__init__(message)
        self.endpoint = endpoint


@dataclass(slots=True)
class SakenowaFetcher:
    config: SakenowaConfig = field(default_factory=_default_config)
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=_default_client_factory
    )

    def __call__(self) -> list[CandidateRecord]:
        brands, breweries, charts = asyncio.run(self._fetch_collections_async())
        return join_catalog(brands.brands, breweries.breweries, charts.flavor_charts)

    def fetch_collection_sizes(self) -> dict[str, int]:
        """Fetch the three collections and return their raw sizes."""

        brands, breweries, charts = asyncio.run(self._fetch_collections_async())
        return {
            "brands": len(brands.brands),
            "breweries": len(breweries.breweries),
            "flavor_charts": len(charts.flavor_charts),
        }

    async def _fetch_collections_async(
        self,
    ) -> tuple[BrandsResponse, BreweriesResponse, FlavorChartsResponse]:
        async with self.client_factory(self.config.resilience) as client:
            results = await asyncio.gather(
                self._fetch(client, BRANDS_PATH, BrandsResponse),
                self._fetch(client, BREWERIES_PATH, BreweriesResponse),
                self._fetch(client, FLAVOR_CHARTS_PATH, FlavorChartsResponse),
                return_exceptions=True,
            )

        for result in results:
            if isinstance(result, BaseException):
                raise result
        brands, breweries, charts = cast(
            tuple[BrandsResponse, BreweriesResponse, FlavorChartsResponse], tuple(results)
        )
        log.info(
            f"Fetched {len(brands.brands)} brands, {len(breweries.breweries)} breweries "
            f"and {len(charts.flavor_charts)} flavor charts"
        )
        return brands, breweries, charts

    async def _fetch[TResponse: BaseModel](
        self,
        client: ResilientClient,
        path: str,
        model: type[TResponse],
    ) -> TResponse:
        url = self.config.base_url.rstrip("/") + "/" + path
        try:
            response = await client.get(url)
            response.raise_for_status()
            return model.model_validate(response.json())
        except httpx.HTTPError as exc:
            log.error(f"Sakenowa request for {path} failed: {exc}")
            raise SakenowaAPIError(f"Failed to fetch {path}: {exc}", endpoint=path) from exc
        except ValidationError as exc:
            log.error(f"Sakenowa {path} payload did not match the schema")
            raise SakenowaAPIError(
                f"Unexpected {path} payload: {exc.error_count()} validation error(s)",
                endpoint=path,
            ) from exc
        except ValueError as exc:
            log.error(f"Sakenowa {path} response is not valid JSON")
            raise SakenowaAPIError(f"Invalid JSON from {path}", endpoint=path) from exc


if TYPE_CHECKING:
    _fetcher_check: CatalogFetcher = SakenowaFetcher()
