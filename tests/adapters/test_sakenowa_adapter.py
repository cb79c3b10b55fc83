from __future__ import annotations

from collections.abc import Callable  # noqa: TC003

import httpx
import pytest

from sakesync.adapters.http_resilience import ResilienceConfig, ResilientClient
from sakesync.adapters.sakenowa import (
    BrandPayload,
    BreweryPayload,
    FlavorChartPayload,
    FlavorChartsResponse,
    SakenowaAPIError,
    SakenowaFetcher,
    join_catalog,
)
from sakesync.adapters.sakenowa.client import _should_cache_payload  # pyright: ignore[reportPrivateUsage]
from sakesync.config.sakenowa import SakenowaConfig
from sakesync.domain.errors import CatalogFetchError

BASE_URL = "https://sakenowa.test/api/"


def _make_client_factory(
    handler: Callable[[httpx.Request], httpx.Response],
) -> Callable[[ResilienceConfig], ResilientClient]:
    async def async_handler(request: httpx.Request) -> httpx.Response:
        return handler(request)

    def factory(resilience: ResilienceConfig) -> ResilientClient:
        client = ResilientClient(resilience)
        client._client = httpx.AsyncClient(transport=httpx.MockTransport(async_handler))  # noqa: SLF001  # type: ignore[reportPrivateUsage]
        return client

    return factory


def _make_fetcher(handler: Callable[[httpx.Request], httpx.Response]) -> SakenowaFetcher:
    config = SakenowaConfig(
        resilience=ResilienceConfig(name="sakenowa", base_url=BASE_URL, cache=None)
    )
    return SakenowaFetcher(config=config, client_factory=_make_client_factory(handler))


def _serve(payloads: dict[str, dict[str, object]]) -> Callable[[httpx.Request], httpx.Response]:
    def handler(request: httpx.Request) -> httpx.Response:
        endpoint = request.url.path.rsplit("/", 1)[-1]
        if endpoint not in payloads:
            return httpx.Response(404, json={"error": "not found"})
        return httpx.Response(200, json=payloads[endpoint])

    return handler


def test_fetcher_joins_the_three_collections(
    sakenowa_payloads: dict[str, dict[str, object]],
) -> None:
    requested: list[str] = []
    serve = _serve(sakenowa_payloads)

    def handler(request: httpx.Request) -> httpx.Response:
        requested.append(str(request.url))
        return serve(request)

    candidates = _make_fetcher(handler)()

    assert sorted(requested) == [
        "https://sakenowa.test/api/brands",
        "https://sakenowa.test/api/breweries",
        "https://sakenowa.test/api/flavor-charts",
    ]
    assert [candidate.brand_id for candidate in candidates] == [1, 2]
    dassai = candidates[0]
    assert dassai.brand_name == "獺祭"
    assert dassai.brewery_id == 10
    assert dassai.brewery_name == "旭酒造"
    assert dassai.f2_mellow == 0.6
    assert dassai.sweetness == pytest.approx(1.8)
    assert dassai.richness == pytest.approx(-1.8)
    assert len(dassai.flavor_vector) == 8


def test_fetcher_reports_collection_sizes(
    sakenowa_payloads: dict[str, dict[str, object]],
) -> None:
    sizes = _make_fetcher(_serve(sakenowa_payloads)).fetch_collection_sizes()

    assert sizes == {"brands": 4, "breweries": 2, "flavor_charts": 3}


def test_http_error_raises_catalog_fetch_error(
    sakenowa_payloads: dict[str, dict[str, object]],
) -> None:
    payloads = dict(sakenowa_payloads)
    del payloads["breweries"]

    with pytest.raises(SakenowaAPIError) as excinfo:
        _make_fetcher(_serve(payloads))()

    assert isinstance(excinfo.value, CatalogFetchError)
    assert excinfo.value.endpoint == "breweries"


def test_schema_violation_raises_catalog_fetch_error(
    sakenowa_payloads: dict[str, dict[str, object]],
) -> None:
    payloads = dict(sakenowa_payloads)
    payloads["flavor-charts"] = {
        "flavorCharts": [
            {"brandId": 1, "f1": 1.5, "f2": 0.6, "f3": 0.2, "f4": 0.4, "f5": 0.3, "f6": 0.5}
        ]
    }

    with pytest.raises(SakenowaAPIError, match="flavor-charts"):
        _make_fetcher(_serve(payloads))()


def test_invalid_json_raises_catalog_fetch_error(
    sakenowa_payloads: dict[str, dict[str, object]],
) -> None:
    serve = _serve(sakenowa_payloads)

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/brands"):
            return httpx.Response(200, content=b"<html>maintenance</html>")
        return serve(request)

    with pytest.raises(SakenowaAPIError) as excinfo:
        _make_fetcher(handler)()

    assert excinfo.value.endpoint == "brands"


def test_join_excludes_brands_without_brewery_or_flavor(caplog: pytest.LogCaptureFixture) -> None:
    brands = [
        BrandPayload.model_validate({"id": 1, "name": "獺祭", "breweryId": 10}),
        BrandPayload.model_validate({"id": 2, "name": "迷子", "breweryId": 77}),
        BrandPayload.model_validate({"id": 3, "name": "無香", "breweryId": 10}),
    ]
    breweries = [BreweryPayload.model_validate({"id": 10, "name": "旭酒造"})]
    charts = FlavorChartsResponse.model_validate(
        {
            "flavorCharts": [
                {"brandId": 1, "f1": 0.1, "f2": 0.2, "f3": 0.3, "f4": 0.4, "f5": 0.5, "f6": 0.6},
                {"brandId": 2, "f1": 0.1, "f2": 0.2, "f3": 0.3, "f4": 0.4, "f5": 0.5, "f6": 0.6},
            ]
        }
    ).flavor_charts

    with caplog.at_level("INFO"):
        candidates = join_catalog(brands, breweries, charts)

    assert [candidate.brand_id for candidate in candidates] == [1]
    assert "Excluded 1 brand(s) without brewery and 1 without flavor chart" in caplog.text


def test_join_keeps_first_duplicate_brand(caplog: pytest.LogCaptureFixture) -> None:
    brands = [
        BrandPayload(id=1, name="獺祭", brewery_id=10),
        BrandPayload(id=1, name="獺祭 (重複)", brewery_id=10),
    ]
    breweries = [BreweryPayload(id=10, name="旭酒造")]
    charts = [FlavorChartPayload(brand_id=1, f1=0.1, f2=0.2, f3=0.3, f4=0.4, f5=0.5, f6=0.6)]

    candidates = join_catalog(brands, breweries, charts)

    assert [candidate.brand_name for candidate in candidates] == ["獺祭"]
    assert "duplicate brand id" in caplog.text


@pytest.mark.parametrize(
    ("payload", "expected"),
    [
        ({"brands": [{"id": 1}]}, True),
        ({"flavorCharts": [{"brandId": 1}]}, True),
        ({"brands": []}, False),
        ({"error": "maintenance"}, False),
        (["not", "a", "mapping"], False),
    ],
)
def test_only_non_empty_collections_are_cached(payload: object, expected: bool) -> None:
    assert _should_cache_payload(payload) is expected
