"""Pydantic models describing the Sakenowa data API payloads."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class SakenowaBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class BrandPayload(SakenowaBaseModel):
    id: int
    name: str
    brewery_id: int = Field(alias="breweryId")


class BreweryPayload(SakenowaBaseModel):
    id: int
    name: str
    area_id: int | None = Field(default=None, alias="areaId")


class FlavorChartPayload(SakenowaBaseModel):
    brand_id: int = Field(alias="brandId")
    f1: float = Field(ge=0.0, le=1.0)
    f2: float = Field(ge=0.0, le=1.0)
    f3: float = Field(ge=0.0, le=1.0)
    f4: float = Field(ge=0.0, le=1.0)
    f5: float = Field(ge=0.0, le=1.0)
    f6: float = Field(ge=0.0, le=1.0)


class BrandsResponse(SakenowaBaseModel):
    brands: list[BrandPayload]


class BreweriesResponse(SakenowaBaseModel):
    breweries: list[BreweryPayload]


class FlavorChartsResponse(SakenowaBaseModel):
    flavor_charts: list[FlavorChartPayload] = Field(alias="flavorCharts")
