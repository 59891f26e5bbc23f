"""Pydantic response models for the metals endpoints."""

import datetime as dt
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from goldrates.domain.enums import VariationType
from goldrates.domain.models import AllMetalPrices, CityPrices, MetalTicker


def _to_float(val: Decimal | None) -> float | None:
    """Convert Decimal to float, keeping None."""
    if val is None:
        return None
    return float(val)


class GoldTrendPointResponse(BaseModel):
    date: dt.date
    price: float


class MetalsApiResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    city: str
    location: Optional[str] = None
    gold_10g: Optional[float] = None
    gold_1g: Optional[float] = None
    gold_22k_10g: Optional[float] = None
    gold_22k_1g: Optional[float] = None
    silver_1kg: Optional[float] = None
    copper: Optional[float] = None
    platinum: Optional[float] = None
    platinum_10g: Optional[float] = None
    platinum_variation_type: Optional[VariationType] = Field(None, alias="platinumVariationType")
    platinum_variation: Optional[str] = Field(None, alias="platinumVariation")
    platinum_percentage_change: Optional[float] = Field(None, alias="platinumPercentageChange")
    palladium: Optional[float] = None
    palladium_1g: Optional[float] = None
    palladium_10g: Optional[float] = None
    palladium_variation_type: Optional[VariationType] = Field(None, alias="palladiumVariationType")
    palladium_variation: Optional[str] = Field(None, alias="palladiumVariation")
    palladium_percentage_change: Optional[float] = Field(None, alias="palladiumPercentageChange")
    percentage_change_24k: Optional[float] = Field(None, alias="percentageChange24k")
    percentage_change_22k: Optional[float] = Field(None, alias="percentageChange22k")
    price_date: Optional[str] = Field(None, alias="priceDate")
    updated_at: dt.datetime
    cached: bool
    source: Optional[str] = None
    trending_cities: list[str] = Field(default_factory=list, alias="trendingCities")
    gold_trend: Optional[list[GoldTrendPointResponse]] = Field(None, alias="goldTrend")
    error: Optional[str] = None
    error_details: Optional[str] = Field(None, alias="errorDetails")

    def to_json(self) -> dict[str, Any]:
        """Wire form: camelCase aliases, ``error``/``errorDetails`` omitted when unset."""
        body = self.model_dump(mode="json", by_alias=True)
        for optional in ("error", "errorDetails"):
            if body.get(optional) is None:
                body.pop(optional, None)
        return body


def to_metals_response(prices: CityPrices) -> MetalsApiResponse:
    return MetalsApiResponse(
        city=prices.city,
        location=prices.location,
        gold_10g=_to_float(prices.gold_10g),
        gold_1g=_to_float(prices.gold_1g),
        gold_22k_10g=_to_float(prices.gold_22k_10g),
        gold_22k_1g=_to_float(prices.gold_22k_1g),
        silver_1kg=_to_float(prices.silver_1kg),
        copper=_to_float(prices.copper),
        platinum=_to_float(prices.platinum),
        platinum_10g=_to_float(prices.platinum_10g),
        platinum_variation_type=prices.platinum_variation_type,
        platinum_variation=prices.platinum_variation,
        platinum_percentage_change=prices.platinum_percentage_change,
        palladium=_to_float(prices.palladium),
        palladium_1g=_to_float(prices.palladium_1g),
        palladium_10g=_to_float(prices.palladium_10g),
        palladium_variation_type=prices.palladium_variation_type,
        palladium_variation=prices.palladium_variation,
        palladium_percentage_change=prices.palladium_percentage_change,
        percentage_change_24k=prices.percentage_change_24k,
        percentage_change_22k=prices.percentage_change_22k,
        price_date=prices.price_date,
        updated_at=prices.updated_at,
        cached=prices.cached,
        source=prices.source,
        trending_cities=list(prices.trending_cities),
        gold_trend=(
            [GoldTrendPointResponse(date=p.date, price=float(p.price)) for p in prices.gold_trend]
            if prices.gold_trend is not None
            else None
        ),
        error=prices.error,
        error_details=prices.error_details,
    )


class MetalTickerResponse(BaseModel):
    rate: float
    sellRate: float
    buyRate: float
    variationType: VariationType
    variation: str


class AllMetalsData(BaseModel):
    gold: MetalTickerResponse
    silver: MetalTickerResponse
    platinum: MetalTickerResponse
    palladium: MetalTickerResponse


class AllMetalsResponse(BaseModel):
    success: bool
    data: Optional[AllMetalsData] = None
    error: Optional[str] = None
    updated_at: dt.datetime


def _ticker_response(ticker: MetalTicker) -> MetalTickerResponse:
    return MetalTickerResponse(
        rate=float(ticker.rate),
        sellRate=float(ticker.sell_rate),
        buyRate=float(ticker.buy_rate),
        variationType=ticker.variation_type,
        variation=ticker.variation,
    )


def to_all_metals_data(prices: AllMetalPrices) -> AllMetalsData:
    return AllMetalsData(
        gold=_ticker_response(prices.gold),
        silver=_ticker_response(prices.silver),
        platinum=_ticker_response(prices.platinum),
        palladium=_ticker_response(prices.palladium),
    )
