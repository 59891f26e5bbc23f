"""Domain types for normalized metal prices and the daily history."""

import datetime as dt
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from goldrates.domain.enums import VariationType

TWO_PLACES = Decimal("0.01")


def round_money(value: Decimal | float | int | None) -> Decimal | None:
    """Round to 2 decimal places, half-up. Floats go through str() to avoid binary noise."""
    if value is None:
        return None
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


class GoldTrendPoint(BaseModel):
    """One point of the vendor's gold trend, price per 10 grams (24k)."""

    date: dt.date
    price: Decimal


class GoldRates(BaseModel):
    """Normalized output of the gold aggregator for a single city."""

    gold_24k_1g: Decimal
    gold_22k_1g: Decimal
    gold_24k_10g: Decimal
    gold_22k_10g: Decimal
    location: str
    price_date: Optional[str] = None
    percentage_change_24k: Optional[float] = None
    percentage_change_22k: Optional[float] = None
    silver_1kg: Optional[Decimal] = None
    copper: Optional[Decimal] = None
    platinum: Optional[Decimal] = None
    trending_cities: list[str] = []
    gold_trend: Optional[list[GoldTrendPoint]] = None


class MetalTicker(BaseModel):
    """Ticker entry for one metal from the all-metals feed."""

    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    rate: Decimal
    sell_rate: Decimal = Field(alias="sellRate")
    buy_rate: Decimal = Field(alias="buyRate")
    variation_type: VariationType = Field(alias="variationType")
    variation: str


class AllMetalPrices(BaseModel):
    gold: MetalTicker
    silver: MetalTicker
    platinum: MetalTicker
    palladium: MetalTicker


class PricePoint(BaseModel):
    """A daily observation of the 24k gold price per 10 grams.

    ``synthetic`` marks points produced by the history seeder rather than a real fetch.
    """

    model_config = ConfigDict(frozen=True)

    date: dt.date
    price: Decimal
    timestamp: dt.datetime
    synthetic: bool = False


@dataclass(frozen=True)
class CityMatch:
    """Result of resolving a user-supplied city against the vendor's city map.

    ``matched`` is False when the resolver had to fall back to a priority or
    arbitrary city; ``key`` is always a key present in the vendor data.
    """

    matched: bool
    key: str
    strategy: str


class CityPrices(BaseModel):
    """Assembled price snapshot for one city, as served to API clients.

    Immutable; fallback paths derive tagged copies with ``model_copy(update=...)``.
    """

    model_config = ConfigDict(frozen=True)

    city: str
    location: Optional[str] = None
    gold_10g: Optional[Decimal] = None
    gold_1g: Optional[Decimal] = None
    gold_22k_10g: Optional[Decimal] = None
    gold_22k_1g: Optional[Decimal] = None
    silver_1kg: Optional[Decimal] = None
    copper: Optional[Decimal] = None
    platinum: Optional[Decimal] = None
    platinum_10g: Optional[Decimal] = None
    platinum_variation_type: Optional[VariationType] = None
    platinum_variation: Optional[str] = None
    platinum_percentage_change: Optional[float] = None
    palladium: Optional[Decimal] = None
    palladium_1g: Optional[Decimal] = None
    palladium_10g: Optional[Decimal] = None
    palladium_variation_type: Optional[VariationType] = None
    palladium_variation: Optional[str] = None
    palladium_percentage_change: Optional[float] = None
    percentage_change_24k: Optional[float] = None
    percentage_change_22k: Optional[float] = None
    price_date: Optional[str] = None
    updated_at: dt.datetime
    cached: bool = False
    source: Optional[str] = None
    trending_cities: list[str] = []
    gold_trend: Optional[list[GoldTrendPoint]] = None
    error: Optional[str] = None
    error_details: Optional[str] = None
