"""Groww gold-rate provider — fetches city-wise physical gold rates in INR."""

import datetime as dt
import logging
import re
from decimal import Decimal, InvalidOperation
from typing import Any

import httpx

from goldrates.domain.enums import ErrorSource
from goldrates.domain.models import GoldRates, GoldTrendPoint, round_money
from goldrates.exceptions import UpstreamError
from goldrates.infra.http.rate_limited_client import RateLimitedClient
from goldrates.infra.price.city_resolver import resolve_city

logger = logging.getLogger(__name__)

BASE_URL = "https://groww.in/v1/api/physicalGold/v1/rates/aggregated_api"

HEADERS: dict[str, str] = {
    "accept": "application/json, text/plain, */*",
    "accept-language": "en-US,en;q=0.9",
    "user-agent": (
        "Mozilla/5.0 (Linux; Android 6.0; Nexus 5 Build/MRA58N) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/143.0.0.0 Mobile Safari/537.36"
    ),
    "x-app-id": "growwWeb",
    "x-device-type": "msite",
    "x-platform": "web",
    "referer": "https://groww.in/gold-rates",
}

# 22k is 91.6% pure; used when the vendor omits the 22k rate
PURITY_22K = Decimal("0.916")
GRAMS_PER_QUOTE = 10

# Monthly trend entries carry several price snapshots; earlier keys win
_TREND_PRICE_KEYS = ("lastDayPrice", "firstDayPrice", "highest", "lowest")

_YEAR_MONTH = re.compile(r"^\d{4}-\d{2}$")


def _to_decimal(value: Any) -> Decimal | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        result = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None
    if not result.is_finite():
        return None
    return result


def _parse_trend_date(raw: Any) -> dt.date | None:
    """Accept YYYY-MM-DD, YYYY-MM (first of month) and ISO timestamps."""
    if not isinstance(raw, str) or not raw:
        return None
    text = raw
    if _YEAR_MONTH.match(text):
        text = f"{text}-01"
    elif "T" in text:
        text = text.split("T", 1)[0]
    try:
        return dt.date.fromisoformat(text)
    except ValueError:
        return None


def _snapshot_price(price_block: dict) -> Decimal | None:
    """Pick the 24k (else 22k) 1-gram price from the first snapshot present."""
    for key in _TREND_PRICE_KEYS:
        snapshot = price_block.get(key)
        if isinstance(snapshot, dict):
            return _to_decimal(snapshot.get("TWENTY_FOUR")) or _to_decimal(snapshot.get("TWENTY_TWO"))
    return None


def _sorted_points(points: list[GoldTrendPoint]) -> list[GoldTrendPoint]:
    return sorted(points, key=lambda p: p.date)


def _parse_flat_trend(items: list) -> list[GoldTrendPoint]:
    """[{date, price}] with price already per 10g."""
    points = []
    for item in items:
        if not isinstance(item, dict):
            continue
        date = _parse_trend_date(item.get("date"))
        price = _to_decimal(item.get("price"))
        if date is not None and price is not None:
            points.append(GoldTrendPoint(date=date, price=round_money(price)))
    return _sorted_points(points)


def _parse_monthly_trend(items: list) -> list[GoldTrendPoint]:
    """[{date, price: {date, lastDayPrice: {...}, ...}}] with 1-gram prices."""
    points = []
    for item in items:
        if not isinstance(item, dict) or not isinstance(item.get("price"), dict):
            continue
        price_block = item["price"]
        price = _snapshot_price(price_block)
        date = _parse_trend_date(price_block.get("date") or item.get("date"))
        if date is None or price is None:
            continue
        points.append(GoldTrendPoint(date=date, price=round_money(price * GRAMS_PER_QUOTE)))
    return _sorted_points(points)


def _parse_city_trend(city_trend: Any) -> list[GoldTrendPoint] | None:
    """Trend keyed by city: either a monthly list or a {date_or_month: price} mapping."""
    if isinstance(city_trend, list):
        return _parse_monthly_trend(city_trend)
    if not isinstance(city_trend, dict):
        return None

    points = []
    for raw_date, value in city_trend.items():
        date = _parse_trend_date(raw_date)
        if date is None:
            continue
        if isinstance(value, dict):
            price = _snapshot_price(value)
        else:
            price = _to_decimal(value)
        if price is not None:
            points.append(GoldTrendPoint(date=date, price=round_money(price * GRAMS_PER_QUOTE)))
    return _sorted_points(points)


def parse_gold_trend(data: dict, vendor_key: str, city: str) -> list[GoldTrendPoint] | None:
    """Normalize the vendor's gold trend, in whichever layout it arrives, to ascending 10g points."""
    raw = data.get("goldTrend")

    # 1. Flat list of {date, price}
    if isinstance(raw, list) and raw:
        first = raw[0]
        if isinstance(first, dict) and isinstance(first.get("price"), (int, float)):
            return _parse_flat_trend(raw)

    # 2. Separate goldTrendData list of 1-gram prices, optionally per city
    trend_data = data.get("goldTrendData")
    if isinstance(trend_data, list):
        wanted = {vendor_key.lower(), city.lower()}
        items = []
        for item in trend_data:
            if not isinstance(item, dict):
                continue
            if item.get("city") and str(item["city"]).lower() not in wanted:
                continue
            price = _to_decimal(item.get("price"))
            if price is not None:
                items.append({"date": item.get("date"), "price": price * GRAMS_PER_QUOTE})
        return _parse_flat_trend(items)

    # 3. Monthly list with nested price snapshots
    if isinstance(raw, list):
        points = _parse_monthly_trend(raw)
        if not points:
            logger.warning("No gold trend points extracted from %d trend entries", len(raw))
        return points

    # 4. Object keyed by city
    if isinstance(raw, dict):
        city_trend = raw.get(vendor_key)
        if city_trend is None:
            city_trend = raw.get(city)
        return _parse_city_trend(city_trend)

    return None


def _side_rate(data: dict, section: str, vendor_key: str) -> Decimal | None:
    """Optional silver/copper/platinum rate for the resolved city, if the vendor sends one."""
    rates = data.get(section)
    if not isinstance(rates, dict):
        return None
    entry = rates.get(vendor_key)
    if not isinstance(entry, dict):
        return None
    price = _to_decimal(entry.get("price"))
    return round_money(price) if price else None


def _percentage(change: dict, key: str) -> float | None:
    value = change.get(key)
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


class GrowwGoldProvider:
    """Fetch today's city-wise gold rates from the Groww aggregator. Single attempt, no retries."""

    def __init__(self, http_client: RateLimitedClient, base_url: str = BASE_URL) -> None:
        self._http = http_client
        self._base_url = base_url

    async def _fetch_payload(self) -> dict:
        try:
            response = await self._http.get(self._base_url, headers=HEADERS)
        except httpx.HTTPError as exc:
            raise UpstreamError(f"Groww request failed: {exc}", source=ErrorSource.GROWW) from exc

        if response.status_code < 200 or response.status_code >= 300:
            raise UpstreamError(
                f"Groww API request failed: {response.status_code}",
                source=ErrorSource.GROWW,
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise UpstreamError("Groww returned invalid JSON", source=ErrorSource.GROWW) from exc

        if not isinstance(data, dict) or not isinstance(data.get("physicalGoldRate"), dict):
            raise UpstreamError("Invalid response structure from Groww API", source=ErrorSource.GROWW)
        return data

    async def fetch_gold_prices(self, city: str) -> GoldRates:
        """Fetch and normalize gold rates for ``city``.

        The vendor quotes per gram; 10g figures are derived as ``1g × 10`` and a
        missing 22k rate is derived as ``24k × 0.916``. Raises UpstreamError on any
        HTTP failure, malformed payload, or a zero/missing 24k price.
        """
        data = await self._fetch_payload()
        physical = data["physicalGoldRate"]

        match = resolve_city(city, physical)
        city_data = physical.get(match.key)
        if not isinstance(city_data, dict) or not isinstance(city_data.get("price"), dict):
            raise UpstreamError(f"Could not find price in city data for {match.key}", source=ErrorSource.GROWW)

        price = city_data["price"]
        gold_24k_1g = _to_decimal(price.get("TWENTY_FOUR"))
        if not gold_24k_1g:
            raise UpstreamError("Invalid 24k gold price extracted", source=ErrorSource.GROWW)
        gold_22k_1g = _to_decimal(price.get("TWENTY_TWO")) or gold_24k_1g * PURITY_22K

        change = city_data.get("percentageChange")
        if not isinstance(change, dict):
            change = {}
        change_24k = _percentage(change, "TWENTY_FOUR")
        change_22k = _percentage(change, "TWENTY_TWO")
        if change_22k is None:
            change_22k = change_24k

        trending = data.get("trendingCities")
        trending_cities = [str(c) for c in trending] if isinstance(trending, list) else []

        return GoldRates(
            gold_24k_1g=gold_24k_1g,
            gold_22k_1g=gold_22k_1g,
            gold_24k_10g=gold_24k_1g * GRAMS_PER_QUOTE,
            gold_22k_10g=gold_22k_1g * GRAMS_PER_QUOTE,
            location=city_data.get("priceLocation") or city,
            price_date=city_data.get("date") or dt.datetime.now(dt.timezone.utc).date().isoformat(),
            percentage_change_24k=change_24k,
            percentage_change_22k=change_22k,
            silver_1kg=_side_rate(data, "silverRate", match.key),
            copper=_side_rate(data, "copperRate", match.key),
            platinum=_side_rate(data, "platinumRate", match.key),
            trending_cities=trending_cities,
            gold_trend=parse_gold_trend(data, match.key, city),
        )
