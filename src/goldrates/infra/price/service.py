"""MetalPriceService — orchestrates city price lookups with TTL caching and stale fallback."""

import asyncio
import datetime as dt
import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Callable

from goldrates.domain.enums import ErrorSource
from goldrates.domain.models import (
    AllMetalPrices,
    CityPrices,
    GoldRates,
    GoldTrendPoint,
    MetalTicker,
    PricePoint,
    round_money,
)
from goldrates.exceptions import NoCacheAvailable, UpstreamError
from goldrates.infra.cache.ttl_cache import TTLCache
from goldrates.infra.history.store import HistoricalPriceStore
from goldrates.infra.price.city_resolver import canonical_city_key
from goldrates.infra.price.ebullion import EbullionProvider
from goldrates.infra.price.groww import GrowwGoldProvider

logger = logging.getLogger(__name__)

STALE_WARNING = "Live prices temporarily unavailable. Using cached data."
UNAVAILABLE_MESSAGE = "Live prices temporarily unavailable. Please try again later."

TICKER_CACHE_KEY = "all"
MIN_HISTORY_POINTS = 2
TREND_HISTORY_DAYS = 30


def _utc_now() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


def variation_percent(ticker: MetalTicker) -> float | None:
    """Day change as a percentage of the previous rate, ``variation / (rate - variation) * 100``."""
    try:
        variation = Decimal(ticker.variation)
    except InvalidOperation:
        return None
    if not variation.is_finite() or not variation or not ticker.rate:
        return None
    previous = ticker.rate - variation
    if not previous:
        return None
    return round(float(variation / previous * 100), 2)


@dataclass(frozen=True)
class PriceResult:
    """Assembled payload plus the HTTP status it should be served with."""

    payload: CityPrices
    status_code: int = 200


class MetalPriceService:
    """Price orchestrator: cache lookup → provider fetch → history + cache store.

    On upstream failure the last cached payload is served (even if expired),
    tagged ``cached=True`` with a warning; with nothing cached the result is a
    503 payload with null prices and the cache is left untouched. Concurrent
    misses for the same city share a single upstream call.
    """

    def __init__(
        self,
        gold_provider: GrowwGoldProvider,
        history: HistoricalPriceStore,
        cache: TTLCache[CityPrices],
        ticker_provider: EbullionProvider | None = None,
        ticker_cache: TTLCache[AllMetalPrices] | None = None,
        enrich_with_ticker: bool = True,
        include_error_details: bool = False,
        default_city: str = "delhi",
        clock: Callable[[], dt.datetime] = _utc_now,
    ) -> None:
        self._gold = gold_provider
        self._history = history
        self._cache = cache
        self._ticker = ticker_provider
        self._ticker_cache = ticker_cache
        self._enrich_with_ticker = enrich_with_ticker
        self._include_error_details = include_error_details
        self._default_city = default_city
        self._clock = clock
        self._inflight: dict[str, asyncio.Task[CityPrices]] = {}

    async def get_city_prices(self, city: str) -> PriceResult:
        """Get the price payload for ``city``, applying the stale-on-error policy."""
        key = canonical_city_key(city) or canonical_city_key(self._default_city)

        # 1. Fresh cache hit
        cached = self._cache.get(key)
        if cached is not None and self._cache.is_valid(key):
            return PriceResult(cached.model_copy(update={"cached": True, "city": city}))

        # 2. Miss or stale: fetch, shared with any concurrent request for this key
        try:
            fresh = await self._fetch_shared(key, city)
            if fresh.city != city:
                fresh = fresh.model_copy(update={"city": city})
            return PriceResult(fresh)
        except UpstreamError as exc:
            logger.warning("Upstream %s failed for %s: %s", exc.source.value, key, exc)
            failure: Exception = exc
        except Exception as exc:
            logger.exception("Unexpected error assembling prices for %s", key)
            failure = exc

        # 3. Fallback to whatever we served last
        try:
            return PriceResult(self._stale_fallback(key, city, failure))
        except NoCacheAvailable:
            logger.error("No cached prices for %s, returning 503", key)
            return PriceResult(self._unavailable(city, failure), status_code=503)

    def _stale_fallback(self, key: str, city: str, failure: Exception) -> CityPrices:
        stale = self._cache.get(key)
        if stale is None:
            raise NoCacheAvailable(key, cause=failure)
        logger.info("Serving stale prices for %s (age %.0fs)", key, self._cache.age(key) or 0)
        return stale.model_copy(update={"cached": True, "city": city, "error": STALE_WARNING})

    def _unavailable(self, city: str, failure: Exception) -> CityPrices:
        return CityPrices(
            city=city,
            updated_at=self._clock(),
            cached=False,
            trending_cities=[],
            error=UNAVAILABLE_MESSAGE,
            error_details=str(failure) if self._include_error_details else None,
        )

    async def _fetch_shared(self, key: str, city: str) -> CityPrices:
        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._fetch_and_store(key, city))
            self._inflight[key] = task
            task.add_done_callback(lambda done, k=key: self._forget(k, done))
        return await asyncio.shield(task)

    def _forget(self, key: str, task: asyncio.Task) -> None:
        if self._inflight.get(key) is task:
            del self._inflight[key]

    async def _fetch_and_store(self, key: str, city: str) -> CityPrices:
        rates = await self._gold.fetch_gold_prices(city)
        ticker = await self._ticker_for_enrichment()
        payload = self._assemble(city, rates, ticker)

        if payload.gold_10g is not None:
            self._history.store_price(payload.gold_10g)
        self._cache.set(key, payload)
        logger.info("Fetched fresh prices for %s: 24k 1g=%s, 10g=%s", key, payload.gold_1g, payload.gold_10g)
        return payload

    async def _ticker_for_enrichment(self) -> AllMetalPrices | None:
        if not self._enrich_with_ticker or self._ticker is None:
            return None
        try:
            return await self.get_all_metal_prices()
        except UpstreamError as exc:
            logger.warning("Metal ticker unavailable, skipping platinum/palladium: %s", exc)
            return None

    def _trend_from_history(self) -> list[GoldTrendPoint] | None:
        points = self._history.get_historical_prices(TREND_HISTORY_DAYS)
        if not points:
            return None
        logger.info("Vendor sent no gold trend, using %d stored history points", len(points))
        return [GoldTrendPoint(date=p.date, price=p.price) for p in points]

    def _assemble(self, city: str, rates: GoldRates, ticker: AllMetalPrices | None) -> CityPrices:
        platinum = rates.platinum
        if platinum is None and ticker is not None:
            platinum = ticker.platinum.rate
        platinum = round_money(platinum)

        # Ticker palladium is quoted per 10 grams
        palladium_10g = round_money(ticker.palladium.rate) if ticker else None

        return CityPrices(
            city=city,
            location=rates.location,
            gold_10g=round_money(rates.gold_24k_10g),
            gold_1g=round_money(rates.gold_24k_1g),
            gold_22k_10g=round_money(rates.gold_22k_10g),
            gold_22k_1g=round_money(rates.gold_22k_1g),
            silver_1kg=round_money(rates.silver_1kg),
            copper=round_money(rates.copper),
            platinum=platinum,
            platinum_10g=round_money(platinum * 10) if platinum is not None else None,
            platinum_variation_type=ticker.platinum.variation_type if ticker else None,
            platinum_variation=ticker.platinum.variation if ticker else None,
            platinum_percentage_change=variation_percent(ticker.platinum) if ticker else None,
            palladium=palladium_10g,
            palladium_1g=round_money(ticker.palladium.rate / 10) if ticker else None,
            palladium_10g=palladium_10g,
            palladium_variation_type=ticker.palladium.variation_type if ticker else None,
            palladium_variation=ticker.palladium.variation if ticker else None,
            palladium_percentage_change=variation_percent(ticker.palladium) if ticker else None,
            percentage_change_24k=rates.percentage_change_24k,
            percentage_change_22k=rates.percentage_change_22k,
            price_date=rates.price_date,
            updated_at=self._clock(),
            cached=False,
            source="groww",
            trending_cities=rates.trending_cities,
            gold_trend=rates.gold_trend or self._trend_from_history(),
        )

    async def get_all_metal_prices(self) -> AllMetalPrices:
        """All-metals ticker, cached briefly. Raises UpstreamError on failure."""
        if self._ticker is None:
            raise UpstreamError("Metal ticker provider not configured", source=ErrorSource.EBULLION)

        if self._ticker_cache is not None:
            cached = self._ticker_cache.get(TICKER_CACHE_KEY)
            if cached is not None and self._ticker_cache.is_valid(TICKER_CACHE_KEY):
                return cached

        prices = await self._ticker.fetch_all_metal_prices()
        if self._ticker_cache is not None:
            self._ticker_cache.set(TICKER_CACHE_KEY, prices)
        return prices

    async def ensure_history(self, days: int) -> list[PricePoint]:
        """History for the last ``days``; triggers a live fetch when too sparse to chart."""
        points = self._history.get_historical_prices(days)
        if len(points) >= MIN_HISTORY_POINTS:
            return points

        result = await self.get_city_prices(self._default_city)
        if result.payload.error is None and result.payload.gold_10g is not None:
            self._history.store_price(result.payload.gold_10g)
        return self._history.get_historical_prices(days)
