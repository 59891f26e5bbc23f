"""Rolling daily history of the 24k gold price (per 10g) for charts."""

import datetime as dt
import logging
import random
from decimal import Decimal
from typing import Callable

from goldrates.domain.models import PricePoint, round_money

logger = logging.getLogger(__name__)

MAX_HISTORICAL_DAYS = 30
SEED_DAYS = 7
SEED_JITTER = Decimal("0.04")  # Total spread, i.e. ±2% around the real price


def _utc_now() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


class HistoricalPriceStore:
    """Bounded, date-indexed price series owned by the process.

    At most one point per calendar day (UTC); storing twice on the same day
    overwrites. When the series is too short to chart, it is seeded once with
    synthetic points jittered around the first real price.
    """

    def __init__(
        self,
        max_days: int = MAX_HISTORICAL_DAYS,
        seed_days: int = SEED_DAYS,
        clock: Callable[[], dt.datetime] = _utc_now,
        rng: random.Random | None = None,
    ) -> None:
        self._max_days = max_days
        self._seed_days = seed_days
        self._clock = clock
        self._rng = rng or random.Random()
        self._points: list[PricePoint] = []
        self._seeded = False

    def _seed(self, price: Decimal, now: dt.datetime) -> None:
        existing = {p.date for p in self._points}
        today = now.date()
        for offset in range(self._seed_days - 1, 0, -1):
            day = today - dt.timedelta(days=offset)
            if day in existing:
                continue
            variation = (Decimal(str(self._rng.random())) - Decimal("0.5")) * SEED_JITTER
            self._points.append(
                PricePoint(
                    date=day,
                    price=round_money(price * (1 + variation)),
                    timestamp=now - dt.timedelta(days=offset),
                    synthetic=True,
                )
            )
        self._seeded = True
        logger.info("Seeded price history with synthetic points around %s", price)

    def store_price(self, value: Decimal | float) -> PricePoint:
        """Record today's price, replacing any earlier value for today."""
        now = self._clock()
        price = round_money(value)

        if len(self._points) < self._seed_days and not self._seeded:
            self._seed(price, now)

        point = PricePoint(date=now.date(), price=price, timestamp=now)
        for index, existing in enumerate(self._points):
            if existing.date == point.date:
                self._points[index] = point
                break
        else:
            self._points.append(point)

        self._points.sort(key=lambda p: p.date)
        if len(self._points) > self._max_days:
            self._points = self._points[-self._max_days:]
        return point

    def get_historical_prices(self, days: int = MAX_HISTORICAL_DAYS) -> list[PricePoint]:
        """Points dated on or after ``today - days``."""
        cutoff = self._clock().date() - dt.timedelta(days=days)
        return [p for p in self._points if p.date >= cutoff]

    def get_all_historical_prices(self) -> list[PricePoint]:
        return list(self._points)

    def clear(self) -> None:
        self._points = []
        self._seeded = False

    def __len__(self) -> int:
        return len(self._points)
