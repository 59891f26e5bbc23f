import datetime as dt
import random

import pytest

from goldrates.infra.cache.ttl_cache import TTLCache
from goldrates.infra.history.store import HistoricalPriceStore


class FakeClock:
    """Monotonic seconds counter that tests advance by hand."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeCalendar:
    """UTC wall clock that tests move forward day by day."""

    def __init__(self, start: dt.datetime | None = None) -> None:
        self.now = start or dt.datetime(2026, 3, 1, 9, 30, tzinfo=dt.timezone.utc)

    def __call__(self) -> dt.datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += dt.timedelta(**kwargs)


@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def calendar() -> FakeCalendar:
    return FakeCalendar()


@pytest.fixture()
def city_cache(clock) -> TTLCache:
    return TTLCache(ttl_seconds=600, max_keys=16, clock=clock)


@pytest.fixture()
def history(calendar) -> HistoricalPriceStore:
    return HistoricalPriceStore(clock=calendar, rng=random.Random(42))
