"""API tests for /api/metals, /api/metals/all and /api/metals/{city}."""

from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import ASGITransport, AsyncClient

from goldrates.api.deps import get_price_service
from goldrates.api.main import app
from goldrates.domain.enums import ErrorSource, VariationType
from goldrates.domain.models import AllMetalPrices, GoldRates, GoldTrendPoint, MetalTicker
from goldrates.exceptions import UpstreamError
from goldrates.infra.cache.ttl_cache import TTLCache
from goldrates.infra.price.service import MetalPriceService


def _rates(price: str = "6789.456") -> GoldRates:
    p = Decimal(price)
    return GoldRates(
        gold_24k_1g=p,
        gold_22k_1g=p * Decimal("0.916"),
        gold_24k_10g=p * 10,
        gold_22k_10g=p * Decimal("0.916") * 10,
        location="Delhi",
        percentage_change_24k=0.5,
        trending_cities=["Delhi", "Mumbai"],
        gold_trend=[GoldTrendPoint(date="2026-02-01", price=Decimal("67000"))],
    )


def _ticker(rate: str, variation_type: VariationType = VariationType.UP) -> MetalTicker:
    return MetalTicker(
        rate=Decimal(rate), sell_rate=Decimal(rate) - 1, buy_rate=Decimal(rate) + 1,
        variation_type=variation_type, variation="10",
    )


ALL_METALS = AllMetalPrices(
    gold=_ticker("72500"), silver=_ticker("95000", VariationType.DOWN),
    platinum=_ticker("3100"), palladium=_ticker("3300"),
)


@pytest.fixture()
def gold_provider():
    provider = MagicMock()
    provider.fetch_gold_prices = AsyncMock(return_value=_rates())
    return provider


@pytest.fixture()
def ticker_provider():
    provider = MagicMock()
    provider.fetch_all_metal_prices = AsyncMock(return_value=ALL_METALS)
    return provider


@pytest.fixture()
def service(gold_provider, ticker_provider, history, city_cache, clock, calendar):
    return MetalPriceService(
        gold_provider=gold_provider,
        history=history,
        cache=city_cache,
        ticker_provider=ticker_provider,
        ticker_cache=TTLCache(ttl_seconds=60, max_keys=1, clock=clock),
        clock=calendar,
    )


@pytest.fixture()
async def client(service):
    app.dependency_overrides[get_price_service] = lambda: service
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


class TestMetalsByQuery:
    async def test_fresh_prices(self, client, gold_provider):
        res = await client.get("/api/metals", params={"city": "delhi"})

        assert res.status_code == 200
        data = res.json()
        assert data["gold_1g"] == 6789.46
        assert data["gold_10g"] == 67894.56
        assert data["cached"] is False
        assert data["city"] == "delhi"
        assert data["trendingCities"] == ["Delhi", "Mumbai"]
        assert data["goldTrend"] == [{"date": "2026-02-01", "price": 67000.0}]
        assert data["percentageChange24k"] == 0.5
        assert data["platinum"] == 3100.0
        assert data["platinumVariationType"] == "up"
        assert "error" not in data
        gold_provider.fetch_gold_prices.assert_awaited_once_with("delhi")

    async def test_default_city(self, client, gold_provider):
        res = await client.get("/api/metals")

        assert res.status_code == 200
        gold_provider.fetch_gold_prices.assert_awaited_once_with("delhi")

    async def test_second_request_is_cached(self, client):
        await client.get("/api/metals", params={"city": "delhi"})
        res = await client.get("/api/metals", params={"city": "delhi"})

        assert res.json()["cached"] is True

    async def test_derived_ticker_fields_on_wire(self, client):
        res = await client.get("/api/metals", params={"city": "delhi"})

        data = res.json()
        assert data["palladium_10g"] == 3300.0
        assert data["palladium_1g"] == 330.0
        assert data["platinumPercentageChange"] == 0.32
        assert data["palladiumPercentageChange"] == 0.3
        assert data["priceDate"] is None

    async def test_price_date_on_wire(self, client, gold_provider):
        gold_provider.fetch_gold_prices.return_value = _rates().model_copy(update={"price_date": "2026-03-01"})

        res = await client.get("/api/metals", params={"city": "delhi"})

        assert res.json()["priceDate"] == "2026-03-01"

    async def test_stale_fallback(self, client, gold_provider, clock):
        await client.get("/api/metals", params={"city": "delhi"})
        gold_provider.fetch_gold_prices.side_effect = UpstreamError("boom", source=ErrorSource.GROWW)
        clock.advance(601)

        res = await client.get("/api/metals", params={"city": "delhi"})

        assert res.status_code == 200
        data = res.json()
        assert data["cached"] is True
        assert data["error"]
        assert data["gold_10g"] == 67894.56

    async def test_no_cache_returns_503(self, client, gold_provider):
        gold_provider.fetch_gold_prices.side_effect = UpstreamError("boom", source=ErrorSource.GROWW)

        res = await client.get("/api/metals", params={"city": "zz"})

        assert res.status_code == 503
        data = res.json()
        assert data["gold_10g"] is None
        assert data["gold_1g"] is None
        assert data["cached"] is False
        assert data["error"]
        assert "errorDetails" not in data

    async def test_overlong_city_rejected(self, client):
        res = await client.get("/api/metals", params={"city": "x" * 65})
        assert res.status_code == 422


class TestMetalsByPath:
    async def test_city_from_path(self, client, gold_provider):
        res = await client.get("/api/metals/navi-mumbai")

        assert res.status_code == 200
        assert res.json()["city"] == "navi-mumbai"
        gold_provider.fetch_gold_prices.assert_awaited_once_with("navi-mumbai")

    async def test_path_and_query_share_cache(self, client, gold_provider):
        await client.get("/api/metals", params={"city": "Navi Mumbai"})
        res = await client.get("/api/metals/navi-mumbai")

        assert res.json()["cached"] is True
        assert gold_provider.fetch_gold_prices.await_count == 1

    async def test_cached_response_echoes_path_city(self, client, gold_provider):
        await client.get("/api/metals", params={"city": "Navi Mumbai"})
        res = await client.get("/api/metals/navi-mumbai")

        assert res.json()["city"] == "navi-mumbai"

    async def test_overlong_path_city_rejected(self, client, gold_provider):
        res = await client.get("/api/metals/" + "x" * 65)

        assert res.status_code == 422
        gold_provider.fetch_gold_prices.assert_not_awaited()


class TestAllMetals:
    async def test_ticker(self, client):
        res = await client.get("/api/metals/all")

        assert res.status_code == 200
        data = res.json()
        assert data["success"] is True
        assert set(data["data"]) == {"gold", "silver", "platinum", "palladium"}
        assert data["data"]["gold"] == {
            "rate": 72500.0,
            "sellRate": 72499.0,
            "buyRate": 72501.0,
            "variationType": "up",
            "variation": "10",
        }
        assert data["data"]["silver"]["variationType"] == "down"
        assert "updated_at" in data

    async def test_ticker_failure_returns_500(self, client, ticker_provider):
        ticker_provider.fetch_all_metal_prices.side_effect = UpstreamError(
            "Ebullion API error: 502", source=ErrorSource.EBULLION, status_code=502
        )

        res = await client.get("/api/metals/all")

        assert res.status_code == 500
        data = res.json()
        assert data["success"] is False
        assert data["error"] == "Ebullion API error: 502"
        assert "data" not in data


class TestHealth:
    async def test_health(self, client):
        res = await client.get("/api/health")
        assert res.status_code == 200
        assert res.json()["status"] == "ok"
