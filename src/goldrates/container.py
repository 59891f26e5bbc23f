from dependency_injector import containers, providers

from goldrates.config import Settings
from goldrates.infra.cache.ttl_cache import TTLCache
from goldrates.infra.history.store import HistoricalPriceStore
from goldrates.infra.http.rate_limited_client import RateLimitedClient
from goldrates.infra.price.ebullion import EbullionProvider
from goldrates.infra.price.groww import GrowwGoldProvider
from goldrates.infra.price.service import MetalPriceService


class Container(containers.DeclarativeContainer):
    wiring_config = containers.WiringConfiguration(modules=["goldrates.api.deps"])

    settings = providers.Singleton(Settings)

    http_client = providers.Singleton(
        RateLimitedClient,
        rate_per_second=settings.provided.http_rate_per_second,
        timeout=settings.provided.http_timeout,
    )

    gold_provider = providers.Singleton(
        GrowwGoldProvider,
        http_client=http_client,
        base_url=settings.provided.groww_url,
    )

    ticker_provider = providers.Singleton(
        EbullionProvider,
        http_client=http_client,
        base_url=settings.provided.ebullion_url,
    )

    city_cache = providers.Singleton(
        TTLCache,
        ttl_seconds=settings.provided.cache_ttl_seconds,
        max_keys=settings.provided.max_cached_cities,
    )

    ticker_cache = providers.Singleton(
        TTLCache,
        ttl_seconds=settings.provided.ticker_cache_ttl_seconds,
        max_keys=1,
    )

    history = providers.Singleton(
        HistoricalPriceStore,
        max_days=settings.provided.history_max_days,
        seed_days=settings.provided.history_seed_days,
    )

    price_service = providers.Singleton(
        MetalPriceService,
        gold_provider=gold_provider,
        history=history,
        cache=city_cache,
        ticker_provider=ticker_provider,
        ticker_cache=ticker_cache,
        enrich_with_ticker=settings.provided.enrich_with_ticker,
        include_error_details=settings.provided.debug,
        default_city=settings.provided.default_city,
    )
