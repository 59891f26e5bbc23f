from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    groww_url: str = "https://groww.in/v1/api/physicalGold/v1/rates/aggregated_api"
    ebullion_url: str = "https://api.ebullion.in/price/getallmetaltickerfeed"
    http_timeout: float = 15.0
    http_rate_per_second: float = 5.0
    cache_ttl_minutes: float = 10.0
    ticker_cache_ttl_seconds: float = 60.0
    max_cached_cities: int = 256
    history_max_days: int = 30
    history_seed_days: int = 7
    default_city: str = "delhi"
    default_path_city: str = "mumbai"
    enrich_with_ticker: bool = True  # Merge platinum/palladium from the ticker feed
    debug: bool = False

    @property
    def cache_ttl_seconds(self) -> float:
        return self.cache_ttl_minutes * 60

    class Config:
        env_file = ".env"


settings = Settings()
