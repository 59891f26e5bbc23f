from goldrates.domain.models.prices import (
    AllMetalPrices,
    CityMatch,
    CityPrices,
    GoldRates,
    GoldTrendPoint,
    MetalTicker,
    PricePoint,
    round_money,
)

__all__ = [
    "AllMetalPrices",
    "CityMatch",
    "CityPrices",
    "GoldRates",
    "GoldTrendPoint",
    "MetalTicker",
    "PricePoint",
    "round_money",
]
