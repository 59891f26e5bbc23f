"""Error types raised by the price subsystem."""

from goldrates.domain.enums import ErrorSource


class GoldRatesError(Exception):
    """Base class for all goldrates errors."""


class UpstreamError(GoldRatesError):
    """A vendor call failed: transport error, non-2xx, malformed payload, or missing price."""

    def __init__(self, message: str, source: ErrorSource, status_code: int | None = None) -> None:
        super().__init__(message)
        self.source = source
        self.status_code = status_code


class NoCacheAvailable(GoldRatesError):
    """Upstream failed and there is no previous payload to fall back to."""

    def __init__(self, city: str, cause: Exception | None = None) -> None:
        super().__init__(f"No cached prices for {city}")
        self.city = city
        self.cause = cause
