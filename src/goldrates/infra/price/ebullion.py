"""Ebullion ticker provider — spot rates for gold, silver, platinum and palladium."""

import logging

import httpx
from pydantic import ValidationError

from goldrates.domain.enums import ErrorSource
from goldrates.domain.models import AllMetalPrices
from goldrates.exceptions import UpstreamError
from goldrates.infra.http.rate_limited_client import RateLimitedClient

logger = logging.getLogger(__name__)

BASE_URL = "https://api.ebullion.in/price/getallmetaltickerfeed"

HEADERS: dict[str, str] = {
    "accept": "application/json, text/plain, */*",
    "accept-language": "en-US,en;q=0.9",
    "cache-control": "no-cache",
    "origin": "https://www.ebullion.in",
    "pragma": "no-cache",
    "referer": "https://www.ebullion.in/",
    "user-agent": (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/144.0.0.0 Safari/537.36"
    ),
}


class EbullionProvider:
    """Fetch the all-metals ticker feed. Single attempt, no retries."""

    def __init__(self, http_client: RateLimitedClient, base_url: str = BASE_URL) -> None:
        self._http = http_client
        self._base_url = base_url

    async def fetch_all_metal_prices(self) -> AllMetalPrices:
        try:
            response = await self._http.get(self._base_url, headers=HEADERS)
        except httpx.HTTPError as exc:
            raise UpstreamError(f"Ebullion request failed: {exc}", source=ErrorSource.EBULLION) from exc

        if response.status_code < 200 or response.status_code >= 300:
            raise UpstreamError(
                f"Ebullion API error: {response.status_code}",
                source=ErrorSource.EBULLION,
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise UpstreamError("Ebullion returned invalid JSON", source=ErrorSource.EBULLION) from exc

        data = payload.get("data") if isinstance(payload, dict) else None
        if not data:
            raise UpstreamError("Invalid response format from Ebullion API", source=ErrorSource.EBULLION)

        try:
            return AllMetalPrices.model_validate(data)
        except ValidationError as exc:
            logger.warning("Ebullion ticker failed validation: %s", exc)
            raise UpstreamError("Invalid metal ticker data from Ebullion API", source=ErrorSource.EBULLION) from exc
