"""Metals API router — city gold prices and the all-metals ticker."""

import datetime as dt
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query
from starlette.responses import JSONResponse

from goldrates.api.deps import get_price_service
from goldrates.api.schemas.metals import AllMetalsResponse, to_all_metals_data, to_metals_response
from goldrates.config import settings
from goldrates.exceptions import UpstreamError
from goldrates.infra.price.service import MetalPriceService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/metals", tags=["metals"])

ServiceDep = Annotated[MetalPriceService, Depends(get_price_service)]


async def _city_response(service: MetalPriceService, city: str) -> JSONResponse:
    result = await service.get_city_prices(city)
    body = to_metals_response(result.payload).to_json()
    return JSONResponse(status_code=result.status_code, content=body)


@router.get("")
async def get_metal_prices(
    service: ServiceDep,
    city: str = Query(settings.default_city, max_length=64, description="City slug, e.g. navi-mumbai"),
) -> JSONResponse:
    return await _city_response(service, city.strip() or settings.default_city)


@router.get("/all")
async def get_all_metal_prices(service: ServiceDep) -> JSONResponse:
    """Spot ticker for gold, silver, platinum and palladium."""
    now = dt.datetime.now(dt.timezone.utc)
    try:
        prices = await service.get_all_metal_prices()
    except UpstreamError as exc:
        logger.warning("All-metals ticker failed: %s", exc)
        body = AllMetalsResponse(success=False, error=str(exc), updated_at=now)
        return JSONResponse(status_code=500, content=body.model_dump(mode="json", exclude_none=True))

    body = AllMetalsResponse(success=True, data=to_all_metals_data(prices), updated_at=now)
    return JSONResponse(status_code=200, content=body.model_dump(mode="json", exclude_none=True))


@router.get("/{city}")
async def get_city_metal_prices(
    service: ServiceDep,
    city: str = Path(..., max_length=64, description="City slug, e.g. navi-mumbai"),
) -> JSONResponse:
    return await _city_response(service, city.strip() or settings.default_path_city)
