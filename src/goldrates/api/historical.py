import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from starlette.responses import JSONResponse

from goldrates.api.deps import get_price_service
from goldrates.api.schemas.historical import HistoricalResponse, to_point_response
from goldrates.config import settings
from goldrates.infra.price.service import MetalPriceService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/historical", tags=["historical"])

ServiceDep = Annotated[MetalPriceService, Depends(get_price_service)]


@router.get("")
async def get_historical_prices(
    service: ServiceDep,
    days: int = Query(30, description="Window in days; clamped to 1..30"),
) -> JSONResponse:
    valid_days = min(max(days, 1), settings.history_max_days)
    try:
        points = await service.ensure_history(valid_days)
    except Exception:
        logger.exception("Failed to load historical prices")
        body = HistoricalResponse(success=False, data=[], error="Failed to fetch historical data")
        return JSONResponse(status_code=500, content=body.model_dump(mode="json", exclude_none=True))

    body = HistoricalResponse(
        success=True,
        data=[to_point_response(p) for p in points],
        days=valid_days,
        count=len(points),
    )
    return JSONResponse(status_code=200, content=body.model_dump(mode="json", exclude_none=True))
