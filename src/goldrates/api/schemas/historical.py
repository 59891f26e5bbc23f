import datetime as dt
from typing import Optional

from pydantic import BaseModel

from goldrates.domain.models import PricePoint


class HistoricalPointResponse(BaseModel):
    date: dt.date
    price: float
    timestamp: dt.datetime
    synthetic: bool


class HistoricalResponse(BaseModel):
    success: bool
    data: list[HistoricalPointResponse]
    days: Optional[int] = None
    count: Optional[int] = None
    error: Optional[str] = None


def to_point_response(point: PricePoint) -> HistoricalPointResponse:
    return HistoricalPointResponse(
        date=point.date,
        price=float(point.price),
        timestamp=point.timestamp,
        synthetic=point.synthetic,
    )
