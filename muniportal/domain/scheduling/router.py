"""Scheduling router - Public slot availability for bookable services"""

import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ...database import get_db
from .schemas import AvailableDatesResponse, DaySlotsResponse
from .service import SchedulingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/scheduling", tags=["Scheduling"])


def get_scheduling_service(db: Session = Depends(get_db)) -> SchedulingService:
    """Dependency injection for SchedulingService"""
    return SchedulingService(db)


@router.get("/tiles/{tile_id}/slots", response_model=DaySlotsResponse)
async def get_day_slots(
    tile_id: str,
    day: str = Query(..., alias="date", description="YYYY-MM-DD"),
    service: SchedulingService = Depends(get_scheduling_service),
):
    """Time slots for one day, with already-booked slots flagged"""
    try:
        selected = date.fromisoformat(day)
    except ValueError:
        raise HTTPException(
            status_code=400, detail="Invalid date format. Expected YYYY-MM-DD"
        ) from None

    return service.get_day_slots(tile_id, selected, date.today())


@router.get("/tiles/{tile_id}/available-dates", response_model=AvailableDatesResponse)
async def get_available_dates(
    tile_id: str,
    service: SchedulingService = Depends(get_scheduling_service),
):
    """Dates inside the advance booking window that fall on a bookable weekday"""
    return service.get_available_dates(tile_id, date.today())
