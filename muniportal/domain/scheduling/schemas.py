"""Scheduling domain schemas"""

from datetime import date
from typing import Optional

from pydantic import BaseModel


class TimeSlotResponse(BaseModel):
    time: str
    end_time: Optional[str] = None
    is_booked: bool


class DaySlotsResponse(BaseModel):
    tile_id: str
    date: date
    booking_mode: str
    slot_duration_minutes: int
    is_available: bool
    slots: list[TimeSlotResponse]


class AvailableDatesResponse(BaseModel):
    tile_id: str
    available_days: list[str]
    max_advance_days: int
    dates: list[date]
