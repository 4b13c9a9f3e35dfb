"""Scheduling service - Daily slot availability for bookable service tiles"""

import logging
from datetime import date

from fastapi import HTTPException
from sqlalchemy.orm import Session

from .repository import SchedulingRepository
from .slots import (
    TIME_PERIOD,
    BookedSlot,
    TimeSlotConfig,
    generate_time_slots,
    get_available_dates,
    is_date_available,
)

logger = logging.getLogger(__name__)


class SchedulingService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = SchedulingRepository()

    def _get_bookable_tile(self, tile_id: str):
        tile = self.repo.get_tile(self.db, tile_id)
        if not tile:
            raise HTTPException(status_code=404, detail="Service not found")
        if not tile.has_time_slots:
            raise HTTPException(
                status_code=400, detail="This service does not offer time slot booking"
            )
        return tile

    def _load_config(self, tile) -> TimeSlotConfig:
        try:
            return TimeSlotConfig.from_dict(tile.time_slot_config)
        except (TypeError, ValueError) as e:
            logger.error(f"❌ Invalid time slot config on tile {tile.id}: {e}")
            raise HTTPException(
                status_code=422, detail="This service's booking hours are misconfigured"
            ) from e

    def get_day_slots(self, tile_id: str, day: date, today: date) -> dict:
        tile = self._get_bookable_tile(tile_id)
        config = self._load_config(tile)
        booking_mode = tile.booking_mode or TIME_PERIOD

        available = is_date_available(config, day, today)
        slots = []
        if available:
            bookings = self.repo.get_bookings_for_day(self.db, tile_id, day)
            booked = [
                BookedSlot(start_time=b.booking_start_time, end_time=b.booking_end_time)
                for b in bookings
            ]
            try:
                slots = generate_time_slots(config, booking_mode, booked)
            except ValueError as e:
                logger.error(f"❌ Invalid time slot config on tile {tile_id}: {e}")
                raise HTTPException(
                    status_code=422, detail="This service's booking hours are misconfigured"
                ) from e
            logger.debug(
                f"📅 Tile {tile_id} on {day.isoformat()}: {len(slots)} slots, {len(booked)} booked"
            )

        return {
            "tile_id": tile_id,
            "date": day,
            "booking_mode": booking_mode,
            "slot_duration_minutes": config.slot_duration_minutes,
            "is_available": available,
            "slots": [
                {"time": s.time, "end_time": s.end_time, "is_booked": s.is_booked} for s in slots
            ],
        }

    def get_available_dates(self, tile_id: str, today: date) -> dict:
        tile = self._get_bookable_tile(tile_id)
        config = self._load_config(tile)
        return {
            "tile_id": tile_id,
            "available_days": list(config.available_days),
            "max_advance_days": config.max_advance_days,
            "dates": get_available_dates(config, today),
        }
