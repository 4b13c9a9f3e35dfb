"""Scheduling repository - Service tiles and the bookings already made against them"""

from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from ...models import ServiceApplication, ServiceTile

# Bookings in these statuses no longer hold their slot
RELEASED_STATUSES = ("cancelled", "denied", "rejected", "withdrawn", "expired")


class SchedulingRepository:
    @staticmethod
    def get_tile(db: Session, tile_id: str) -> Optional[ServiceTile]:
        return (
            db.query(ServiceTile)
            .filter(ServiceTile.id == tile_id, ServiceTile.is_active.is_(True))
            .first()
        )

    @staticmethod
    def get_bookings_for_day(db: Session, tile_id: str, day: date) -> list[ServiceApplication]:
        """Service applications holding a slot on ``day``, earliest first"""
        return (
            db.query(ServiceApplication)
            .filter(
                ServiceApplication.tile_id == tile_id,
                ServiceApplication.booking_date == day,
                ServiceApplication.booking_start_time.isnot(None),
                ServiceApplication.status.notin_(RELEASED_STATUSES),
            )
            .order_by(ServiceApplication.booking_start_time.asc())
            .all()
        )
