"""
Time slot generation for bookable municipal services

Slots are generated for one calendar day from the tile's business hours. The loop
advances by the booking interval, which in start-time mode may be shorter than the
slot duration, so offered slots can overlap. Times are wall-clock "HH:MM" strings
with no timezone conversion.
"""

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable, Optional

TIME_PERIOD = "time_period"
START_TIME = "start_time"
BOOKING_MODES = (TIME_PERIOD, START_TIME)

DEFAULT_START_TIME = "09:00"
DEFAULT_END_TIME = "17:00"
DEFAULT_SLOT_DURATION_MINUTES = 60
DEFAULT_START_TIME_INTERVAL_MINUTES = 30
DEFAULT_MAX_ADVANCE_DAYS = 30

WEEKDAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")

MINUTES_PER_DAY = 24 * 60


@dataclass(frozen=True)
class TimeSlotConfig:
    start_time: str = DEFAULT_START_TIME
    end_time: str = DEFAULT_END_TIME
    slot_duration_minutes: int = DEFAULT_SLOT_DURATION_MINUTES
    start_time_interval_minutes: int = DEFAULT_START_TIME_INTERVAL_MINUTES
    available_days: tuple = ()
    max_advance_days: int = DEFAULT_MAX_ADVANCE_DAYS

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "TimeSlotConfig":
        """Build from a tile's stored JSON config; missing or empty values use defaults"""
        data = data or {}
        return cls(
            start_time=data.get("start_time") or DEFAULT_START_TIME,
            end_time=data.get("end_time") or DEFAULT_END_TIME,
            slot_duration_minutes=int(
                data.get("slot_duration_minutes") or DEFAULT_SLOT_DURATION_MINUTES
            ),
            start_time_interval_minutes=int(
                data.get("start_time_interval_minutes") or DEFAULT_START_TIME_INTERVAL_MINUTES
            ),
            available_days=tuple(data.get("available_days") or ()),
            max_advance_days=int(data.get("max_advance_days") or DEFAULT_MAX_ADVANCE_DAYS),
        )


@dataclass(frozen=True)
class BookedSlot:
    start_time: str
    end_time: Optional[str] = None


@dataclass(frozen=True)
class TimeSlot:
    time: str
    end_time: Optional[str]
    is_booked: bool


def parse_hhmm(value: str) -> int:
    """Minutes since midnight for an "HH:MM" (or "HH:MM:SS") string"""
    try:
        hours, minutes = value.strip().split(":")[:2]
        total = int(hours) * 60 + int(minutes)
    except (AttributeError, ValueError):
        raise ValueError(f"Invalid time '{value}'. Expected HH:MM") from None
    if not 0 <= total <= MINUTES_PER_DAY:
        raise ValueError(f"Invalid time '{value}'. Expected HH:MM")
    return total


def format_hhmm(minutes: int) -> str:
    minutes %= MINUTES_PER_DAY
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def _overlaps(slot_start: int, slot_end: int, booked: BookedSlot) -> bool:
    booked_start = parse_hhmm(booked.start_time)
    booked_end = parse_hhmm(booked.end_time) if booked.end_time else booked_start
    return booked_start < slot_end and booked_end > slot_start


def generate_time_slots(
    config: TimeSlotConfig,
    booking_mode: str = TIME_PERIOD,
    booked_slots: Iterable[BookedSlot] = (),
) -> list[TimeSlot]:
    """
    Candidate slots from ``start_time`` up to (not including) ``end_time``.

    time_period: step and length are the slot duration; a slot is booked when its
    [start, start + duration) interval overlaps a booking.
    start_time: step is the start-time interval; a slot is booked only when a booking
    starts at exactly the same time.
    """
    if booking_mode not in BOOKING_MODES:
        raise ValueError(f"Unknown booking mode: {booking_mode}")

    duration = config.slot_duration_minutes
    interval = config.start_time_interval_minutes if booking_mode == START_TIME else duration
    if duration <= 0 or interval <= 0:
        raise ValueError("Slot duration and interval must be positive")

    booked = list(booked_slots)
    start = parse_hhmm(config.start_time)
    end = parse_hhmm(config.end_time)

    slots = []
    current = start
    while current < end:
        slot_end = current + duration
        if booking_mode == TIME_PERIOD:
            is_booked = any(_overlaps(current, slot_end, b) for b in booked)
            end_time = format_hhmm(slot_end)
        else:
            is_booked = any(parse_hhmm(b.start_time) == current for b in booked)
            end_time = None

        slots.append(TimeSlot(time=format_hhmm(current), end_time=end_time, is_booked=is_booked))
        current += interval

    return slots


def weekday_name(day: date) -> str:
    return WEEKDAY_NAMES[day.weekday()]


def is_date_available(config: TimeSlotConfig, day: date, today: date) -> bool:
    """Bookable weekday, not in the past, and within the advance booking window"""
    if weekday_name(day) not in config.available_days:
        return False
    return today <= day <= today + timedelta(days=config.max_advance_days)


def get_available_dates(config: TimeSlotConfig, today: date) -> list[date]:
    return [
        today + timedelta(days=offset)
        for offset in range(config.max_advance_days + 1)
        if is_date_available(config, today + timedelta(days=offset), today)
    ]
