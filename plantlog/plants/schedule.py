"""Next-watering-date calculation.

Deterministic date math over a plant's schedule fields. Interval schedules roll
forward from the anchor (`start_date`) one interval at a time; weekday
schedules pick the next matching weekday. All day arithmetic happens on local
calendar dates in the configured timezone so the watering time of day stays
fixed across DST transitions.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone, tzinfo
from typing import Optional

from plantlog.core.config import get_settings
from plantlog.core.exceptions import IncompleteScheduleError
from plantlog.plants.models import Plant, WateringScheduleType


# 1 = Sunday ... 7 = Saturday
WEEKDAY_NAMES = {
    1: "Sunday",
    2: "Monday",
    3: "Tuesday",
    4: "Wednesday",
    5: "Thursday",
    6: "Friday",
    7: "Saturday",
}


def _aware(dt: datetime) -> datetime:
    """Treat naive datetimes as UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def _python_weekday(weekday: int) -> int:
    """Convert 1 = Sunday numbering to datetime.weekday() (0 = Monday)."""
    return (weekday - 2) % 7


def _at_time(day, plant: Plant, tz: tzinfo) -> datetime:
    return datetime.combine(day, plant.watering_time.replace(second=0, microsecond=0), tzinfo=tz)


def next_watering_date(
    plant: Plant,
    reference: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
) -> datetime:
    """
    Return the next watering instant strictly after `reference`.

    Raises IncompleteScheduleError for a weekday schedule with no weekday.
    """
    tz = tz or get_settings().tz
    reference = _aware(reference or datetime.now(timezone.utc)).astimezone(tz)

    if plant.schedule_type == WateringScheduleType.WEEKDAY:
        if plant.weekday is None:
            raise IncompleteScheduleError(f"Plant {plant.id} has a weekday schedule without a weekday")
        target = _python_weekday(plant.weekday)
        day = reference.date() + timedelta(days=(target - reference.weekday()) % 7)
        candidate = _at_time(day, plant, tz)
        if candidate <= reference:
            candidate = _at_time(day + timedelta(days=7), plant, tz)
        return candidate

    interval = plant.watering_interval_days
    if interval < 1:
        raise ValueError("watering_interval_days must be at least 1")

    anchor_day = _aware(plant.start_date).astimezone(tz).date()
    elapsed = 0
    candidate = _at_time(anchor_day, plant, tz)
    while candidate <= reference:
        elapsed += interval
        candidate = _at_time(anchor_day + timedelta(days=elapsed), plant, tz)
    return candidate


def describe_schedule(plant: Plant) -> str:
    """Human readable cadence, e.g. "Every 7 days at 09:00"."""
    at = plant.watering_time.strftime("%H:%M")
    if plant.schedule_type == WateringScheduleType.WEEKDAY:
        if plant.weekday in WEEKDAY_NAMES:
            return f"Every {WEEKDAY_NAMES[plant.weekday]} at {at}"
        return f"Specific weekday at {at}"
    if plant.watering_interval_days == 1:
        return f"Every day at {at}"
    return f"Every {plant.watering_interval_days} days at {at}"

