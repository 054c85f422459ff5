from datetime import datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from plantlog.core.exceptions import IncompleteScheduleError
from plantlog.plants.models import WateringScheduleType
from plantlog.plants.schedule import describe_schedule, next_watering_date

from tests.conftest import make_plant

UTC = timezone.utc
DAY0 = datetime(2024, 1, 1, 9, 0, tzinfo=UTC)  # a Monday


def test_rolls_forward_two_cycles():
    plant = make_plant(watering_interval_days=7, start_date=DAY0)
    reference = DAY0 + timedelta(days=10) - timedelta(hours=1)  # day 10, 08:00

    assert next_watering_date(plant, reference, UTC) == DAY0 + timedelta(days=14)


def test_anchor_time_of_day_is_replaced():
    plant = make_plant(
        watering_interval_days=3,
        start_date=datetime(2024, 1, 1, 18, 45, tzinfo=UTC),
        watering_time=time(7, 30),
    )
    reference = datetime(2024, 1, 2, 12, 0, tzinfo=UTC)

    assert next_watering_date(plant, reference, UTC) == datetime(2024, 1, 4, 7, 30, tzinfo=UTC)


def test_anchor_itself_is_used_when_still_in_the_future():
    plant = make_plant(watering_interval_days=7, start_date=datetime(2024, 1, 1, 6, 0, tzinfo=UTC))
    reference = datetime(2024, 1, 1, 7, 0, tzinfo=UTC)

    assert next_watering_date(plant, reference, UTC) == DAY0


def test_result_is_strictly_after_reference():
    plant = make_plant(watering_interval_days=7, start_date=DAY0)

    assert next_watering_date(plant, DAY0 + timedelta(days=7), UTC) == DAY0 + timedelta(days=14)


def test_anchor_far_in_the_past():
    plant = make_plant(watering_interval_days=1, start_date=DAY0 - timedelta(days=3 * 365))
    reference = datetime(2024, 1, 1, 10, 0, tzinfo=UTC)

    assert next_watering_date(plant, reference, UTC) == datetime(2024, 1, 2, 9, 0, tzinfo=UTC)


@pytest.mark.parametrize("interval", [1, 2, 3, 7, 10, 14, 30])
@pytest.mark.parametrize("offset_hours", [-5, 0, 1, 23, 24 * 9 + 3, 24 * 45])
def test_interval_result_is_smallest_occurrence_after_reference(interval, offset_hours):
    plant = make_plant(watering_interval_days=interval, start_date=DAY0)
    reference = DAY0 + timedelta(hours=offset_hours)

    result = next_watering_date(plant, reference, UTC)

    assert result > reference
    assert result.time() == time(9, 0)
    elapsed = (result - DAY0).days
    assert elapsed >= 0 and elapsed % interval == 0
    assert result == DAY0 or result - timedelta(days=interval) <= reference


def test_naive_reference_is_treated_as_utc():
    plant = make_plant(watering_interval_days=7, start_date=DAY0)

    assert next_watering_date(plant, datetime(2024, 1, 11, 8, 0), UTC) == datetime(2024, 1, 15, 9, 0, tzinfo=UTC)


def test_weekday_same_day_before_watering_time():
    plant = make_plant(schedule_type=WateringScheduleType.WEEKDAY, weekday=2)  # Monday
    reference = datetime(2024, 1, 1, 8, 0, tzinfo=UTC)

    assert next_watering_date(plant, reference, UTC) == datetime(2024, 1, 1, 9, 0, tzinfo=UTC)


def test_weekday_same_day_after_watering_time_moves_a_week():
    plant = make_plant(schedule_type=WateringScheduleType.WEEKDAY, weekday=2)
    reference = datetime(2024, 1, 1, 9, 0, tzinfo=UTC)

    assert next_watering_date(plant, reference, UTC) == datetime(2024, 1, 8, 9, 0, tzinfo=UTC)


def test_weekday_sunday_is_one():
    plant = make_plant(schedule_type=WateringScheduleType.WEEKDAY, weekday=1)
    reference = datetime(2024, 1, 1, 12, 0, tzinfo=UTC)

    result = next_watering_date(plant, reference, UTC)

    assert result == datetime(2024, 1, 7, 9, 0, tzinfo=UTC)
    assert result.strftime("%A") == "Sunday"


@pytest.mark.parametrize("weekday", range(1, 8))
@pytest.mark.parametrize("reference", [
    datetime(2024, 1, 3, 0, 0, tzinfo=UTC),
    datetime(2024, 2, 29, 9, 0, tzinfo=UTC),
    datetime(2024, 12, 31, 23, 59, tzinfo=UTC),
])
def test_weekday_is_soonest_match_after_reference(weekday, reference):
    plant = make_plant(schedule_type=WateringScheduleType.WEEKDAY, weekday=weekday, watering_time=time(9, 0))

    result = next_watering_date(plant, reference, UTC)

    assert result > reference
    assert result - reference <= timedelta(days=7)
    assert result.time() == time(9, 0)
    assert result.isoweekday() % 7 + 1 == weekday


def test_weekday_without_weekday_is_incomplete():
    plant = make_plant(schedule_type=WateringScheduleType.WEEKDAY, weekday=None)

    with pytest.raises(IncompleteScheduleError):
        next_watering_date(plant, DAY0, UTC)


def test_wall_clock_time_survives_dst_change():
    tz = ZoneInfo("America/New_York")
    plant = make_plant(
        watering_interval_days=1,
        start_date=datetime(2024, 3, 9, 9, 0, tzinfo=tz),
    )
    reference = datetime(2024, 3, 10, 10, 0, tzinfo=tz)

    result = next_watering_date(plant, reference, tz)

    assert (result.year, result.month, result.day) == (2024, 3, 11)
    assert (result.hour, result.minute) == (9, 0)
    assert result.utcoffset() == timedelta(hours=-4)


@pytest.mark.parametrize("kwargs, expected", [
    ({"watering_interval_days": 7}, "Every 7 days at 09:00"),
    ({"watering_interval_days": 1}, "Every day at 09:00"),
    ({"schedule_type": WateringScheduleType.WEEKDAY, "weekday": 2, "watering_time": time(18, 30)},
     "Every Monday at 18:30"),
    ({"schedule_type": WateringScheduleType.WEEKDAY, "weekday": None}, "Specific weekday at 09:00"),
])
def test_describe_schedule(kwargs, expected):
    assert describe_schedule(make_plant(**kwargs)) == expected
