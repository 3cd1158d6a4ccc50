"""Tests for timestamp normalisation and the start-of-day boundary."""

import os
import time
from datetime import datetime, timezone
from zoneinfo import ZoneInfo

import pytest

from kitchen_queue.core.timeutils import coerce_timestamp, start_of_day
from kitchen_queue.services.order_store import OrderSnapshot
from kitchen_queue.services.queue.filter import select_visible_orders

UTC = timezone.utc
BERLIN = ZoneInfo("Europe/Berlin")

# Clocks go forward at 02:00 local on these days
SPRING_FORWARD = datetime(2024, 3, 31, 10, 0, tzinfo=UTC)
FALL_BACK = datetime(2024, 10, 27, 10, 0, tzinfo=UTC)


@pytest.fixture
def host_zone_berlin():
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset is not available on this platform")
    previous = os.environ.get("TZ")
    os.environ["TZ"] = "Europe/Berlin"
    time.tzset()
    if "CET" not in time.tzname:
        os.environ.pop("TZ")
        time.tzset()
        pytest.skip("host has no Europe/Berlin zone data")
    yield
    if previous is None:
        os.environ.pop("TZ", None)
    else:
        os.environ["TZ"] = previous
    time.tzset()


@pytest.mark.parametrize(
    "value, expected",
    [
        (datetime(2024, 5, 10, 12, 0), datetime(2024, 5, 10, 12, 0, tzinfo=UTC)),
        ("2024-05-10T12:00:00Z", datetime(2024, 5, 10, 12, 0, tzinfo=UTC)),
        ("2024-05-10T14:00:00+02:00", datetime(2024, 5, 10, 12, 0, tzinfo=UTC)),
        ("not a time", None),
        (12345, None),
        (None, None),
    ],
)
def test_coerce_timestamp(value, expected):
    assert coerce_timestamp(value) == expected


def test_start_of_day_in_named_zone():
    midnight = start_of_day(datetime(2024, 5, 10, 12, 0, tzinfo=UTC), BERLIN)
    assert midnight.astimezone(UTC) == datetime(2024, 5, 9, 22, 0, tzinfo=UTC)


@pytest.mark.parametrize(
    "now, expected",
    [
        (SPRING_FORWARD, datetime(2024, 3, 30, 23, 0, tzinfo=UTC)),
        (FALL_BACK, datetime(2024, 10, 26, 22, 0, tzinfo=UTC)),
    ],
)
def test_start_of_day_uses_midnight_offset_on_dst_days(now, expected):
    assert start_of_day(now, BERLIN).astimezone(UTC) == expected


@pytest.mark.parametrize(
    "now, expected",
    [
        (SPRING_FORWARD, datetime(2024, 3, 30, 23, 0, tzinfo=UTC)),
        (FALL_BACK, datetime(2024, 10, 26, 22, 0, tzinfo=UTC)),
    ],
)
def test_host_zone_start_of_day_on_dst_days(host_zone_berlin, now, expected):
    assert start_of_day(now).astimezone(UTC) == expected


def test_board_hides_previous_evening_on_dst_day(host_zone_berlin):
    late_yesterday = OrderSnapshot(
        id=1,
        order_number=1,
        created_at=datetime(2024, 3, 30, 22, 30, tzinfo=UTC),
        updated_at=datetime(2024, 3, 30, 22, 30, tzinfo=UTC),
    )
    this_morning = late_yesterday.evolve(
        id=2,
        order_number=2,
        created_at=datetime(2024, 3, 31, 7, 0, tzinfo=UTC),
    )
    assert select_visible_orders([late_yesterday, this_morning], SPRING_FORWARD) == [this_morning]
