from datetime import date, datetime, time, timezone

import pytest

from app.utils.intervals import (
    Interval,
    at,
    day_bounds,
    overlaps,
    parse_time,
    time_str_to_minutes,
    to_local,
    weekday_index,
)


def test_touching_intervals_do_not_overlap():
    a = Interval(datetime(2030, 1, 7, 9), datetime(2030, 1, 7, 10))
    b = Interval(datetime(2030, 1, 7, 10), datetime(2030, 1, 7, 11))
    assert not a.overlaps(b)
    assert not b.overlaps(a)


def test_partial_and_containing_intervals_overlap():
    assert overlaps(
        datetime(2030, 1, 7, 10, 30), datetime(2030, 1, 7, 11, 30),
        datetime(2030, 1, 7, 10), datetime(2030, 1, 7, 11),
    )
    assert overlaps(
        datetime(2030, 1, 7, 9), datetime(2030, 1, 7, 12),
        datetime(2030, 1, 7, 10), datetime(2030, 1, 7, 11),
    )


def test_weekday_index_starts_on_sunday():
    assert weekday_index(date(2030, 1, 6)) == 0  # Sunday
    assert weekday_index(date(2030, 1, 7)) == 1  # Monday
    assert weekday_index(date(2030, 1, 12)) == 6  # Saturday


def test_time_strings():
    assert time_str_to_minutes("09:30") == 570
    assert time_str_to_minutes("17:00:00") == 1020
    assert parse_time("08:15") == time(8, 15)
    assert parse_time(None) is None


@pytest.mark.parametrize("value", ["24:00", "9", "12:60", "ab:cd"])
def test_invalid_time_strings(value):
    with pytest.raises(ValueError):
        time_str_to_minutes(value)


def test_at_and_day_bounds():
    assert at(date(2030, 1, 7), "10:30") == datetime(2030, 1, 7, 10, 30)
    bounds = day_bounds(date(2030, 1, 7))
    assert bounds.start == datetime(2030, 1, 7)
    assert bounds.end == datetime(2030, 1, 8)


def test_to_local_converts_aware_values():
    aware = datetime(2030, 1, 7, 2, 0, tzinfo=timezone.utc)
    assert to_local(aware, "Asia/Manila") == datetime(2030, 1, 7, 10, 0)

    naive = datetime(2030, 1, 7, 10, 0)
    assert to_local(naive, "Asia/Manila") is naive
