from datetime import date, datetime, timedelta

import pytest

from library_app.utils.fines import MAX_FINE, calculate_fine


DUE = datetime(2024, 1, 10, 12, 0)


@pytest.mark.parametrize(
    "returned, expected",
    [
        (datetime(2024, 1, 9, 8, 0), 0),
        (datetime(2024, 1, 10, 23, 59), 0),
        (datetime(2024, 1, 11, 0, 1), 5),
        (datetime(2024, 1, 17, 9, 0), 35),
        (datetime(2024, 1, 18, 9, 0), 45),
        (DUE + timedelta(days=51), 475),
        (DUE + timedelta(days=53), 495),
        (DUE + timedelta(days=54), MAX_FINE),
        (DUE + timedelta(days=200), MAX_FINE),
    ],
)
def test_progressive_rate(returned, expected):
    assert calculate_fine(DUE, returned) == expected


def test_time_of_day_is_ignored():
    late_morning = calculate_fine(datetime(2024, 1, 10, 23, 0), datetime(2024, 1, 12, 0, 30))
    early_evening = calculate_fine(datetime(2024, 1, 10, 0, 30), datetime(2024, 1, 12, 23, 0))
    assert late_morning == early_evening == 10


def test_accepts_dates_and_iso_strings():
    assert calculate_fine(date(2024, 1, 10), date(2024, 1, 12)) == 10
    assert calculate_fine("2024-01-10T12:00:00Z", "2024-01-12T01:00:00Z") == 10


def test_unparseable_dates_give_zero():
    assert calculate_fine("not a date", datetime(2024, 1, 12)) == 0
    assert calculate_fine(DUE, object()) == 0


def test_fine_never_decreases_with_later_return():
    previous = 0
    for day in range(1, 120):
        fine = calculate_fine(date(2024, 1, 1), date.fromordinal(date(2024, 1, 1).toordinal() + day))
        assert previous <= fine <= MAX_FINE
        previous = fine


def test_defaults_to_now_for_future_due_date():
    assert calculate_fine(datetime(2999, 1, 1)) == 0
