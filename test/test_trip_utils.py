from datetime import date

import pytest

from smarttrip.utils.trip_utils import format_price, parse_price, trip_duration_days


def test_duration_counts_first_and_last_day():
    assert trip_duration_days(date(2026, 6, 1), date(2026, 6, 3)) == 3


def test_single_day_trip():
    assert trip_duration_days(date(2026, 6, 1), date(2026, 6, 1)) == 1


@pytest.mark.parametrize("start, end", [
    (None, None),
    (date(2026, 6, 1), None),
    (None, date(2026, 6, 3)),
])
def test_duration_defaults_without_both_dates(start, end):
    assert trip_duration_days(start, end) == 5
    assert trip_duration_days(start, end, default_days=7) == 7


@pytest.mark.parametrize("value, expected", [
    ("1234.56", 1234.56),
    (99, 99.0),
    ("", None),
    ("n/a", None),
    (None, None),
    (True, None),
    ("NaN", None),
    ("inf", None),
    ("-Infinity", None),
])
def test_parse_price(value, expected):
    assert parse_price(value) == expected


def test_format_price():
    assert format_price(450.0, "EUR") == "450.00 EUR"
    assert format_price(12.5, None) == "12.50"
    assert format_price(None, "EUR") is None
    assert format_price(float("nan"), "EUR") is None
