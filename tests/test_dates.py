from __future__ import annotations
import datetime as dt

import pytest

from jobform.utils.dates import normalize_date_input, parse_iso_date


def test_parse_iso_date_accepts_calendar_dates_only():
    assert parse_iso_date("2024-01-15") == dt.date(2024, 1, 15)
    assert parse_iso_date(" 2024-01-15 ") == dt.date(2024, 1, 15)
    assert parse_iso_date("2024-13-45") is None
    assert parse_iso_date("15/01/2024") is None
    assert parse_iso_date("") is None
    assert parse_iso_date(None) is None


@pytest.mark.parametrize(
    "typed, expected",
    [
        ("2024-01-15", "2024-01-15"),
        ("15/01/2024", "2024-01-15"),
        ("15 January 2024", "2024-01-15"),
        ("Jan 15, 2024", "2024-01-15"),
    ],
)
def test_normalize_date_input_rewrites_readable_dates(typed, expected):
    assert normalize_date_input(typed) == expected


def test_normalize_date_input_keeps_text_it_cannot_read():
    assert normalize_date_input("qwerty") == "qwerty"
    assert normalize_date_input("") == ""
    assert normalize_date_input(None) == ""
