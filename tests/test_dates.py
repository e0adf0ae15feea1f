"""Tests for the date helpers."""
from __future__ import annotations

from datetime import date

import pytest

from classeviva.dates import (
    format_for_display,
    format_for_remote,
    school_year_bounds,
    school_year_start,
    validate_dates,
)
from classeviva.exceptions import ClasseVivaError, ErrorKind


@pytest.mark.parametrize(
    "value",
    [
        "2024-13-45",
        "2024-02-30",
        "2023-02-29",
        "24-01-01",
        "2024/01/01",
        "",
        "2024-02-29\n",
        "\uff12\uff10\uff12\uff14-\uff10\uff12-\uff12\uff19",
    ],
)
def test_validate_dates_rejects(value):
    with pytest.raises(ClasseVivaError) as exc_info:
        validate_dates(value)
    assert exc_info.value.kind is ErrorKind.INVALID_DATE_FORMAT


def test_validate_dates_accepts_leap_day():
    validate_dates("2024-02-29", "2023-09-01")


def test_validate_dates_checks_every_value():
    with pytest.raises(ClasseVivaError):
        validate_dates("2024-01-01", "2024-01-32")


def test_remote_format_round_trip():
    assert format_for_remote("2024-02-29") == "20240229"
    assert format_for_display("20240229") == "2024-02-29"
    assert format_for_remote(format_for_display("20230901")) == "20230901"
    assert format_for_display(format_for_remote("2023-09-01")) == "2023-09-01"


@pytest.mark.parametrize("value", ["2024021", "20240229\n", "\uff12\uff10\uff12\uff14\uff10\uff12\uff12\uff19"])
def test_format_for_display_rejects_malformed(value):
    with pytest.raises(ClasseVivaError) as exc_info:
        format_for_display(value)
    assert exc_info.value.kind is ErrorKind.INVALID_DATE_FORMAT


@pytest.mark.parametrize(
    ("today", "expected"),
    [(date(2024, 1, 10), 2023), (date(2024, 8, 31), 2023), (date(2024, 9, 1), 2024), (date(2024, 12, 31), 2024)],
)
def test_school_year_start(today, expected):
    assert school_year_start(today) == expected


def test_school_year_bounds():
    assert school_year_bounds(date(2024, 3, 15)) == (date(2023, 9, 1), date(2024, 6, 30))
