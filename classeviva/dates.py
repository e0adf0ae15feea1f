"""Date helpers.

Callers pass dates as ``YYYY-MM-DD`` strings; the remote API wants them as
``YYYYMMDD`` path segments.
"""
from __future__ import annotations

import re
from datetime import date

from .exceptions import ClasseVivaError, ErrorKind

_DATE_RE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")
_REMOTE_DATE_RE = re.compile(r"[0-9]{8}")


def validate_dates(*values: str) -> None:
    """Raise ``INVALID_DATE_FORMAT`` unless every value is a real ``YYYY-MM-DD`` date."""
    for value in values:
        if not isinstance(value, str) or not _DATE_RE.fullmatch(value):
            raise ClasseVivaError(
                ErrorKind.INVALID_DATE_FORMAT,
                f"Invalid date {value!r}, expected YYYY-MM-DD",
            )
        year, month, day = (int(part) for part in value.split("-"))
        try:
            date(year, month, day)
        except ValueError as err:
            raise ClasseVivaError(
                ErrorKind.INVALID_DATE_FORMAT, f"Invalid date {value!r}: {err}"
            ) from err


def format_for_remote(value: str) -> str:
    """``2024-02-29`` -> ``20240229``."""
    return value.replace("-", "")


def format_for_display(value: str) -> str:
    """``20240229`` -> ``2024-02-29``."""
    if not _REMOTE_DATE_RE.fullmatch(value):
        raise ClasseVivaError(
            ErrorKind.INVALID_DATE_FORMAT,
            f"Invalid remote date {value!r}, expected YYYYMMDD",
        )
    return f"{value[:4]}-{value[4:6]}-{value[6:]}"


def school_year_start(today: date) -> int:
    """Return the calendar year in which the current school year began.

    School years run from September to June, so from January to August the
    year started in the previous calendar year.
    """
    return today.year if today.month >= 9 else today.year - 1


def school_year_bounds(today: date) -> tuple[date, date]:
    """Return (Sept 1, June 30) of the school year containing *today*."""
    start = school_year_start(today)
    return date(start, 9, 1), date(start + 1, 6, 30)
