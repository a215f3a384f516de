"""
Date utility helpers and period bucketing.

Expense dates travel as ``"YYYY-MM-DD"`` strings (the Python format string
``"%Y-%m-%d"``).  Bucketing helpers never raise: a missing date yields the
empty key and a malformed one yields :data:`INVALID_DATE`, so callers can
tell "no date" apart from "bad date" and surface the latter.
"""

from __future__ import annotations

import calendar
from datetime import date, datetime, timedelta
from typing import Optional, Union

from expense_tracker.errors import ParseError

DATE_FORMAT = "%Y-%m-%d"
MONTH_FORMAT = "%Y-%m"

INVALID_DATE = "Invalid Date"
EMPTY_KEY = ""

DateLike = Union[str, date, None]


def is_missing_date(raw: DateLike) -> bool:
    return raw is None or (isinstance(raw, str) and not raw.strip())


def parse_date(raw: DateLike) -> date:
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    try:
        return datetime.strptime(raw.strip(), DATE_FORMAT).date()
    except (ValueError, TypeError, AttributeError) as exc:
        raise ParseError(
            f"Invalid date {raw!r}. Expected format: YYYY-MM-DD"
        ) from exc


def try_parse_date(raw: DateLike) -> Optional[date]:
    """Return the parsed date, or ``None`` when *raw* is missing or malformed."""
    if is_missing_date(raw):
        return None
    try:
        return parse_date(raw)
    except ParseError:
        return None


def parse_optional_date(raw: DateLike) -> Optional[date]:
    """Parse a query bound; missing means unbounded, malformed raises."""
    if is_missing_date(raw):
        return None
    return parse_date(raw)


def format_date(d: date) -> str:
    return d.strftime(DATE_FORMAT)


def parse_month(raw: str) -> str:
    """Validate a ``YYYY-MM`` month filter and return it normalised."""
    try:
        return datetime.strptime(raw.strip(), MONTH_FORMAT).strftime(MONTH_FORMAT)
    except (ValueError, TypeError, AttributeError) as exc:
        raise ParseError(
            f"Invalid month {raw!r}. Expected format: YYYY-MM"
        ) from exc


# ── Period keys ──────────────────────────────────────────────────────────────

def month_key(raw: DateLike) -> str:
    """
    ``"YYYY-MM"`` bucket for *raw*.

    Returns :data:`EMPTY_KEY` for a missing date and :data:`INVALID_DATE`
    for one that does not parse.
    """
    if is_missing_date(raw):
        return EMPTY_KEY
    d = try_parse_date(raw)
    if d is None:
        return INVALID_DATE
    return f"{d.year:04d}-{d.month:02d}"


def week_start_key(raw: DateLike) -> str:
    """
    ISO date of the Sunday on or before *raw* (weeks start on Sunday).

    >>> week_start_key("2024-01-05")
    '2023-12-31'
    """
    if is_missing_date(raw):
        return EMPTY_KEY
    d = try_parse_date(raw)
    if d is None:
        return INVALID_DATE
    # date.weekday(): Monday=0 … Sunday=6
    start = d - timedelta(days=(d.weekday() + 1) % 7)
    return format_date(start)


def format_month_label(key: str) -> str:
    """``"2024-01"`` → ``"Jan 2024"``; non-month keys are returned as is."""
    try:
        parsed = datetime.strptime(key, MONTH_FORMAT)
    except (ValueError, TypeError):
        return key
    return f"{calendar.month_abbr[parsed.month]} {parsed.year}"


def is_within_range(d: date, start: Optional[date], end: Optional[date]) -> bool:
    """Inclusive range check; a ``None`` bound is open on that side."""
    if start is not None and d < start:
        return False
    if end is not None and d > end:
        return False
    return True
