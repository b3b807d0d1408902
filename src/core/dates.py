#!/usr/bin/env python3
"""
Date helpers for report date ranges.

Reporting API dates are plain calendar days formatted as YYYY-MM-DD.
"""

import re
from datetime import date, datetime, timedelta
from typing import Iterator, Optional

import pytz
from dateutil import parser as date_parser

from .exceptions import InvalidDateError

DATE_FORMAT = "%Y-%m-%d"
DAY_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")

RELATIVE_DAYS = {
    'today': 0,
    'yesterday': 1,
}


def today_in(timezone_name: str, now: Optional[datetime] = None) -> date:
    """Current calendar day in the given timezone."""
    try:
        tz = pytz.timezone(timezone_name)
    except pytz.UnknownTimeZoneError:
        raise InvalidDateError(timezone_name, expected="a known timezone name") from None
    now = now or datetime.now(pytz.utc)
    if now.tzinfo is None:
        now = pytz.utc.localize(now)
    return now.astimezone(tz).date()


def parse_start_date(value: str, timezone_name: str = "UTC", now: Optional[datetime] = None) -> date:
    """
    Parse a start date given on the command line.

    Args:
        value: 'YYYY-MM-DD', 'today' or 'yesterday'
        timezone_name: Timezone used to resolve relative days
        now: Reference instant (defaults to current time)

    Returns:
        Calendar date

    Raises:
        InvalidDateError: If the value cannot be parsed
    """
    if value is None:
        raise InvalidDateError("None")

    text = value.strip().lower()
    if text in RELATIVE_DAYS:
        return today_in(timezone_name, now) - timedelta(days=RELATIVE_DAYS[text])

    # isoparse also accepts datetimes and week dates; only plain days are valid here
    if not DAY_PATTERN.match(text):
        raise InvalidDateError(value)
    try:
        return date_parser.isoparse(text).date()
    except (ValueError, OverflowError):
        raise InvalidDateError(value) from None


def format_date(day: date) -> str:
    return day.strftime(DATE_FORMAT)


def dates_walking_back(start: date, count: int) -> Iterator[date]:
    """Yield start, start - 1 day, ... for count days."""
    for offset in range(count):
        yield start - timedelta(days=offset)
