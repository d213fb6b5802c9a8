"""Date helpers for the string dates stored on records."""

from __future__ import annotations

import calendar
import re
from datetime import date, datetime
from typing import Optional

import pandas as pd

_MONTH_PREFIX = re.compile(r"^(\d{4})-(\d{2})")


def month_prefix(value: Optional[str]) -> Optional[str]:
    """Return the ``YYYY-MM`` prefix of a date string, or None when malformed."""

    if not value or not isinstance(value, str):
        return None
    match = _MONTH_PREFIX.match(value.strip())
    if not match:
        return None
    if not 1 <= int(match.group(2)) <= 12:
        return None
    return f"{match.group(1)}-{match.group(2)}"


def parse_date(value: Optional[str]) -> Optional[date]:
    if not value or not isinstance(value, str):
        return None
    try:
        return datetime.strptime(value.strip()[:10], "%Y-%m-%d").date()
    except ValueError:
        return None


def month_key(day: date) -> str:
    return f"{day.year:04d}-{day.month:02d}"


def shift_months(day: date, months: int) -> date:
    """Move a date by whole calendar months, clamping to the month end."""

    if months == 0:
        return day
    return (pd.Timestamp(day) + pd.DateOffset(months=months)).date()


def clamp_day(year: int, month: int, day: int) -> date:
    last = calendar.monthrange(year, month)[1]
    return date(year, month, max(1, min(day, last)))


def today_iso(today: Optional[date] = None) -> str:
    return (today or date.today()).isoformat()
