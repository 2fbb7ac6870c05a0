from __future__ import annotations

import calendar
import re
from datetime import date, datetime, timedelta
from typing import Iterator
from zoneinfo import ZoneInfo


MONTH_RE = re.compile(r"^(\d{4})-(\d{2})$")


def today_in(timezone: str) -> date:
    return datetime.now(ZoneInfo(timezone)).date()


def as_calendar_datetime(value: datetime, timezone: str) -> datetime:
    """
    Express a stored timestamp as naive wall-clock time in the report timezone.

    Naive values are assumed to already be in that timezone.
    """
    if value.tzinfo is None:
        return value
    return value.astimezone(ZoneInfo(timezone)).replace(tzinfo=None)


def iter_dates(start: date, end: date) -> Iterator[date]:
    # Counted by offset so a range ending on date.max never steps past it.
    for offset in range((end - start).days + 1):
        yield start + timedelta(days=offset)


def month_bounds(year: int, month: int) -> tuple[date, date]:
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def parse_month(value: str) -> tuple[date, date]:
    """Bounds of a "YYYY-MM" month string."""
    match = MONTH_RE.match(value.strip())
    if not match:
        raise ValueError(f"Invalid month {value!r}, expected YYYY-MM")
    year, month = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12:
        raise ValueError(f"Invalid month {value!r}, expected YYYY-MM")
    return month_bounds(year, month)
