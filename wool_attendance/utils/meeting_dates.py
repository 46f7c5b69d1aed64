"""Meeting calendar helpers: the Sunday sequence and group discovery."""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Iterable, List, Optional

import pytz

log = logging.getLogger(__name__)

SUNDAY = 6  # date.weekday()


def sundays(year: int) -> List[str]:
    """Return every Sunday of ``year`` as ``YYYY-MM-DD``."""
    current = date(year, 1, 1)
    while current.weekday() != SUNDAY:
        current += timedelta(days=1)

    result = []
    while current.year == year:
        result.append(f"{current.year:04d}-{current.month:02d}-{current.day:02d}")
        current += timedelta(days=7)
    return result


def parse_iso(value: str) -> date:
    y, m, d = (int(x) for x in value.split("-"))
    return date(y, m, d)


def today_in(tz_name: str) -> date:
    try:
        tz = pytz.timezone(tz_name)
    except pytz.UnknownTimeZoneError:
        log.warning("Invalid timezone '%s'; defaulting to UTC", tz_name)
        tz = pytz.UTC
    return datetime.now(tz).date()


def closest_meeting_date(dates: List[str], today: Optional[date] = None, tz_name: str = "Asia/Seoul") -> Optional[str]:
    """Pick the meeting date nearest to today's month/day.

    Today is projected onto the year of the sequence so the lookup still
    lands on a sensible week when the calendar targets another year.  The
    first minimum wins on ties.
    """
    if not dates:
        return None
    today = today or today_in(tz_name)

    target_year = parse_iso(dates[0]).year
    try:
        target = today.replace(year=target_year)
    except ValueError:
        # Feb 29 projected onto a non-leap year
        target = date(target_year, 2, 28)

    closest = dates[0]
    min_diff = None
    for value in dates:
        diff = abs((parse_iso(value) - target).days)
        if min_diff is None or diff < min_diff:
            min_diff = diff
            closest = value
    return closest


def dates_in_month(dates: Iterable[str], month: int) -> List[str]:
    return [d for d in dates if parse_iso(d).month == month]


def group_names(members: Iterable) -> List[str]:
    """Distinct, sorted group labels of the current members."""
    return sorted({m.group for m in members if m.group})
