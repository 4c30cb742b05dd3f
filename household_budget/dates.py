"""Calendar helpers for recurring expenses and monthly statistics.

All dates are stored as ``YYYY-MM-DD`` strings.  The helpers here convert
between those strings and :class:`datetime.date` objects and provide the
month-granularity arithmetic used by the auto-registration engine.
"""

from __future__ import annotations

import calendar
import logging
import re
from datetime import date, datetime
from typing import List, Optional, Tuple, Union

from .config import REPRESENTATIVE_DAY

logger = logging.getLogger(__name__)

# Accepts both zero-padded and non-padded month/day fields
_DATE_PATTERN = re.compile(r"^\s*(\d{4})-(\d{1,2})-(\d{1,2})\s*$")

DateLike = Union[str, date, datetime, None]


def today() -> date:
    return date.today()


def parse_date(value: DateLike) -> Optional[date]:
    """Parse a date-like value, returning None on failure."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None
    match = _DATE_PATTERN.match(value)
    if not match:
        return None
    year, month, day = (int(part) for part in match.groups())
    try:
        return date(year, month, day)
    except ValueError:
        return None


def format_date(d: Union[date, datetime]) -> str:
    """Render a date as ``YYYY-MM-DD`` from its calendar fields."""
    return f"{d.year:04d}-{d.month:02d}-{d.day:02d}"


def days_in_month(d: Union[date, datetime]) -> int:
    return calendar.monthrange(d.year, d.month)[1]


def months_between(base_date_str: DateLike, target_date_str: DateLike) -> int:
    """Whole calendar months from ``base_date_str`` to ``target_date_str``.

    Only the year and month fields take part; the day of month is ignored,
    so ``2024-01-31`` to ``2024-02-01`` counts as one month.  The result is
    negative when the target precedes the base.

    An empty base date yields 0.  A base date that cannot be parsed is
    treated the same way and a warning is logged.
    """
    if base_date_str is None or base_date_str == "":
        return 0
    base = parse_date(base_date_str)
    if base is None:
        logger.warning("Ignoring malformed base date %r; no escalation applied", base_date_str)
        return 0
    target = parse_date(target_date_str)
    if target is None:
        raise ValueError(f"Invalid target date: {target_date_str!r}")
    return (target.year - base.year) * 12 + (target.month - base.month)


def _validate_month(year: int, month: int) -> None:
    if not 1 <= month <= 12:
        raise ValueError(f"Invalid month: {month}")


def month_bounds(year: int, month: int) -> Tuple[date, date]:
    """Return (first_day, last_day) for the given month."""
    _validate_month(year, month)
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def shift_month(year: int, month: int, delta: int) -> Tuple[int, int]:
    """Move ``delta`` months forward (or back when negative)."""
    _validate_month(year, month)
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def mid_month(year: int, month: int) -> date:
    """Representative day used for "is this expense live this month" checks."""
    _validate_month(year, month)
    return date(year, month, REPRESENTATIVE_DAY)


def trailing_months(year: int, month: int, count: int) -> List[Tuple[int, int]]:
    """The ``count`` months ending at (year, month), oldest first."""
    if count <= 0:
        return []
    return [shift_month(year, month, -offset) for offset in range(count - 1, -1, -1)]


def month_label(year: int, month: int) -> str:
    return f"{year}-{month:02d}"
