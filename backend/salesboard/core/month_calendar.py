"""
Calendar keys used by the sales ledger.

Days are keyed as ``YYYY-MM-DD`` and months as ``YYYY-MM``. Both are plain
strings so they sort chronologically and can be compared without parsing.
"""
import calendar
import re
from dataclasses import dataclass
from datetime import date
from typing import Optional

from salesboard.core.errors import InvalidInputError


_DATE_KEY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_MONTH_KEY_RE = re.compile(r"^\d{4}-\d{2}$")


@dataclass(frozen=True)
class MonthDayInfo:
    day_of_month: int
    days_in_month: int
    days_remaining: int


def date_key(value: date) -> str:
    return value.strftime("%Y-%m-%d")


def month_key(value: date) -> str:
    return value.strftime("%Y-%m")


def parse_date_key(value: str) -> date:
    if not value or not _DATE_KEY_RE.match(value):
        raise InvalidInputError(f"Invalid date key '{value}', expected YYYY-MM-DD")
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise InvalidInputError(f"Invalid date key '{value}', expected YYYY-MM-DD")


def parse_month_key(value: str) -> date:
    """Return the first day of the month named by ``value``."""
    if not value or not _MONTH_KEY_RE.match(value):
        raise InvalidInputError(f"Invalid month key '{value}', expected YYYY-MM")
    year, month = int(value[:4]), int(value[5:7])
    if not 1 <= month <= 12:
        raise InvalidInputError(f"Invalid month key '{value}', expected YYYY-MM")
    return date(year, month, 1)


def month_key_for(day_key: str) -> str:
    return month_key(parse_date_key(day_key))


def resolve_month_key(day_key: str, given_month_key: Optional[str] = None) -> str:
    """
    Month key for a ledger write. Derived from the day when not supplied;
    a supplied month key must contain the day.
    """
    derived = month_key_for(day_key)
    if given_month_key is None:
        return derived
    parse_month_key(given_month_key)
    if given_month_key != derived:
        raise InvalidInputError(f"Date {day_key} does not belong to month {given_month_key}")
    return derived


def previous_month_key(key: str) -> str:
    first = parse_month_key(key)
    if first.month == 1:
        return f"{first.year - 1}-12"
    return f"{first.year}-{first.month - 1:02d}"


def days_in_month(key: str) -> int:
    first = parse_month_key(key)
    return calendar.monthrange(first.year, first.month)[1]


def month_day_info(today: date, key: Optional[str] = None) -> MonthDayInfo:
    """
    Position of ``today`` within the month ``key`` (defaults to today's month).
    Past months count as fully elapsed, future months as not started.
    """
    key = key or month_key(today)
    total = days_in_month(key)
    current = month_key(today)
    if key < current:
        day = total
    elif key > current:
        day = 0
    else:
        day = today.day
    return MonthDayInfo(day_of_month=day, days_in_month=total, days_remaining=total - day)
