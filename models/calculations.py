"""Due-date evaluation and the date helpers shared by the aggregators."""

import calendar
import re
from datetime import date, datetime
from typing import Callable, Dict, Iterable, List, Optional, Tuple, TypeVar, Union

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

from .errors import InvalidDate
from .status import BatteryStatus, RecurrenceInterval

T = TypeVar("T")
DateLike = Union[date, datetime]

# Day-first format used when dates are typed into log forms by hand
_LOCAL_FORMAT = "%d.%m.%Y"
# A full calendar day, optionally followed by a time part
_ISO_DAY = re.compile(r"\d{4}-\d{2}-\d{2}($|[T ])")


def to_date(value: DateLike) -> date:
    """Truncate a datetime to its calendar day; dates pass through."""
    if isinstance(value, datetime):
        return value.date()
    return value


def parse_date(value) -> date:
    """
    Parse a stored date value into a calendar date.

    Accepts date/datetime objects, ISO 8601 strings (with or without a time
    part, e.g. '2024-03-15' or '2023-12-01T10:00:00Z') and day-first local
    dates ('15.3.2024'). Raises InvalidDate for anything else.
    """
    if isinstance(value, (date, datetime)):
        return to_date(value)
    if not isinstance(value, str) or not value.strip():
        raise InvalidDate(value)
    text = value.strip()
    if _ISO_DAY.match(text):
        try:
            return date_parser.isoparse(text).date()
        except (ValueError, OverflowError):
            raise InvalidDate(value) from None
    try:
        return datetime.strptime(text, _LOCAL_FORMAT).date()
    except ValueError:
        raise InvalidDate(value) from None


def is_due(target: DateLike, precision_on_day: bool, now: DateLike) -> bool:
    """
    Decide whether a target date needs attention as of now.

    - Day precision: due once the target day has arrived.
    - Month precision: due only after the target month has ended. The
      target month itself is a grace period.
    """
    target = to_date(target)
    now = to_date(now)
    if precision_on_day:
        return target <= now
    if now.year > target.year:
        return True
    return now.year == target.year and now.month > target.month


def battery_is_due(next_replacement: DateLike, status: BatteryStatus, now: DateLike) -> bool:
    """
    Batteries are due on their replacement day, or immediately when their
    status is anything but HEALTHY.
    """
    # REPLACED also forces due; kept as recorded, see DESIGN.md
    if status != BatteryStatus.HEALTHY:
        return True
    return is_due(next_replacement, True, now)


def calc_next_date(current: date, interval: RecurrenceInterval) -> Optional[date]:
    """Next occurrence after current, or None for one-off events."""
    months = interval.months
    if months is None:
        return None
    return current + relativedelta(months=months)


# =============================================================================
# Sorting and grouping
# =============================================================================


def sort_by_date(items: Iterable[T], key: Callable[[T], date] = lambda i: i.date) -> List[T]:
    """Sort ascending by date. Ties keep their input order."""
    return sorted(items, key=key)


def partition_due(items: Iterable[T]) -> Tuple[List[T], List[T]]:
    """Split items into (due, not due), keeping relative order."""
    due: List[T] = []
    future: List[T] = []
    for item in items:
        (due if item.is_due else future).append(item)
    return due, future


def group_by_day(items: Iterable[T]) -> Dict[date, List[T]]:
    """Bucket items by calendar day, keeping emission order per bucket."""
    days: Dict[date, List[T]] = {}
    for item in items:
        days.setdefault(to_date(item.date), []).append(item)
    return days


def month_grid(year: int, month: int) -> List[List[Optional[date]]]:
    """Weeks of a month, Monday first, padded with None outside the month."""
    weeks = calendar.Calendar(firstweekday=calendar.MONDAY).monthdatescalendar(year, month)
    return [[d if d.month == month else None for d in week] for week in weeks]
