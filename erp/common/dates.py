"""Calendar helpers used by the billing, payroll and reporting code."""

from __future__ import annotations

import calendar
from datetime import date, datetime
from typing import Callable
from zoneinfo import ZoneInfo

# Injectable "today" used by the services; tests pass a fixed clock.
Clock = Callable[[], date]


def zone_clock(tz_name: str) -> Clock:
    """Clock returning the current date in *tz_name*, e.g. ``"Europe/Berlin"``."""
    zone = ZoneInfo(tz_name)

    def today() -> date:
        return datetime.now(zone).date()

    return today


def add_months(value: date, months: int) -> date:
    """Shift *value* by *months*, clamping the day to the target month's end."""
    index = value.month - 1 + months
    year = value.year + index // 12
    month = index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def month_start(value: date) -> date:
    return value.replace(day=1)


def month_end(value: date) -> date:
    return value.replace(day=calendar.monthrange(value.year, value.month)[1])


def month_bounds(value: date, offset: int = 0) -> tuple[date, date]:
    """First and last day of the month *offset* months away from *value*."""
    target = add_months(month_start(value), offset)
    return target, month_end(target)


def month_key(value: date) -> str:
    """``YYYY-MM`` bucket key."""
    return f"{value.year:04d}-{value.month:02d}"


def month_label(value: date) -> str:
    """Short label such as ``Jan 2024``."""
    return value.strftime("%b %Y")
