"""Date-time helpers for the per-day verification window."""

from datetime import datetime, time, timedelta
from typing import Callable

Clock = Callable[[], datetime]


def local_now() -> datetime:
    """Return the current server-local time as a naive datetime."""

    return datetime.now()


def day_bounds(now: datetime | None = None) -> tuple[datetime, datetime]:
    """Return the inclusive ``(start, end)`` of the calendar day containing ``now``."""

    current = now or local_now()
    start = datetime.combine(current.date(), time.min)
    return start, start + timedelta(days=1) - timedelta(milliseconds=1)


def end_of_day(now: datetime | None = None) -> datetime:
    """Return 23:59:59.999 of the day containing ``now``."""

    return day_bounds(now)[1]


def format_clock_time(moment: datetime) -> str:
    """Render a time like ``08:05 AM``."""

    return moment.strftime("%I:%M %p")


def format_short_date(moment: datetime) -> str:
    """Render a date like ``3/7/2026``."""

    return f"{moment.month}/{moment.day}/{moment.year}"
