"""
Local-time day and week windows expressed as millisecond timestamps.

Weeks run Monday 00:00:00.000 through Sunday 23:59:59.999. Arithmetic is
done on local calendar dates, so daylight-saving shifts are not corrected.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Union

from .models import Window

Moment = Union[datetime, int, None]

DAY_MS = 24 * 60 * 60 * 1000
WEEK_MS = 7 * DAY_MS
END_OF_DAY = time(23, 59, 59, 999000)


def now_millis() -> int:
    return to_millis(datetime.now())


def to_millis(moment: datetime) -> int:
    return int(round(moment.timestamp() * 1000))


def from_millis(timestamp: int) -> datetime:
    return datetime.fromtimestamp(timestamp / 1000)


def start_of_day(now: Moment = None) -> int:
    return to_millis(datetime.combine(_local_date(now), time.min))


def end_of_day(now: Moment = None) -> int:
    return to_millis(datetime.combine(_local_date(now), END_OF_DAY))


def day_range(now: Moment = None) -> Window:
    return Window(start=start_of_day(now), end=end_of_day(now))


def week_range(offset_weeks: int = 0, now: Moment = None) -> Window:
    today = _local_date(now)
    # date.weekday() is Monday=0..Sunday=6, so Sunday closes its week.
    monday = today - timedelta(days=today.weekday())
    start = monday + timedelta(days=offset_weeks * 7)
    end = start + timedelta(days=6)
    return Window(
        start=to_millis(datetime.combine(start, time.min)),
        end=to_millis(datetime.combine(end, END_OF_DAY)),
    )


def format_date(timestamp: int) -> str:
    moment = from_millis(timestamp)
    return f"{moment:%a}, {moment:%b} {moment.day}"


def format_time(timestamp: int) -> str:
    return from_millis(timestamp).strftime("%I:%M %p")


def format_range(window: Window) -> str:
    return f"{format_date(window.start)} - {format_date(window.end)}"


def format_long_date(now: Moment = None) -> str:
    day = _local_date(now)
    return f"{day:%A}, {day:%B} {day.day}"


def format_summary_date(timestamp: int) -> str:
    return from_millis(timestamp).strftime("%a %b %d %Y")


def _local_date(now: Moment) -> date:
    if now is None:
        return date.today()
    if isinstance(now, datetime):
        if now.tzinfo is not None:
            now = now.astimezone()
        return now.date()
    return from_millis(int(now)).date()
