# timeframes.py

"""
Time frame resolution.
Maps a symbolic period (day/week/month/year/all/custom) onto concrete
calendar boundaries and day counts relative to "now".
"""

from __future__ import annotations

import calendar
import math
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import NamedTuple, Optional, Union

SECONDS_PER_DAY = 86400

# "All time" is unbounded in concept; concrete sentinels keep day counts finite
ALL_TIME_START = datetime(2000, 1, 1)
ALL_TIME_END = datetime(2099, 12, 31, 23, 59, 59, 999999)


class TimeFrame(str, Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"
    ALL_TIME = "all"
    CUSTOM = "custom"


@dataclass(frozen=True)
class CustomRange:
    """Caller-supplied inclusive range. Dates cover whole days; datetimes are used verbatim (aware ones in local time)."""
    start: Union[date, datetime]
    end: Union[date, datetime]


FrameSpec = Union[TimeFrame, CustomRange]


class Interval(NamedTuple):
    start: datetime
    end: datetime

    def contains(self, moment: datetime) -> bool:
        return self.start <= to_naive_local(moment) <= self.end


class DayCounts(NamedTuple):
    elapsed: int
    remaining: int
    total: int


def to_naive_local(moment: datetime) -> datetime:
    """Convert an aware datetime to naive local time; naive values pass through."""
    if moment.tzinfo is not None:
        return moment.astimezone().replace(tzinfo=None)
    return moment


def _start_of_day(d: date) -> datetime:
    return datetime.combine(d, time.min)


def _end_of_day(d: date) -> datetime:
    return datetime.combine(d, time.max)


def _as_start(value: Union[date, datetime]) -> datetime:
    if isinstance(value, datetime):
        return to_naive_local(value)
    return _start_of_day(value)


def _as_end(value: Union[date, datetime]) -> datetime:
    if isinstance(value, datetime):
        return to_naive_local(value)
    return _end_of_day(value)


def _days_between(start: datetime, end: datetime) -> float:
    return (end - start).total_seconds() / SECONDS_PER_DAY


def resolve_interval(frame: FrameSpec, now: Optional[datetime] = None) -> Interval:
    """Resolve a time frame into its [start, end] boundaries for the given instant."""
    if isinstance(frame, CustomRange):
        return Interval(_as_start(frame.start), _as_end(frame.end))

    now = to_naive_local(now or datetime.now())
    today = now.date()

    if frame == TimeFrame.DAY:
        return Interval(_start_of_day(today), _end_of_day(today))

    if frame == TimeFrame.WEEK:
        # weekday() is 0 for Monday, so Sunday closes the week
        monday = today - timedelta(days=today.weekday())
        return Interval(_start_of_day(monday), _end_of_day(monday + timedelta(days=6)))

    if frame == TimeFrame.MONTH:
        last_day = calendar.monthrange(today.year, today.month)[1]
        return Interval(
            _start_of_day(today.replace(day=1)),
            _end_of_day(today.replace(day=last_day)),
        )

    if frame == TimeFrame.YEAR:
        return Interval(
            _start_of_day(date(today.year, 1, 1)),
            _end_of_day(date(today.year, 12, 31)),
        )

    if frame == TimeFrame.ALL_TIME:
        return Interval(ALL_TIME_START, ALL_TIME_END)

    if frame == TimeFrame.CUSTOM:
        raise ValueError("Custom time frame requires a CustomRange")

    raise ValueError(f"Unknown time frame: {frame}")


def resolve_day_counts(frame: FrameSpec, now: Optional[datetime] = None) -> DayCounts:
    """
    Calculate elapsed, remaining and total days of a time frame.

    Day counts are measured against midnight of the interval's last day,
    not against interval.end, so a Monday-to-Sunday week spans 7 days
    rather than 8. The current day counts as elapsed once it has started;
    remaining covers the whole days after today. An aware "now" is
    converted to naive local time first.
    """
    now = to_naive_local(now or datetime.now())
    interval = resolve_interval(frame, now)
    last_day = _start_of_day(interval.end.date())

    total = math.ceil(_days_between(interval.start, last_day)) + 1
    elapsed = min(max(math.ceil(_days_between(interval.start, now)), 0), total)
    remaining = max(math.ceil(_days_between(now, last_day)), 0)

    return DayCounts(elapsed=elapsed, remaining=remaining, total=total)


def parse_time_frame(value: str,
                     start: Optional[Union[date, str]] = None,
                     end: Optional[Union[date, str]] = None) -> FrameSpec:
    """Parse a configuration string ('week', 'ytd', 'custom', ...) into a frame."""
    key = (value or '').strip().lower()
    aliases = {'ytd': TimeFrame.YEAR, 'all_time': TimeFrame.ALL_TIME, 'alltime': TimeFrame.ALL_TIME}

    if key in aliases:
        return aliases[key]

    try:
        frame = TimeFrame(key)
    except ValueError:
        raise ValueError(f"Unknown time frame: {value}") from None

    if frame != TimeFrame.CUSTOM:
        return frame

    if start is None or end is None:
        raise ValueError("Custom time frame requires start and end dates")

    if isinstance(start, str):
        start = date.fromisoformat(start)
    if isinstance(end, str):
        end = date.fromisoformat(end)
    return CustomRange(start=start, end=end)
