# activities.py

"""
Activity records and time-windowed aggregation.
Filters a pool of activities by time frame and category and reduces
the survivors into per-metric totals.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, InvalidOperation
from functools import reduce
from typing import Dict, Iterable, List, NamedTuple, Optional

from timeframes import Interval, to_naive_local


@dataclass(frozen=True)
class ActivityRecord:
    category: str
    distance_meters: Decimal
    moving_time_seconds: Decimal
    elapsed_time_seconds: Decimal
    elevation_gain_meters: Decimal
    start_timestamp: datetime
    activity_id: Optional[int] = None
    name: str = ''


@dataclass(frozen=True)
class ActivityTotals:
    count: int
    distance_meters: Decimal
    moving_time_seconds: Decimal
    elapsed_time_seconds: Decimal
    elevation_gain_meters: Decimal

    @classmethod
    def zero(cls) -> ActivityTotals:
        return cls(
            count=0,
            distance_meters=Decimal('0'),
            moving_time_seconds=Decimal('0'),
            elapsed_time_seconds=Decimal('0'),
            elevation_gain_meters=Decimal('0'),
        )

    def __add__(self, other: ActivityTotals) -> ActivityTotals:
        if not isinstance(other, ActivityTotals):
            return NotImplemented
        return ActivityTotals(
            count=self.count + other.count,
            distance_meters=self.distance_meters + other.distance_meters,
            moving_time_seconds=self.moving_time_seconds + other.moving_time_seconds,
            elapsed_time_seconds=self.elapsed_time_seconds + other.elapsed_time_seconds,
            elevation_gain_meters=self.elevation_gain_meters + other.elevation_gain_meters,
        )


class ActivityConfig(NamedTuple):
    key: str
    category: str  # provider activity type, e.g. 'Run'
    display_name: str
    metrics: tuple  # metric names this activity tracks
    primary_metric: str


_ALL_METRICS = ('distance', 'count', 'elevation', 'time')

ACTIVITY_CONFIGS: Dict[str, ActivityConfig] = {
    'running': ActivityConfig('running', 'Run', 'Running', _ALL_METRICS, 'distance'),
    'cycling': ActivityConfig('cycling', 'Ride', 'Cycling', _ALL_METRICS, 'distance'),
    'swimming': ActivityConfig('swimming', 'Swim', 'Swimming', ('distance', 'count', 'time'), 'distance'),
    'hiking': ActivityConfig('hiking', 'Hike', 'Hiking', _ALL_METRICS, 'elevation'),
    'kayaking': ActivityConfig('kayaking', 'Kayaking', 'Kayaking', ('distance', 'count', 'time'), 'distance'),
    'xcskiing': ActivityConfig('xcskiing', 'NordicSki', 'Cross Country Skiing', _ALL_METRICS, 'distance'),
    'snowboarding': ActivityConfig('snowboarding', 'Snowboard', 'Snowboarding', _ALL_METRICS, 'count'),
    'workouts': ActivityConfig('workouts', 'Workout', 'Workouts', ('count', 'time'), 'count'),
    'surfing': ActivityConfig('surfing', 'Surfing', 'Surfing', ('count', 'time'), 'count'),
    'alpineskiing': ActivityConfig('alpineskiing', 'AlpineSki', 'Alpine Skiing', _ALL_METRICS, 'count'),
}


def get_activity_config(key: str) -> ActivityConfig:
    """Look up an activity config by its key ('running', 'cycling', ...)."""
    try:
        return ACTIVITY_CONFIGS[key]
    except KeyError:
        raise ValueError(f"Unknown activity: {key}") from None


def get_activity_config_by_category(category: str) -> Optional[ActivityConfig]:
    """Find the activity config for a provider category ('Run', 'Ride', ...)."""
    return next((c for c in ACTIVITY_CONFIGS.values() if c.category == category), None)


def _parse_timestamp(value: str) -> datetime:
    """Parse an ISO 8601 timestamp into naive local time."""
    return to_naive_local(datetime.fromisoformat(value.replace('Z', '+00:00')))


def _decimal(value) -> Decimal:
    return Decimal(str(value if value is not None else 0))


def activity_from_strava(payload: dict) -> ActivityRecord:
    """Normalize one provider activity payload into an ActivityRecord."""
    return ActivityRecord(
        category=str(payload['type']),
        distance_meters=_decimal(payload.get('distance')),
        moving_time_seconds=_decimal(payload.get('moving_time')),
        elapsed_time_seconds=_decimal(payload.get('elapsed_time')),
        elevation_gain_meters=_decimal(payload.get('total_elevation_gain')),
        start_timestamp=_parse_timestamp(payload['start_date']),
        activity_id=payload.get('id'),
        name=payload.get('name') or '',
    )


def activities_from_strava(payloads: Iterable[dict]) -> List[ActivityRecord]:
    """Normalize provider payloads, skipping entries that cannot be parsed."""
    records: List[ActivityRecord] = []
    for payload in payloads:
        try:
            records.append(activity_from_strava(payload))
        except (KeyError, ValueError, TypeError, AttributeError, InvalidOperation) as e:
            logging.debug(f"Skipping activity {payload.get('id', 'unknown')}: {e}")
    return records


def _totals_for(record: ActivityRecord) -> ActivityTotals:
    return ActivityTotals(
        count=1,
        distance_meters=_decimal(record.distance_meters),
        moving_time_seconds=_decimal(record.moving_time_seconds),
        elapsed_time_seconds=_decimal(record.elapsed_time_seconds),
        elevation_gain_meters=_decimal(record.elevation_gain_meters),
    )


def _category_set(categories: Iterable[str]) -> set:
    # A bare string names one category, not its characters
    if isinstance(categories, str):
        return {categories}
    return set(categories)


def filter_activities(pool: Iterable[ActivityRecord], interval: Interval,
                      categories: Iterable[str]) -> List[ActivityRecord]:
    """Return activities inside the interval with an accepted category, newest first."""
    accepted = _category_set(categories)
    if not accepted:
        return []

    matching = [
        a for a in pool
        if a.category in accepted and interval.contains(a.start_timestamp)
    ]
    return sorted(matching, key=lambda a: a.start_timestamp, reverse=True)


def aggregate(pool: Iterable[ActivityRecord], interval: Interval,
              categories: Iterable[str]) -> ActivityTotals:
    """Sum count, distance, times and elevation over matching activities."""
    accepted = _category_set(categories)
    matching = (
        a for a in pool
        if a.category in accepted and interval.contains(a.start_timestamp)
    )
    return reduce(lambda totals, a: totals + _totals_for(a), matching, ActivityTotals.zero())


def aggregate_by_category(pool: Iterable[ActivityRecord], interval: Interval,
                          categories: Iterable[str]) -> Dict[str, ActivityTotals]:
    """Aggregate separately for each requested category."""
    records = list(pool)
    return {c: aggregate(records, interval, [c]) for c in sorted(_category_set(categories))}


def recent_activities(pool: Iterable[ActivityRecord], interval: Interval,
                      categories: Iterable[str], limit: int = 5) -> List[ActivityRecord]:
    """Most recent matching activities."""
    return filter_activities(pool, interval, categories)[:max(limit, 0)]
