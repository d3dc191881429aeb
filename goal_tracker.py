# goal_tracker.py

"""
Goal tracking module for activity goals.
Calculates progress and pacing requirements for distance, count,
elevation and time targets over a time frame.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, getcontext
from enum import Enum
from typing import Dict, NamedTuple, Optional

from activities import ActivityTotals
from timeframes import DayCounts, FrameSpec, resolve_day_counts

getcontext().prec = 28

# Conversion constants
METERS_PER_KM = Decimal("1000")
SECONDS_PER_HOUR = Decimal("3600")
IDENTITY = Decimal("1")


class Metric(str, Enum):
    DISTANCE = "distance"
    COUNT = "count"
    ELEVATION = "elevation"
    TIME = "time"


class MetricSpec(NamedTuple):
    totals_field: str  # attribute of ActivityTotals
    goal_field: str  # attribute of Goal
    divisor: Decimal  # raw unit -> display unit
    unit: str


METRIC_TABLE: Dict[Metric, MetricSpec] = {
    Metric.DISTANCE: MetricSpec('distance_meters', 'distance_meters', METERS_PER_KM, 'km'),
    Metric.COUNT: MetricSpec('count', 'count', IDENTITY, 'activities'),
    Metric.ELEVATION: MetricSpec('elevation_gain_meters', 'elevation_meters', IDENTITY, 'm'),
    Metric.TIME: MetricSpec('moving_time_seconds', 'time_seconds', SECONDS_PER_HOUR, 'hours'),
}


@dataclass(frozen=True)
class Goal:
    """Sparse per-metric targets in raw units (meters, seconds, activities)."""
    distance_meters: Optional[Decimal] = None
    count: Optional[Decimal] = None
    elevation_meters: Optional[Decimal] = None
    time_seconds: Optional[Decimal] = None

    def targets(self) -> Dict[Metric, Decimal]:
        """Targets that are set, keyed by metric."""
        out: Dict[Metric, Decimal] = {}
        for metric, spec in METRIC_TABLE.items():
            value = getattr(self, spec.goal_field)
            if value is not None:
                out[metric] = Decimal(str(value))
        return out

    @classmethod
    def from_dict(cls, data: Dict) -> Goal:
        """Build a Goal from {'distance': m, 'count': n, 'elevation': m, 'time': s}."""
        def _opt(key: str) -> Optional[Decimal]:
            value = data.get(key)
            return None if value is None else Decimal(str(value))

        return cls(
            distance_meters=_opt('distance'),
            count=_opt('count'),
            elevation_meters=_opt('elevation'),
            time_seconds=_opt('time'),
        )


class ProgressMetric(NamedTuple):
    """Progress and pacing for one goal metric, in display units."""
    current: Decimal
    goal: Decimal
    remainder: Decimal
    daily_pace_needed: Decimal
    percentage: float
    unit: str
    days_remaining: int
    expected_progress_to_date: Decimal
    behind_plan: Decimal  # negative = behind, positive = ahead

    @property
    def status(self) -> str:
        if self.behind_plan > 0:
            return "ahead"
        if self.behind_plan < 0:
            return "behind"
        return "on_track"


def calculate_progress(current: Decimal, goal_value: Decimal, unit: str,
                       day_counts: DayCounts) -> ProgressMetric:
    """Calculate completion and linear pacing for a single metric."""
    percentage = (
        float(min((current / goal_value) * 100, Decimal('100')))
        if goal_value > 0 else 0.0
    )
    remainder = max(Decimal('0'), goal_value - current)

    # Goal accrues linearly across the period
    expected = (
        (goal_value / day_counts.total) * day_counts.elapsed
        if day_counts.total > 0 else Decimal('0')
    )
    behind_plan = current - expected

    if current >= goal_value:
        daily_pace = Decimal('0')
    elif day_counts.remaining <= 0:
        daily_pace = remainder
    else:
        daily_pace = remainder / day_counts.remaining

    return ProgressMetric(
        current=current,
        goal=goal_value,
        remainder=remainder,
        daily_pace_needed=daily_pace,
        percentage=percentage,
        unit=unit,
        days_remaining=day_counts.remaining,
        expected_progress_to_date=expected,
        behind_plan=behind_plan,
    )


def calculate_activity_progress(totals: ActivityTotals, goal: Goal, frame: FrameSpec,
                                now: Optional[datetime] = None) -> Dict[Metric, ProgressMetric]:
    """Calculate progress for every metric the goal sets a target for."""
    targets = goal.targets()
    if not targets:
        return {}

    day_counts = resolve_day_counts(frame, now)
    progress: Dict[Metric, ProgressMetric] = {}

    for metric, target in targets.items():
        spec = METRIC_TABLE[metric]
        current = Decimal(str(getattr(totals, spec.totals_field))) / spec.divisor
        progress[metric] = calculate_progress(current, target / spec.divisor, spec.unit, day_counts)

    return progress
