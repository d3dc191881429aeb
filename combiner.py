# combiner.py

"""
Merges independently fetched activity pools into one combined pool.
A failed source contributes nothing and is reported, so one disconnected
account never hides the rest of a shared dashboard.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, NamedTuple, Optional

from activities import ActivityRecord, ActivityTotals, aggregate
from timeframes import Interval


class SourceResult(NamedTuple):
    source_id: str
    activities: Optional[List[ActivityRecord]]
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.activities is not None


class SourceFailure(NamedTuple):
    source_id: str
    error: str


class CombinedPool(NamedTuple):
    activities: List[ActivityRecord]
    failures: List[SourceFailure]


def combine(sources: Iterable[SourceResult]) -> CombinedPool:
    """Concatenate successful pools and collect failed sources. Never raises."""
    combined: List[ActivityRecord] = []
    failures: List[SourceFailure] = []

    for source in sources:
        if source.ok:
            combined.extend(source.activities)
            continue

        error = source.error or "No activity data fetched"
        logging.warning(f"Source {source.source_id} unavailable: {error}")
        failures.append(SourceFailure(source.source_id, error))

    return CombinedPool(activities=combined, failures=failures)


def breakdown_by_source(sources: Iterable[SourceResult], interval: Interval,
                        categories: Iterable[str]) -> Dict[str, ActivityTotals]:
    """Per-source totals for the successful sources."""
    accepted = categories if isinstance(categories, str) else list(categories)
    return {
        s.source_id: aggregate(s.activities, interval, accepted)
        for s in sources if s.ok
    }
