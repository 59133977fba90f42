
from __future__ import annotations
import logging
from typing import Optional

import pandas as pd

from backend.models.activity import ActivityData, ActivitySeries
from core.clock import Clock
from core.datetime_utils import previous_day

logger = logging.getLogger(__name__)


def earliest_day(data: ActivityData) -> Optional[int]:
    """The last inserted key of ``data``; callers insert newest first."""
    if not data:
        return None
    *_, last = data.keys()
    return int(last)


def build_series(data: Optional[ActivityData], clock: Clock) -> ActivitySeries:
    """Expand the sparse ``day -> DailyStat`` map into one row per day.

    Walks backwards from ``clock.today()`` down to the earliest day, so the
    resulting rows are ordered most recent first. Days missing from ``data``
    (or mapped to ``None``) become zero rows.
    """
    end_day = earliest_day(data) if data else None
    if end_day is None:
        return ActivitySeries()

    dates: list[int] = []
    activity: list[int] = []
    additions: list[int] = []
    deletions: list[int] = []
    changes_max = 0

    day = clock.today()
    while day >= end_day:
        stat = data.get(day)
        change = stat.activity if stat is not None else None
        adds = change.additions if change is not None else 0
        deletes = change.deletions if change is not None else 0
        changes = adds + deletes
        changes_max = max(changes_max, changes)

        dates.append(day)
        activity.append(changes)
        additions.append(adds)
        deletions.append(-deletes)

        day = previous_day(day)

    frame = pd.DataFrame(
        {"date": dates, "activity": activity, "additions": additions, "deletions": deletions},
        dtype="int64",
    )
    logger.debug("Built activity series with %d days (max change %d)", len(frame), changes_max)
    return ActivitySeries(frame=frame, changes_max=changes_max)


__all__ = ["build_series", "earliest_day"]
