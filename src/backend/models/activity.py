from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Mapping, Optional

import pandas as pd

SERIES_COLUMNS = ("activity", "additions", "deletions")
PRIMARY_SERIES = "activity"


@dataclass(frozen=True)
class ActivityChange:
    additions: int = 0
    deletions: int = 0


@dataclass(frozen=True)
class DailyStat:
    """Aggregated commit statistics for one day."""

    commits: int = 0
    activity: Optional[ActivityChange] = None
    files: Optional[int] = None
    # Representative commit of the day (the newest one).
    sha: Optional[str] = None


class MarkerType(str, Enum):
    BRANCH = "branch"
    REMOTE = "remote"
    TAG = "tag"


@dataclass(frozen=True)
class Marker:
    type: MarkerType
    name: str
    current: bool = False

    @classmethod
    def branch(cls, name: str, current: bool = False) -> "Marker":
        return cls(MarkerType.BRANCH, name, current)

    @classmethod
    def remote(cls, name: str, current: bool = False) -> "Marker":
        return cls(MarkerType.REMOTE, name, current)

    @classmethod
    def tag(cls, name: str) -> "Marker":
        return cls(MarkerType.TAG, name, False)


@dataclass(frozen=True)
class SearchResultMarker:
    sha: str


ActivityData = Mapping[int, Optional[DailyStat]]
ActivityMarkers = Mapping[int, List[Marker]]
SearchResults = Mapping[int, SearchResultMarker]


@dataclass(frozen=True)
class Region:
    """Overlay band handed to the rendering backend."""

    axis: str
    start: int
    end: int
    style_class: str


@dataclass(frozen=True)
class SeriesPoint:
    day: int
    total_change: int
    additions: int
    deletions: int


@dataclass
class ActivitySeries:
    """Contiguous per-day series, most recent day first.

    ``frame`` has one row per day with the columns ``date``, ``activity``,
    ``additions`` and ``deletions`` (negated).
    """

    frame: pd.DataFrame = field(
        default_factory=lambda: pd.DataFrame(columns=["date", *SERIES_COLUMNS], dtype="int64")
    )
    changes_max: int = 0

    @property
    def is_empty(self) -> bool:
        return self.frame.empty

    def __len__(self) -> int:
        return len(self.frame)

    def days(self) -> List[int]:
        return [int(v) for v in self.frame["date"].tolist()]

    def totals(self) -> List[int]:
        return [int(v) for v in self.frame["activity"].tolist()]

    def points(self) -> List[SeriesPoint]:
        return [
            SeriesPoint(int(row.date), int(row.activity), int(row.additions), int(row.deletions))
            for row in self.frame.itertuples(index=False)
        ]

    def columns(self) -> Dict[str, List[int]]:
        """Column lists keyed by series id, x values under ``"date"``."""
        return {name: [int(v) for v in self.frame[name].tolist()] for name in ("date", *SERIES_COLUMNS)}


@dataclass
class ActivityInputs:
    """Latest replace-wholesale snapshots fed to the graph."""

    data: Optional[ActivityData] = None
    markers: Optional[ActivityMarkers] = None
    search_results: Optional[SearchResults] = None

    def stat_for(self, day: int) -> Optional[DailyStat]:
        if not self.data:
            return None
        return self.data.get(day)

    def markers_for(self, day: int) -> Optional[List[Marker]]:
        if not self.markers:
            return None
        return self.markers.get(day)

    def search_result_for(self, day: int) -> Optional[SearchResultMarker]:
        if not self.search_results:
            return None
        return self.search_results.get(day)


ACTIVITY_STATS_SELECTED = "activity-stats-selected"


@dataclass(frozen=True)
class ActivityStatsSelected:
    """Payload of the ``activity-stats-selected`` event."""

    date: datetime
    day: int
    sha: Optional[str] = None


__all__ = [
    "ACTIVITY_STATS_SELECTED",
    "ActivityChange",
    "ActivityData",
    "ActivityInputs",
    "ActivityMarkers",
    "ActivitySeries",
    "ActivityStatsSelected",
    "DailyStat",
    "Marker",
    "MarkerType",
    "PRIMARY_SERIES",
    "Region",
    "SERIES_COLUMNS",
    "SearchResultMarker",
    "SearchResults",
    "SeriesPoint",
]
