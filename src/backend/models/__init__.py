"""Plain data containers shared between backend services and the UI."""
from .activity import (
    ACTIVITY_STATS_SELECTED,
    ActivityChange,
    ActivityInputs,
    ActivitySeries,
    ActivityStatsSelected,
    DailyStat,
    Marker,
    MarkerType,
    Region,
    SearchResultMarker,
    SeriesPoint,
)

__all__ = [
    "ACTIVITY_STATS_SELECTED",
    "ActivityChange",
    "ActivityInputs",
    "ActivitySeries",
    "ActivityStatsSelected",
    "DailyStat",
    "Marker",
    "MarkerType",
    "Region",
    "SearchResultMarker",
    "SeriesPoint",
]
