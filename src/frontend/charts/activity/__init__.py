"""Commit activity strip: debounced inputs, overlay regions and a pluggable chart backend."""

from .backend import ChartBackend, ChartBackendError, ChartConfig, ChartHandle, ChartHandleDestroyed, DataPoint, LoadedSeries
from .graph import ActivityGraph
from .lifecycle import ChartLifecycleManager, ChartOptions, ChartState
from .qt_backend import QtChartsBackend
from .scheduler import ChangeKind, ChangeScheduler
from .selection import SelectionResolver

__all__ = [
    "ActivityGraph",
    "ChangeKind",
    "ChangeScheduler",
    "ChartBackend",
    "ChartBackendError",
    "ChartConfig",
    "ChartHandle",
    "ChartHandleDestroyed",
    "ChartLifecycleManager",
    "ChartOptions",
    "ChartState",
    "DataPoint",
    "LoadedSeries",
    "QtChartsBackend",
    "SelectionResolver",
]
