"""
Narrow contract between the activity graph and whatever draws it.

The graph never touches chart objects directly: it generates a handle from a
:class:`ChartConfig` and drives it through the handful of calls below. The
production implementation lives in :mod:`.qt_backend`; tests use a recording
fake.
"""

from __future__ import annotations

from bisect import bisect_left
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Protocol, Sequence

from PySide6.QtWidgets import QWidget

from backend.models.activity import PRIMARY_SERIES, Region


class ChartBackendError(RuntimeError):
    """Raised by a backend when a chart cannot be built or updated."""


class ChartHandleDestroyed(ChartBackendError):
    """The handle was used after :meth:`ChartHandle.destroy`."""


@dataclass(frozen=True)
class DataPoint:
    """A point of a loaded series, as reported by click callbacks."""

    series_id: str
    x: int
    value: float
    index: int


@dataclass
class LoadedSeries:
    id: str
    xs: List[int] = field(default_factory=list)
    values: List[float] = field(default_factory=list)

    def index_of(self, x: int) -> Optional[int]:
        try:
            return self.xs.index(x)
        except ValueError:
            return None

    def nearest_index(self, x: float) -> Optional[int]:
        """Index of the point closest to ``x``; the series may be in any order."""
        if not self.xs:
            return None
        order = sorted(range(len(self.xs)), key=self.xs.__getitem__)
        ordered = [self.xs[i] for i in order]
        pos = bisect_left(ordered, x)
        candidates = [p for p in (pos - 1, pos) if 0 <= p < len(ordered)]
        best = min(candidates, key=lambda p: abs(ordered[p] - x))
        return order[best]

    def point(self, index: int) -> DataPoint:
        return DataPoint(self.id, self.xs[index], self.values[index], index)


@dataclass
class ChartConfig:
    """Everything needed to build a chart from scratch."""

    columns: Dict[str, List[int]]
    y_max: float
    y_min: float = 0.0
    regions: Sequence[Region] = ()
    height: int = 44
    primary: str = PRIMARY_SERIES
    selection: bool = True
    zoom: bool = True
    bind_to: Optional[QWidget] = None
    on_click: Optional[Callable[[DataPoint], None]] = None
    tooltip_title: Optional[Callable[[int], str]] = None
    tooltip_value: Optional[Callable[[float, str], str]] = None


class AxisControl(Protocol):
    def max(self, *, y: Optional[float] = None) -> None: ...


class ChartHandle(Protocol):
    axis: AxisControl

    def load(self, columns: Dict[str, List[int]]) -> None: ...

    def regions(self, regions: Sequence[Region]) -> None: ...

    def select(self, series_id: str, indices: Sequence[int]) -> None: ...

    def unselect(self, series_id: Optional[str] = None, indices: Optional[Sequence[int]] = None) -> None: ...

    def selected(self, series_id: str) -> List[int]: ...

    def data(self) -> List[LoadedSeries]: ...

    def destroy(self) -> None: ...


class ChartBackend(Protocol):
    def generate(self, config: ChartConfig) -> ChartHandle: ...


def loaded_series_from_columns(columns: Dict[str, List[int]], *, primary: str = PRIMARY_SERIES) -> List[LoadedSeries]:
    """Turn backend columns into loaded series, primary series first."""
    xs = list(columns.get("date", []))
    ids = [name for name in columns if name != "date"]
    if primary in ids:
        ids.remove(primary)
        ids.insert(0, primary)
    return [LoadedSeries(name, list(xs), [float(v) for v in columns[name]]) for name in ids]


__all__ = [
    "AxisControl",
    "ChartBackend",
    "ChartBackendError",
    "ChartConfig",
    "ChartHandle",
    "ChartHandleDestroyed",
    "DataPoint",
    "LoadedSeries",
    "loaded_series_from_columns",
]
