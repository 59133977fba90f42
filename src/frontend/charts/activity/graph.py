from __future__ import annotations
import logging
from typing import Optional

from PySide6.QtCore import Signal
from PySide6.QtWidgets import QFrame, QVBoxLayout

from backend.models.activity import (
    PRIMARY_SERIES,
    ActivityData,
    ActivityInputs,
    ActivityMarkers,
    ActivityStatsSelected,
    SearchResults,
)
from backend.services.activity.axis_scaler import compute_y_max
from backend.services.activity.formatter import format_title, format_value
from backend.services.activity.region_computer import RegionComputer
from backend.services.activity.series_builder import build_series
from core.clock import Clock, LocalClock
from core.datetime_utils import day_to_datetime, get_day
from core.settings_manager import GraphSettings
from ...threading.utils import call_soon
from .backend import ChartBackend, DataPoint
from .lifecycle import ChartLifecycleManager, ChartOptions, ChartState
from .qt_backend import QtChartsBackend
from .scheduler import ChangeKind, ChangeScheduler
from .selection import SelectionResolver

logger = logging.getLogger(__name__)


class ActivityGraph(QFrame):
    """
    Commit activity strip: one point per day from the earliest day in
    ``data`` up to today, with branch/remote/tag markers and search hits
    drawn as overlay regions.

    Inputs are replaced wholesale via :meth:`set_data`, :meth:`set_markers`
    and :meth:`set_search_results`; redraws are debounced. Clicking a day emits
    :attr:`selected` with an :class:`ActivityStatsSelected` payload.
    """

    selected = Signal(object)       # ActivityStatsSelected
    render_failed = Signal(str)

    def __init__(
        self,
        parent=None,
        *,
        backend: Optional[ChartBackend] = None,
        clock: Optional[Clock] = None,
        settings: Optional[GraphSettings] = None,
    ):
        super().__init__(parent)
        self._settings = settings or GraphSettings()
        self._clock = clock or LocalClock()
        self._inputs = ActivityInputs()
        self._regions = RegionComputer(self._inputs)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(0)

        if backend is None:
            backend = QtChartsBackend()
        self._lifecycle = ChartLifecycleManager(
            backend,
            ChartOptions(
                height=self._settings.chart_height,
                bind_to=self,
                on_click=self._on_chart_click,
                tooltip_title=self._tooltip_title,
                tooltip_value=format_value,
            ),
        )
        self._selection = SelectionResolver(self._lifecycle)

        self._scheduler = ChangeScheduler(self._regions, interval_ms=self._settings.debounce_ms, parent=self)
        self._scheduler.load_requested.connect(self._load_chart)
        self._scheduler.search_requested.connect(self._apply_search_results)

        self.setMinimumHeight(self._settings.chart_height)

    # ------------------------------------------------------------------
    @property
    def data(self) -> Optional[ActivityData]:
        return self._inputs.data

    @data.setter
    def data(self, value: Optional[ActivityData]) -> None:
        self.set_data(value)

    @property
    def markers(self) -> Optional[ActivityMarkers]:
        return self._inputs.markers

    @markers.setter
    def markers(self, value: Optional[ActivityMarkers]) -> None:
        self.set_markers(value)

    @property
    def search_results(self) -> Optional[SearchResults]:
        return self._inputs.search_results

    @search_results.setter
    def search_results(self, value: Optional[SearchResults]) -> None:
        self.set_search_results(value)

    def set_data(self, data: Optional[ActivityData]) -> None:
        self._inputs.data = data
        self._scheduler.notify(ChangeKind.DATA)

    def set_markers(self, markers: Optional[ActivityMarkers]) -> None:
        self._inputs.markers = markers
        self._scheduler.notify(ChangeKind.MARKERS)

    def set_search_results(self, search_results: Optional[SearchResults]) -> None:
        self._inputs.search_results = search_results
        self._scheduler.notify(ChangeKind.SEARCH_RESULTS)

    # ------------------------------------------------------------------
    @property
    def chart_state(self) -> ChartState:
        return self._lifecycle.state

    @property
    def scheduler(self) -> ChangeScheduler:
        return self._scheduler

    @property
    def region_computer(self) -> RegionComputer:
        return self._regions

    def flush(self) -> None:
        """Apply pending input changes immediately."""
        self._scheduler.flush()

    def select(self, day) -> None:
        self._selection.select(day)

    def unselect(self, day=None) -> None:
        self._selection.unselect(day)

    def detach(self) -> None:
        """Drop pending work and destroy the chart; call when the host goes away."""
        self._scheduler.cancel()
        self._lifecycle.detach()

    def closeEvent(self, event):
        self.detach()
        super().closeEvent(event)

    # ------------------------------------------------------------------
    def _load_chart(self) -> None:
        settings = self._settings
        try:
            series = build_series(self._inputs.data, self._clock)
            y_max = compute_y_max(
                series.totals(),
                series.changes_max,
                percentile=settings.percentile,
                headroom_ratio=settings.headroom_ratio,
                padding=settings.y_padding,
            )
            self._lifecycle.render(series, y_max, self._regions.all_regions())
        except Exception as exc:
            logger.exception("Failed to render the activity graph")
            self.render_failed.emit(str(exc))

    def _apply_search_results(self) -> None:
        if not self._lifecycle.is_active or not self._inputs.data:
            return
        try:
            self._lifecycle.update_regions(self._regions.all_regions())
        except Exception as exc:
            logger.exception("Failed to apply search results to the activity graph")
            self.render_failed.emit(str(exc))

    def _on_chart_click(self, point: DataPoint) -> None:
        if point.series_id != PRIMARY_SERIES:
            return
        day = get_day(point.x)
        hit = self._inputs.search_result_for(day)
        if hit is not None:
            sha = hit.sha
        else:
            stat = self._inputs.stat_for(day)
            sha = stat.sha if stat is not None else None

        payload = ActivityStatsSelected(date=day_to_datetime(point.x), day=day, sha=sha)
        # Emitted on the next event loop turn, outside the chart's click dispatch.
        call_soon(self.selected.emit, payload, context=self)

    def _tooltip_title(self, x: int) -> str:
        day = get_day(x)
        return format_title(day, self._inputs.markers_for(day), self._clock.now())


__all__ = ["ActivityGraph"]
