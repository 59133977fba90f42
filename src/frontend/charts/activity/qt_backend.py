from __future__ import annotations
import logging
from typing import Dict, List, Optional, Sequence

from PySide6.QtCore import QDateTime, QMargins, QPointF, QRectF, Qt
from PySide6.QtGui import QBrush, QColor, QCursor, QPainter, QPen
from PySide6.QtWidgets import QGraphicsRectItem, QToolTip
from PySide6.QtCharts import (
    QAreaSeries,
    QChart,
    QChartView,
    QDateTimeAxis,
    QLineSeries,
    QScatterSeries,
    QValueAxis,
)

from backend.models.activity import Region
from core.datetime_utils import MS_PER_DAY
from ...style.chart_theme import (
    apply_chart_background,
    hide_legend,
    make_colors_from_palette,
    region_style,
    region_z,
    style_area_series,
)
from .backend import (
    ChartBackendError,
    ChartConfig,
    ChartHandleDestroyed,
    LoadedSeries,
    loaded_series_from_columns,
)

logger = logging.getLogger(__name__)

SERIES_NAMES = {"activity": "Activity", "additions": "Additions", "deletions": "Deletions"}


class ActivityChartView(QChartView):
    """Chart view for the activity strip.

    Left-drag  = horizontal rubber-band zoom (when enabled)
    Right click = zoom back out
    Hover       = tooltip snapped to the nearest day
    """

    def __init__(self, chart: QChart, parent=None, *, zoom: bool = True):
        super().__init__(chart, parent)
        self.setRenderHint(QPainter.RenderHint.Antialiasing)
        self.setMouseTracking(True)
        self.setContentsMargins(0, 0, 0, 0)
        try:
            if zoom:
                self.setRubberBand(QChartView.RubberBand.HorizontalRubberBand)
            else:
                self.setRubberBand(QChartView.RubberBand.NoRubberBand)
        except Exception:
            logger.warning("Failed to configure rubber-band zoom for the activity chart.", exc_info=True)


class _QtAxisControl:
    def __init__(self, handle: "QtChartHandle") -> None:
        self._handle = handle

    def max(self, *, y: Optional[float] = None) -> None:
        self._handle._check_alive()
        if y is not None:
            self._handle.axis_y.setMax(float(y))


class QtChartHandle:
    """A live QtCharts activity strip embedded in ``config.bind_to``."""

    def __init__(self, config: ChartConfig) -> None:
        self._config = config
        self._destroyed = False
        self._loaded: List[LoadedSeries] = []
        self._selected: Dict[str, set[int]] = {}
        self._region_specs: List[Region] = []
        self._region_items: List[QGraphicsRectItem] = []

        self.chart = QChart()
        self.chart.setMargins(QMargins(0, 0, 0, 0))
        self.chart.layout().setContentsMargins(0, 0, 0, 0)
        hide_legend(self.chart.legend())

        self.axis_x = QDateTimeAxis()
        self.axis_x.setVisible(False)
        self.chart.addAxis(self.axis_x, Qt.AlignmentFlag.AlignBottom)

        self.axis_y = QValueAxis()
        self.axis_y.setVisible(False)
        self.axis_y.setRange(float(config.y_min), float(config.y_max))
        self.chart.addAxis(self.axis_y, Qt.AlignmentFlag.AlignLeft)

        self._lines: Dict[str, QLineSeries] = {}
        self._areas: Dict[str, QAreaSeries] = {}
        self._baseline = QLineSeries()
        for series_id in [name for name in config.columns if name != "date"]:
            line = QLineSeries()
            if series_id == "deletions":
                # Deletions are negative: fill from the zero line down.
                area = QAreaSeries(self._baseline, line)
            else:
                area = QAreaSeries(line)
            area.setName(SERIES_NAMES.get(series_id, series_id))
            self.chart.addSeries(area)
            area.attachAxis(self.axis_x)
            area.attachAxis(self.axis_y)
            self._lines[series_id] = line
            self._areas[series_id] = area

        self._selection_series = QScatterSeries()
        self._selection_series.setMarkerSize(7.0)
        self.chart.addSeries(self._selection_series)
        self._selection_series.attachAxis(self.axis_x)
        self._selection_series.attachAxis(self.axis_y)

        self.view = ActivityChartView(self.chart, config.bind_to, zoom=config.zoom)
        self.view.setFixedHeight(int(config.height))
        self._apply_colors()

        primary_area = self._areas.get(config.primary)
        if primary_area is not None:
            primary_area.clicked.connect(self._on_clicked)
            primary_area.hovered.connect(self._on_hovered)
        try:
            self.chart.plotAreaChanged.connect(lambda *_args: self._refresh_regions())
        except Exception:
            logger.warning("Failed to connect plot-area change handler for activity regions.", exc_info=True)
        try:
            self.axis_x.rangeChanged.connect(lambda *_args: self._refresh_regions())
        except Exception:
            logger.warning("Failed to connect X-axis range change handler for activity regions.", exc_info=True)

        host = config.bind_to
        if host is not None and host.layout() is not None:
            host.layout().addWidget(self.view)

        self.axis = _QtAxisControl(self)
        self.load(config.columns)
        self.regions(config.regions)

    # ------------------------------------------------------------------
    def load(self, columns: Dict[str, List[int]]) -> None:
        self._check_alive()
        xs = [int(x) for x in columns.get("date", [])]
        for series_id, line in self._lines.items():
            values = columns.get(series_id, [])
            line.replace([QPointF(float(x), float(v)) for x, v in zip(xs, values)])
        self._baseline.replace([QPointF(float(x), 0.0) for x in xs])

        if xs:
            lo, hi = min(xs), max(xs)
            if lo == hi:
                lo -= MS_PER_DAY // 2
                hi += MS_PER_DAY // 2
            self.axis_x.setRange(QDateTime.fromMSecsSinceEpoch(lo), QDateTime.fromMSecsSinceEpoch(hi))

        self._loaded = loaded_series_from_columns(columns, primary=self._config.primary)
        count = len(xs)
        self._selected = {sid: {i for i in idx if i < count} for sid, idx in self._selected.items()}
        self._refresh_selection()
        self._refresh_regions()

    def regions(self, regions: Sequence[Region]) -> None:
        self._check_alive()
        self._region_specs = list(regions)
        self._refresh_regions()

    def select(self, series_id: str, indices: Sequence[int]) -> None:
        """Select ``indices`` of ``series_id``, clearing any other selection."""
        self._check_alive()
        count = len(self._loaded[0].xs) if self._loaded else 0
        self._selected = {series_id: {int(i) for i in indices if 0 <= int(i) < count}}
        self._refresh_selection()

    def unselect(self, series_id: Optional[str] = None, indices: Optional[Sequence[int]] = None) -> None:
        self._check_alive()
        targets = [series_id] if series_id is not None else list(self._selected)
        for sid in targets:
            if indices is None:
                self._selected.pop(sid, None)
            elif sid in self._selected:
                self._selected[sid].difference_update(int(i) for i in indices)
        self._refresh_selection()

    def selected(self, series_id: str) -> List[int]:
        self._check_alive()
        return sorted(self._selected.get(series_id, ()))

    def data(self) -> List[LoadedSeries]:
        self._check_alive()
        return list(self._loaded)

    def destroy(self) -> None:
        if self._destroyed:
            return
        self._clear_region_items()
        host = self._config.bind_to
        try:
            if host is not None and host.layout() is not None:
                host.layout().removeWidget(self.view)
            self.view.hide()
            self.view.setParent(None)
            self.view.deleteLater()
        finally:
            self._destroyed = True
            self._lines.clear()
            self._areas.clear()
            self._loaded = []
            self._selected = {}
            self._region_specs = []

    @property
    def is_destroyed(self) -> bool:
        return self._destroyed

    # ------------------------------------------------------------------
    def _check_alive(self) -> None:
        if self._destroyed:
            raise ChartHandleDestroyed("The activity chart has been destroyed")

    def _apply_colors(self) -> None:
        colors = make_colors_from_palette(self.view)
        apply_chart_background(self.chart, colors)
        palette = {"activity": (colors.activity, 0.2), "additions": (colors.additions, 0.6), "deletions": (colors.deletions, 0.6)}
        for series_id, area in self._areas.items():
            color, opacity = palette.get(series_id, (colors.activity, 0.2))
            style_area_series(area, color, opacity)
        self._selection_series.setColor(colors.selection)
        self._selection_series.setBorderColor(colors.selection)

    def _refresh_selection(self) -> None:
        if not self._loaded:
            self._selection_series.clear()
            return
        points = []
        for series in self._loaded:
            for index in sorted(self._selected.get(series.id, ())):
                points.append(QPointF(float(series.xs[index]), float(series.values[index])))
        self._selection_series.replace(points)

    def _clear_region_items(self) -> None:
        scene = self.chart.scene()
        for item in self._region_items:
            try:
                if scene is not None:
                    scene.removeItem(item)
            except Exception:
                logger.warning("Failed to remove an activity region overlay item.", exc_info=True)
        self._region_items = []

    def _refresh_regions(self) -> None:
        if self._destroyed:
            return
        self._clear_region_items()
        if not self._region_specs or not self._loaded:
            return
        scene = self.chart.scene()
        if scene is None:
            return
        plot_area = self.chart.plotArea()
        if plot_area.width() <= 0 or plot_area.height() <= 0:
            return
        ref_series = self._areas.get(self._config.primary)
        if ref_series is None:
            return

        for region in self._region_specs:
            style = region_style(region.style_class)
            x_start = self.chart.mapToPosition(QPointF(float(region.start), 0.0), ref_series).x()
            if style.width_px is None:
                x_end = self.chart.mapToPosition(QPointF(float(region.end + MS_PER_DAY), 0.0), ref_series).x()
                left, right = min(x_start, x_end), max(x_start, x_end)
            else:
                left = x_start - style.width_px / 2.0
                right = left + style.width_px
            if right < plot_area.left() or left > plot_area.right():
                continue
            left = max(float(plot_area.left()), left)
            right = min(float(plot_area.right()), right)
            if right - left <= 0.0:
                continue

            fill = QColor(style.color)
            fill.setAlphaF(style.opacity)
            item = QGraphicsRectItem(QRectF(left, plot_area.top(), right - left, plot_area.height()))
            item.setPen(QPen(Qt.PenStyle.NoPen))
            item.setBrush(QBrush(fill))
            item.setZValue(region_z(region.style_class))
            scene.addItem(item)
            self._region_items.append(item)

    def _on_clicked(self, point: QPointF) -> None:
        if self._destroyed or not self._loaded or self._config.on_click is None:
            return
        primary = self._loaded[0]
        index = primary.nearest_index(point.x())
        if index is None:
            return
        self._config.on_click(primary.point(index))

    def _on_hovered(self, point: QPointF, state: bool) -> None:
        if self._destroyed or not state or not self._loaded:
            QToolTip.hideText()
            return
        primary = self._loaded[0]
        index = primary.nearest_index(point.x())
        if index is None:
            return
        x = primary.xs[index]
        title_fn = self._config.tooltip_title
        value_fn = self._config.tooltip_value
        lines = [title_fn(x) if title_fn is not None else QDateTime.fromMSecsSinceEpoch(x).toString("yyyy-MM-dd")]
        for series in self._loaded:
            value = series.values[index]
            text = value_fn(value, series.id) if value_fn is not None else f"{value:g}"
            lines.append(f"{SERIES_NAMES.get(series.id, series.id)}: {text}")
        QToolTip.showText(QCursor.pos(), "\n".join(lines), self.view)


class QtChartsBackend:
    """Builds activity charts with PySide6.QtCharts."""

    def generate(self, config: ChartConfig) -> QtChartHandle:
        if "date" not in config.columns:
            raise ChartBackendError("Chart columns need a 'date' entry")
        logger.debug("Generating activity chart with %d days", len(config.columns["date"]))
        return QtChartHandle(config)


__all__ = ["ActivityChartView", "QtChartHandle", "QtChartsBackend"]
