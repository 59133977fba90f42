# frontend/style/chart_theme.py
from dataclasses import dataclass
import logging

from PySide6.QtGui import QColor, QPen, QBrush, QPalette
from PySide6.QtCharts import QAreaSeries, QChart, QLegend
from PySide6.QtCore import Qt

logger = logging.getLogger(__name__)


def _is_dark(c: QColor) -> bool:
    # perceptual luminance
    l = 0.2126 * c.redF() + 0.7152 * c.greenF() + 0.0722 * c.blueF()
    return l < 0.5


@dataclass
class ChartColors:
    plot_bg: QColor
    activity: QColor
    additions: QColor
    deletions: QColor
    selection: QColor


@dataclass(frozen=True)
class RegionStyle:
    color: QColor
    opacity: float
    # None spans the whole day; otherwise a fixed-width marker line in px.
    width_px: float | None


REGION_STYLES: dict[str, RegionStyle] = {
    "marker-head": RegionStyle(QColor("lime"), 1.0, 2.0),
    "marker-result": RegionStyle(QColor("yellow"), 1.0, 2.0),
    "marker-branch": RegionStyle(QColor("cyan"), 0.7, 1.0),
    "marker-remote": RegionStyle(QColor("cyan"), 0.3, 1.0),
}
DEFAULT_REGION_STYLE = RegionStyle(QColor("steelblue"), 0.1, None)

# Layering: later entries are drawn on top.
REGION_Z_ORDER = ("marker-tag", "marker-remote", "marker-branch", "marker-head", "marker-result")


def region_style(style_class: str) -> RegionStyle:
    return REGION_STYLES.get(style_class, DEFAULT_REGION_STYLE)


def region_z(style_class: str) -> float:
    try:
        return 10.0 + REGION_Z_ORDER.index(style_class)
    except ValueError:
        return 10.0


def make_colors_from_palette(widget) -> ChartColors:
    pal: QPalette = widget.palette()
    base = pal.base().color()
    dark_background = _is_dark(base)

    activity = QColor(91, 155, 255) if dark_background else QColor(66, 133, 244)
    selection = QColor(255, 255, 255) if dark_background else QColor(30, 30, 30)
    return ChartColors(
        plot_bg=base,
        activity=activity,
        additions=QColor(73, 190, 71),
        deletions=QColor(195, 32, 45),
        selection=selection,
    )


def apply_chart_background(chart: QChart, colors: ChartColors):
    """Flat strip background: the graph is only a few dozen pixels tall."""

    chart.setBackgroundVisible(True)
    chart.setBackgroundBrush(QBrush(colors.plot_bg))
    chart.setBackgroundPen(QPen(Qt.PenStyle.NoPen))
    chart.setBackgroundRoundness(0.0)
    chart.setPlotAreaBackgroundVisible(False)


def style_area_series(series: QAreaSeries, color: QColor, opacity: float = 0.2) -> None:
    fill = QColor(color)
    fill.setAlphaF(opacity)
    series.setBrush(QBrush(fill))
    pen = QPen(color, 1.0)
    pen.setCosmetic(True)
    series.setPen(pen)


def hide_legend(legend: QLegend | None) -> None:
    if legend is None:
        return
    try:
        legend.setVisible(False)
    except Exception:
        logger.warning("Exception in hide_legend", exc_info=True)


__all__ = [
    "ChartColors",
    "DEFAULT_REGION_STYLE",
    "REGION_STYLES",
    "RegionStyle",
    "apply_chart_background",
    "hide_legend",
    "make_colors_from_palette",
    "region_style",
    "region_z",
    "style_area_series",
]
