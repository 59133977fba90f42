"""Tests for the QtCharts rendering backend."""
from dataclasses import fields
from datetime import timedelta

import pytest
from PySide6.QtCore import QPointF
from PySide6.QtTest import QTest
from PySide6.QtWidgets import QVBoxLayout, QWidget

from conftest import TODAY, day
from backend.models.activity import Region
from frontend.charts.activity.backend import ChartBackendError, ChartConfig, ChartHandleDestroyed, LoadedSeries
from frontend.charts.activity import qt_backend
from frontend.charts.activity.qt_backend import QtChartsBackend
from frontend.style.chart_theme import ChartColors, make_colors_from_palette

DAYS = [day(TODAY - timedelta(days=n)) for n in range(4)]


def _columns():
    return {
        "date": list(DAYS),
        "activity": [5, 0, 12, 1],
        "additions": [3, 0, 10, 1],
        "deletions": [-2, 0, -2, 0],
    }


@pytest.fixture
def host(qapp):
    widget = QWidget()
    QVBoxLayout(widget)
    yield widget
    widget.deleteLater()


@pytest.fixture
def clicks():
    return []


@pytest.fixture
def handle(host, clicks):
    config = ChartConfig(
        columns=_columns(),
        y_max=120.0,
        regions=[Region("x", DAYS[1], DAYS[1], "marker-branch")],
        bind_to=host,
        on_click=clicks.append,
    )
    chart = QtChartsBackend().generate(config)
    yield chart
    chart.destroy()


def test_generate_requires_dates(host):
    with pytest.raises(ChartBackendError):
        QtChartsBackend().generate(ChartConfig(columns={"activity": [1]}, y_max=10.0, bind_to=host))


def test_view_is_added_to_host_layout(handle, host):
    assert host.layout().indexOf(handle.view) >= 0
    assert handle.view.maximumHeight() == 44


def test_data_puts_primary_series_first(handle):
    loaded = handle.data()
    assert [series.id for series in loaded] == ["activity", "additions", "deletions"]
    assert loaded[0].xs == DAYS
    assert loaded[2].values == [-2.0, 0.0, -2.0, 0.0]


def test_axis_bounds(handle):
    assert handle.axis_y.min() == 0.0
    assert handle.axis_y.max() == 120.0
    handle.axis.max(y=300.0)
    assert handle.axis_y.max() == 300.0


def test_load_replaces_columns(handle):
    columns = _columns()
    columns["activity"] = [1, 1, 1, 1]
    handle.load(columns)
    assert handle.data()[0].values == [1.0, 1.0, 1.0, 1.0]
    assert handle._lines["activity"].count() == 4


def test_select_is_single_and_unselect_clears(handle):
    handle.select("activity", [1])
    handle.select("activity", [2])
    assert handle.selected("activity") == [2]
    assert handle._selection_series.count() == 1

    handle.unselect(None, [2])
    assert handle.selected("activity") == []
    handle.select("activity", [0, 99])
    assert handle.selected("activity") == [0]
    handle.unselect()
    assert handle._selection_series.count() == 0


def test_click_reports_nearest_primary_point(handle, clicks):
    handle._on_clicked(QPointF(float(DAYS[2] + 3_600_000), 4.0))
    assert len(clicks) == 1
    assert clicks[0].series_id == "activity"
    assert clicks[0].x == DAYS[2]
    assert clicks[0].index == 2
    assert clicks[0].value == 12.0


def test_destroy_is_idempotent_and_blocks_use(handle, host):
    handle.regions([])
    handle.destroy()
    handle.destroy()
    assert handle.is_destroyed
    assert host.layout().indexOf(handle.view) == -1
    with pytest.raises(ChartHandleDestroyed):
        handle.load(_columns())
    with pytest.raises(ChartHandleDestroyed):
        handle.axis.max(y=1.0)


def test_nearest_index_handles_unsorted_series():
    series = LoadedSeries("activity", [30, 10, 20], [3.0, 1.0, 2.0])
    assert series.nearest_index(11) == 1
    assert series.nearest_index(26) == 0
    assert series.nearest_index(-5) == 1
    assert series.index_of(20) == 2
    assert series.index_of(21) is None
    assert LoadedSeries("empty").nearest_index(3) is None


def test_region_styles_and_layering():
    from frontend.style.chart_theme import DEFAULT_REGION_STYLE, region_style, region_z

    assert region_style("marker-tag") is DEFAULT_REGION_STYLE
    assert region_style("marker-head").width_px == 2.0
    assert region_z("marker-result") > region_z("marker-head") > region_z("marker-branch")


MONTH = [day(TODAY - timedelta(days=n)) for n in range(30)]


def _month_columns():
    return {
        "date": list(MONTH),
        "activity": [n % 7 for n in range(30)],
        "additions": [n % 5 for n in range(30)],
        "deletions": [-(n % 3) for n in range(30)],
    }


def _wait_until(predicate, timeout_ms: int = 3000) -> bool:
    waited = 0
    while not predicate() and waited < timeout_ms:
        QTest.qWait(20)
        waited += 20
    return predicate()


@pytest.fixture
def shown_month(host):
    host.resize(600, 60)
    chart = QtChartsBackend().generate(ChartConfig(columns=_month_columns(), y_max=20.0, bind_to=host))
    host.show()
    assert _wait_until(lambda: chart.chart.plotArea().width() > 100)
    yield chart
    chart.destroy()
    host.hide()


def test_regions_are_placed_by_day_inside_the_plot_area(shown_month):
    oldest, middle, newest = MONTH[28], MONTH[15], MONTH[1]
    shown_month.regions(
        [
            Region("v1", middle, middle, "marker-tag"),
            Region("main", oldest, oldest, "marker-head"),
            Region("hit", newest, newest, "marker-result"),
        ]
    )

    plot = shown_month.chart.plotArea()
    rects = [item.rect() for item in shown_month._region_items]
    assert len(rects) == 3
    tag, head, result = rects

    assert head.left() < tag.left() < result.left()
    for rect in rects:
        assert rect.left() >= plot.left()
        assert rect.right() <= plot.right()
        assert rect.top() == plot.top()
        assert rect.height() == plot.height()

    day_width = plot.width() / 29
    assert tag.width() == pytest.approx(day_width, rel=0.05)
    assert head.width() == pytest.approx(2.0)


def test_regions_follow_the_plot_area_when_resized(shown_month, host):
    shown_month.regions([Region("v1", MONTH[15], MONTH[15], "marker-tag")])
    before = shown_month._region_items[0].rect().width()

    host.resize(900, 60)
    assert _wait_until(lambda: shown_month._region_items and shown_month._region_items[0].rect().width() > before)
    assert len(shown_month._region_items) == 1


def test_hover_tooltip_uses_title_and_value_formatters(host, monkeypatch):
    shown = []

    class _ToolTip:
        @staticmethod
        def showText(pos, text, widget=None):
            shown.append(text)

        @staticmethod
        def hideText():
            shown.append(None)

    monkeypatch.setattr(qt_backend, "QToolTip", _ToolTip)
    config = ChartConfig(
        columns=_columns(),
        y_max=120.0,
        bind_to=host,
        tooltip_title=lambda x: f"day {x}",
        tooltip_value=lambda value, series_id: f"{value:g} {series_id}",
    )
    chart = QtChartsBackend().generate(config)
    try:
        chart._on_hovered(QPointF(float(DAYS[2] - 3_600_000), 3.0), True)
        chart._on_hovered(QPointF(float(DAYS[2]), 3.0), False)
    finally:
        chart.destroy()

    assert shown == [
        f"day {DAYS[2]}\nActivity: 12 activity\nAdditions: 10 additions\nDeletions: -2 deletions",
        None,
    ]


def test_chart_colors_only_carry_drawn_roles(host):
    colors = make_colors_from_palette(host)
    assert {f.name for f in fields(ChartColors)} == {"plot_bg", "activity", "additions", "deletions", "selection"}
    assert colors.plot_bg == host.palette().base().color()
