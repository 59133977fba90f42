"""End-to-end tests of the activity graph widget against a recording backend."""
from datetime import timedelta

import pytest
from PySide6.QtTest import QTest

from conftest import TODAY, RecordingBackend, day
from backend.models.activity import ActivityChange, DailyStat, Marker, Region, SearchResultMarker
from core.settings_manager import GraphSettings
from frontend.charts.activity import ActivityGraph, ChartBackendError, ChartState

D0 = day(TODAY)
D1 = day(TODAY - timedelta(days=1))
D3 = day(TODAY - timedelta(days=3))


@pytest.fixture
def graph_env(qapp, clock):
    backend = RecordingBackend()
    graph = ActivityGraph(backend=backend, clock=clock, settings=GraphSettings(debounce_ms=20))
    selected = []
    failures = []
    graph.selected.connect(selected.append)
    graph.render_failed.connect(failures.append)
    yield graph, backend, selected, failures
    graph.detach()
    graph.deleteLater()


def _data():
    return {
        D0: DailyStat(2, ActivityChange(10, 5), sha="stat-d0"),
        D1: DailyStat(1, ActivityChange(1, 1), sha="stat-d1"),
        D3: None,
    }


def test_single_null_day_scenario(graph_env):
    graph, backend, _selected, _failures = graph_env
    graph.set_data({D0: None})
    graph.flush()

    config = backend.calls[0][1]
    assert config.columns["date"] == [D0]
    assert config.columns["activity"] == [0]
    assert config.y_max == 100
    assert list(config.regions) == []
    assert graph.chart_state is ChartState.ACTIVE


def test_five_quick_data_changes_render_once_with_latest(graph_env):
    graph, backend, _selected, _failures = graph_env
    for n in range(5):
        graph.data = {day(TODAY - timedelta(days=n)): None}
    QTest.qWait(120)

    assert backend.call_names() == ["generate"]
    assert backend.calls[0][1].columns["date"][-1] == day(TODAY - timedelta(days=4))


def test_inputs_are_read_when_the_timer_fires(graph_env):
    graph, backend, _selected, _failures = graph_env
    graph.set_data({D1: None})
    graph._inputs.data = {D3: None}
    graph.flush()
    assert len(backend.calls[0][1].columns["date"]) == 4


def test_markers_and_search_results_become_regions(graph_env):
    graph, backend, _selected, _failures = graph_env
    graph.set_data(_data())
    graph.set_markers({D1: [Marker.branch("main", current=True), Marker.tag("v1")]})
    graph.flush()
    handle = backend.handle
    assert handle.current_regions == [
        Region("x", D1, D1, "marker-head"),
        Region("x", D1, D1, "marker-tag"),
    ]

    graph.set_search_results({D0: SearchResultMarker("hit-d0")})
    graph.flush()
    assert backend.call_names()[-1] == "regions"
    assert "load" not in backend.call_names()
    assert handle.current_regions[-1] == Region("x", D0, D0, "marker-result")


def test_search_results_before_any_chart_are_kept_for_first_render(graph_env):
    graph, backend, _selected, _failures = graph_env
    graph.set_search_results({D0: SearchResultMarker("hit")})
    graph.flush()
    assert backend.calls == []

    graph.set_data(_data())
    graph.flush()
    assert list(backend.calls[0][1].regions) == [Region("x", D0, D0, "marker-result")]


def test_click_prefers_search_result_sha(graph_env):
    graph, backend, selected, _failures = graph_env
    graph.set_data(_data())
    graph.set_search_results({D0: SearchResultMarker("hit-d0")})
    graph.flush()

    backend.handle.click(D0)
    assert selected == []  # delivered on the next event loop turn
    QTest.qWait(10)
    assert len(selected) == 1
    assert selected[0].sha == "hit-d0"
    assert selected[0].day == D0
    assert selected[0].date.date() == TODAY


def test_click_falls_back_to_stat_sha_or_none(graph_env):
    graph, backend, selected, _failures = graph_env
    graph.set_data(_data())
    graph.flush()

    backend.handle.click(D1)
    backend.handle.click(D3)
    QTest.qWait(10)
    assert [event.sha for event in selected] == ["stat-d1", None]


def test_emptying_data_destroys_handle_once(graph_env):
    graph, backend, _selected, _failures = graph_env
    graph.set_data(_data())
    graph.flush()
    handle = backend.handle

    graph.set_data({})
    graph.flush()
    graph.set_data(None)
    graph.flush()

    assert handle.destroy_count == 1
    assert graph.chart_state is ChartState.UNINITIALIZED


def test_update_keeps_the_same_handle(graph_env):
    graph, backend, _selected, _failures = graph_env
    graph.set_data(_data())
    graph.flush()
    graph.set_data({D0: DailyStat(1, ActivityChange(500, 0))})
    graph.flush()
    assert len(backend.handles) == 1
    assert backend.call_names() == ["generate", "load", "axis.max", "regions"]
    assert backend.handle.y_max == 600


def test_select_and_unselect_days(graph_env):
    graph, backend, _selected, _failures = graph_env
    graph.set_data(_data())
    graph.flush()
    graph.select(D1)
    assert backend.handle.selected("activity") == [1]
    graph.unselect()
    assert backend.handle.selected("activity") == []


def test_backend_failure_is_reported_and_retried_on_next_change(qapp, clock):
    backend = RecordingBackend(fail_with=ChartBackendError("no chart for you"))
    graph = ActivityGraph(backend=backend, clock=clock, settings=GraphSettings(debounce_ms=20))
    failures = []
    graph.render_failed.connect(failures.append)

    graph.set_data(_data())
    graph.flush()
    assert failures == ["no chart for you"]
    assert graph.chart_state is ChartState.UNINITIALIZED

    backend.fail_with = None
    graph.set_data(_data())
    graph.flush()
    assert graph.chart_state is ChartState.ACTIVE
    graph.detach()


def test_detach_cancels_pending_work_and_destroys(graph_env):
    graph, backend, _selected, _failures = graph_env
    graph.set_data(_data())
    graph.flush()
    handle = backend.handle

    graph.set_data({D0: None})
    graph.detach()
    QTest.qWait(60)
    assert handle.destroy_count == 1
    assert backend.call_names() == ["generate", "destroy"]


def test_tooltip_title_uses_markers(graph_env):
    graph, backend, _selected, _failures = graph_env
    graph.set_data(_data())
    graph.set_markers({D1: [Marker.branch("main")]})
    graph.flush()
    title = backend.handle.config.tooltip_title(D1)
    assert title == "October 18th, 2026 (2 days ago) • main"
    assert backend.handle.config.tooltip_value(0, "activity") == "No changes"
