"""Tests for overlay region derivation and its two cache layers."""
from datetime import timedelta
from unittest.mock import patch

from conftest import TODAY, day
from backend.models.activity import ActivityInputs, Marker, MarkerType, Region, SearchResultMarker
from backend.services.activity import region_computer as rc
from backend.services.activity.region_computer import RegionComputer, marker_class

D0 = day(TODAY)
D1 = day(TODAY - timedelta(days=1))


def test_marker_classes():
    assert marker_class(Marker.branch("main")) == "marker-branch"
    assert marker_class(Marker.remote("origin/main")) == "marker-remote"
    assert marker_class(Marker.tag("v1.0")) == "marker-tag"


def test_current_marker_is_head_regardless_of_type():
    assert marker_class(Marker.branch("main", current=True)) == "marker-head"
    assert marker_class(Marker.remote("origin/main", current=True)) == "marker-head"
    assert marker_class(Marker(MarkerType.TAG, "v1", True)) == "marker-head"


def test_no_inputs_give_no_regions():
    computer = RegionComputer(ActivityInputs())
    assert computer.marker_regions() == ()
    assert computer.all_regions() == ()


def test_same_day_markers_are_not_merged():
    inputs = ActivityInputs(markers={D0: [Marker.branch("feature"), Marker.tag("v2")]})
    regions = RegionComputer(inputs).all_regions()
    assert regions == (
        Region("x", D0, D0, "marker-branch"),
        Region("x", D0, D0, "marker-tag"),
    )


def test_search_results_follow_marker_regions():
    inputs = ActivityInputs(
        markers={D1: [Marker.branch("main", current=True)]},
        search_results={D0: SearchResultMarker("aaa"), D1: SearchResultMarker("bbb")},
    )
    regions = RegionComputer(inputs).all_regions()
    assert regions == (
        Region("x", D1, D1, "marker-head"),
        Region("x", D0, D0, "marker-result"),
        Region("x", D1, D1, "marker-result"),
    )


def test_marker_regions_are_reused_across_search_changes():
    inputs = ActivityInputs(markers={D0: [Marker.branch("main")]})
    computer = RegionComputer(inputs)

    with patch.object(rc, "build_marker_regions", wraps=rc.build_marker_regions) as markers_spy, \
            patch.object(rc, "build_search_result_regions", wraps=rc.build_search_result_regions) as search_spy:
        computer.all_regions()
        for n in range(4):
            inputs.search_results = {D0: SearchResultMarker(f"sha{n}")}
            computer.invalidate_search_results()
            assert computer.has_marker_regions
            assert not computer.has_all_regions
            assert computer.all_regions()[-1] == Region("x", D0, D0, "marker-result")

    assert markers_spy.call_count == 1
    assert search_spy.call_count == 5


def test_marker_invalidation_clears_both_layers():
    inputs = ActivityInputs(markers={D0: [Marker.branch("main")]})
    computer = RegionComputer(inputs)
    computer.all_regions()
    assert computer.has_marker_regions and computer.has_all_regions

    inputs.markers = {D1: [Marker.tag("v3")]}
    computer.invalidate_markers()
    assert not computer.has_marker_regions
    assert not computer.has_all_regions
    assert computer.all_regions() == (Region("x", D1, D1, "marker-tag"),)


def test_cached_value_is_returned_until_invalidated():
    inputs = ActivityInputs(markers={D0: [Marker.branch("main")]})
    computer = RegionComputer(inputs)
    first = computer.all_regions()

    inputs.markers = {}
    assert computer.all_regions() is first
