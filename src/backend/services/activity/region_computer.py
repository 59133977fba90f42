
from __future__ import annotations
import logging
from typing import Callable, Generic, Optional, Tuple, TypeVar

from backend.models.activity import ActivityInputs, ActivityMarkers, Marker, Region, SearchResults

logger = logging.getLogger(__name__)

T = TypeVar("T")

HEAD_CLASS = "marker-head"
RESULT_CLASS = "marker-result"


class _Cached(Generic[T]):
    """Either holds a valid value or nothing; never a partially built one."""

    __slots__ = ("_value", "_valid")

    def __init__(self) -> None:
        self._value: Optional[T] = None
        self._valid = False

    @property
    def valid(self) -> bool:
        return self._valid

    def get(self, build: Callable[[], T]) -> T:
        if not self._valid:
            self._value = build()
            self._valid = True
        return self._value  # type: ignore[return-value]

    def clear(self) -> None:
        self._value = None
        self._valid = False


def marker_class(marker: Marker) -> str:
    if marker.current:
        return HEAD_CLASS
    return f"marker-{marker.type.value}"


def build_marker_regions(markers: Optional[ActivityMarkers]) -> Tuple[Region, ...]:
    if not markers:
        return ()
    return tuple(
        Region(axis="x", start=day, end=day, style_class=marker_class(marker))
        for day, day_markers in markers.items()
        for marker in day_markers
    )


def build_search_result_regions(search_results: Optional[SearchResults]) -> Tuple[Region, ...]:
    if not search_results:
        return ()
    return tuple(Region(axis="x", start=day, end=day, style_class=RESULT_CLASS) for day in search_results)


class RegionComputer:
    """Derives overlay regions from markers and search results.

    Two memoized layers: marker regions, rebuilt only after
    :meth:`invalidate_markers`, and all regions (marker regions plus search
    hits), rebuilt after either invalidation. Regions on the same day are
    kept side by side; the backend layers them.
    """

    def __init__(self, inputs: ActivityInputs) -> None:
        self._inputs = inputs
        self._marker_regions: _Cached[Tuple[Region, ...]] = _Cached()
        self._all_regions: _Cached[Tuple[Region, ...]] = _Cached()

    def marker_regions(self) -> Tuple[Region, ...]:
        return self._marker_regions.get(lambda: build_marker_regions(self._inputs.markers))

    def all_regions(self) -> Tuple[Region, ...]:
        return self._all_regions.get(self._build_all_regions)

    def _build_all_regions(self) -> Tuple[Region, ...]:
        regions = self.marker_regions() + build_search_result_regions(self._inputs.search_results)
        logger.debug("Computed %d overlay regions", len(regions))
        return regions

    def invalidate_markers(self) -> None:
        self._marker_regions.clear()
        self._all_regions.clear()

    def invalidate_search_results(self) -> None:
        self._all_regions.clear()

    @property
    def has_marker_regions(self) -> bool:
        return self._marker_regions.valid

    @property
    def has_all_regions(self) -> bool:
        return self._all_regions.valid


__all__ = [
    "HEAD_CLASS",
    "RESULT_CLASS",
    "RegionComputer",
    "build_marker_regions",
    "build_search_result_regions",
    "marker_class",
]
