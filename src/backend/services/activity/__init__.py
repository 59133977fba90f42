"""Activity graph data engine: series, axis scale, overlay regions and text."""
from .axis_scaler import compute_y_max
from .formatter import format_numeric, format_title, format_value, pluralize
from .region_computer import RegionComputer
from .series_builder import build_series, earliest_day

__all__ = [
    "RegionComputer",
    "build_series",
    "compute_y_max",
    "earliest_day",
    "format_numeric",
    "format_title",
    "format_value",
    "pluralize",
]
