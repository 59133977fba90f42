"""Backend service helpers with lazy imports to avoid circular dependencies."""

from importlib import import_module
from typing import Any, Dict

__all__ = [
    "GitActivity",
    "GitActivityError",
    "RegionComputer",
    "build_series",
    "compute_y_max",
    "format_title",
    "format_value",
    "load_activity",
    "search_commits",
]

_MODULE_MAP: Dict[str, str] = {
    "GitActivity": ".activity.git_source",
    "GitActivityError": ".activity.git_source",
    "RegionComputer": ".activity.region_computer",
    "build_series": ".activity.series_builder",
    "compute_y_max": ".activity.axis_scaler",
    "format_title": ".activity.formatter",
    "format_value": ".activity.formatter",
    "load_activity": ".activity.git_source",
    "search_commits": ".activity.git_source",
}


def __getattr__(name: str) -> Any:
    module_name = _MODULE_MAP.get(name)
    if module_name is None:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    module = import_module(f"{__name__}{module_name}")
    value = getattr(module, name)
    globals()[name] = value
    return value


def __dir__() -> list[str]:
    return sorted(set(__all__ + list(globals().keys())))
