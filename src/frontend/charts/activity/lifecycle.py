from __future__ import annotations
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Sequence

from PySide6.QtWidgets import QWidget

from backend.models.activity import PRIMARY_SERIES, ActivitySeries, Region
from .backend import ChartBackend, ChartConfig, ChartHandle, DataPoint

logger = logging.getLogger(__name__)


class ChartState(Enum):
    UNINITIALIZED = "uninitialized"
    ACTIVE = "active"


@dataclass
class ChartOptions:
    height: int = 44
    y_min: float = 0.0
    zoom: bool = True
    selection: bool = True
    bind_to: Optional[QWidget] = None
    on_click: Optional[Callable[[DataPoint], None]] = None
    tooltip_title: Optional[Callable[[int], str]] = None
    tooltip_value: Optional[Callable[[float, str], str]] = None


class ChartLifecycleManager:
    """Owns the backend handle and decides between build, update and teardown.

    Only crossing between "has data" and "has no data" rebuilds the chart;
    every other render updates the existing handle in place. Backend errors
    propagate to the caller.
    """

    def __init__(self, backend: ChartBackend, options: Optional[ChartOptions] = None) -> None:
        self._backend = backend
        self._options = options or ChartOptions()
        self._handle: Optional[ChartHandle] = None

    @property
    def state(self) -> ChartState:
        return ChartState.ACTIVE if self._handle is not None else ChartState.UNINITIALIZED

    @property
    def is_active(self) -> bool:
        return self._handle is not None

    @property
    def handle(self) -> Optional[ChartHandle]:
        return self._handle

    def render(self, series: ActivitySeries, y_max: Optional[float], regions: Sequence[Region]) -> None:
        if series.is_empty or y_max is None:
            self._destroy()
            return

        columns = series.columns()
        if self._handle is None:
            opts = self._options
            config = ChartConfig(
                columns=columns,
                y_max=y_max,
                y_min=opts.y_min,
                regions=list(regions),
                height=opts.height,
                primary=PRIMARY_SERIES,
                selection=opts.selection,
                zoom=opts.zoom,
                bind_to=opts.bind_to,
                on_click=opts.on_click,
                tooltip_title=opts.tooltip_title,
                tooltip_value=opts.tooltip_value,
            )
            self._handle = self._backend.generate(config)
            logger.debug("Activity chart created (%d days, y max %.1f)", len(series), y_max)
            return

        self._handle.load(columns)
        self._handle.axis.max(y=y_max)
        self._handle.regions(list(regions))

    def update_regions(self, regions: Sequence[Region]) -> None:
        if self._handle is None:
            return
        self._handle.regions(list(regions))

    def detach(self) -> None:
        self._destroy()

    def _destroy(self) -> None:
        handle, self._handle = self._handle, None
        if handle is None:
            return
        logger.debug("Destroying activity chart")
        handle.destroy()


__all__ = ["ChartLifecycleManager", "ChartOptions", "ChartState"]
