from __future__ import annotations
import logging
from typing import Optional

from backend.models.activity import PRIMARY_SERIES
from core.datetime_utils import get_day
from .lifecycle import ChartLifecycleManager

logger = logging.getLogger(__name__)


class SelectionResolver:
    """Maps days to point indices of the loaded primary series."""

    def __init__(self, lifecycle: ChartLifecycleManager, series_id: str = PRIMARY_SERIES) -> None:
        self._lifecycle = lifecycle
        self._series_id = series_id

    def index_for(self, day) -> Optional[int]:
        handle = self._lifecycle.handle
        if handle is None:
            return None
        loaded = handle.data()
        if not loaded:
            return None
        return loaded[0].index_of(get_day(day))

    def select(self, day) -> None:
        handle = self._lifecycle.handle
        if handle is None:
            return
        index = self.index_for(day)
        if index is None:
            logger.debug("Cannot select %s: day is not in the loaded series", day)
            return
        if index in handle.selected(self._series_id):
            return
        handle.select(self._series_id, [index])

    def unselect(self, day=None) -> None:
        handle = self._lifecycle.handle
        if handle is None:
            return
        if day is None:
            handle.unselect()
            return
        index = self.index_for(day)
        if index is None:
            logger.debug("Cannot unselect %s: day is not in the loaded series", day)
            return
        handle.unselect(None, [index])


__all__ = ["SelectionResolver"]
