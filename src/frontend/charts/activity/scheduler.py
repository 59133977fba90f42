from __future__ import annotations
import logging
from enum import Enum
from typing import Optional

from PySide6.QtCore import QObject, QTimer, Signal

from backend.services.activity.region_computer import RegionComputer

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_MS = 150


class ChangeKind(Enum):
    DATA = "data"
    MARKERS = "markers"
    SEARCH_RESULTS = "search_results"

    @property
    def reloads_series(self) -> bool:
        return self in (ChangeKind.DATA, ChangeKind.MARKERS)


class ChangeScheduler(QObject):
    """Debounces input changes into at most one recompute per burst.

    Data and marker changes share one timer (``load_requested``); search
    result changes have their own (``search_requested``). A data or marker
    change also cancels a pending search refresh, since the reload pushes
    every region anyway. Receivers must read the inputs when the signal
    fires, not when the change was scheduled.
    """

    load_requested = Signal()
    search_requested = Signal()

    def __init__(
        self,
        regions: RegionComputer,
        *,
        interval_ms: int = DEFAULT_DEBOUNCE_MS,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self._regions = regions

        self._load_timer = QTimer(self)
        self._load_timer.setSingleShot(True)
        self._load_timer.setInterval(int(interval_ms))
        self._load_timer.timeout.connect(self.load_requested.emit)

        self._search_timer = QTimer(self)
        self._search_timer.setSingleShot(True)
        self._search_timer.setInterval(int(interval_ms))
        self._search_timer.timeout.connect(self.search_requested.emit)

    # ------------------------------------------------------------------
    @property
    def interval_ms(self) -> int:
        return self._load_timer.interval()

    def set_interval(self, interval_ms: int) -> None:
        self._load_timer.setInterval(int(interval_ms))
        self._search_timer.setInterval(int(interval_ms))

    @property
    def load_pending(self) -> bool:
        return self._load_timer.isActive()

    @property
    def search_pending(self) -> bool:
        return self._search_timer.isActive()

    # ------------------------------------------------------------------
    def notify(self, kind: ChangeKind) -> None:
        if kind.reloads_series:
            self._load_timer.stop()
            self._search_timer.stop()
            if kind is ChangeKind.MARKERS:
                self._regions.invalidate_markers()
            self._load_timer.start()
        else:
            self._regions.invalidate_search_results()
            self._search_timer.start()

    def flush(self) -> None:
        """Run pending work now instead of waiting for the timers."""
        if self._load_timer.isActive():
            self._load_timer.stop()
            self.load_requested.emit()
        if self._search_timer.isActive():
            self._search_timer.stop()
            self.search_requested.emit()

    def cancel(self) -> None:
        self._load_timer.stop()
        self._search_timer.stop()


__all__ = ["ChangeKind", "ChangeScheduler", "DEFAULT_DEBOUNCE_MS"]
