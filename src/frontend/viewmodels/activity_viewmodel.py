from __future__ import annotations
import logging
from pathlib import Path
from typing import Optional

from PySide6.QtCore import QObject, Signal

from backend.services.activity.git_source import GitActivity, load_activity, search_commits
from core.clock import Clock
from ..threading.runner import run_in_thread

logger = logging.getLogger(__name__)


class ActivityViewModel(QObject):
    """Loads repository activity and search hits off the GUI thread.

    Only the most recent load and the most recent search are delivered;
    a newer request silently supersedes an older one still running.
    """

    activity_loaded = Signal(object)    # GitActivity
    search_finished = Signal(object)    # dict[int, SearchResultMarker] | None
    busy_changed = Signal(bool)
    failed = Signal(str)

    def __init__(
        self,
        *,
        since_days: int = 365,
        clock: Optional[Clock] = None,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self._since_days = since_days
        self._clock = clock
        self._repo_path: Optional[Path] = None
        self._loading = False

    @property
    def repository(self) -> Optional[Path]:
        return self._repo_path

    @property
    def is_loading(self) -> bool:
        return self._loading

    # ------------------------------------------------------------------
    def load_repository(self, path: str | Path) -> None:
        self._repo_path = Path(path)
        self._set_loading(True)
        logger.info("Loading activity of %s", self._repo_path)
        run_in_thread(
            load_activity,
            self._on_loaded,
            self._on_load_failed,
            self._repo_path,
            since_days=self._since_days,
            clock=self._clock,
            owner=self,
            key="load",
            cancel_previous=True,
        )

    def search(self, query: str) -> None:
        """Search commit messages; an empty query clears the results."""
        query = (query or "").strip()
        if not query or self._repo_path is None:
            self.search_finished.emit(None)
            return
        run_in_thread(
            search_commits,
            self.search_finished.emit,
            self._on_search_failed,
            self._repo_path,
            query,
            owner=self,
            key="search",
            cancel_previous=True,
        )

    # ------------------------------------------------------------------
    def _set_loading(self, value: bool) -> None:
        if value != self._loading:
            self._loading = value
            self.busy_changed.emit(value)

    def _on_loaded(self, activity: GitActivity) -> None:
        self._set_loading(False)
        logger.info("Loaded %d active days", sum(1 for stat in activity.data.values() if stat is not None))
        self.activity_loaded.emit(activity)

    def _on_load_failed(self, message: str) -> None:
        self._set_loading(False)
        self.failed.emit(message)

    def _on_search_failed(self, message: str) -> None:
        self.failed.emit(message)
        self.search_finished.emit(None)


__all__ = ["ActivityViewModel"]
