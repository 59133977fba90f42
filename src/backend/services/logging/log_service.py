from __future__ import annotations
import logging
import sys
import threading
import traceback
from collections import deque
from dataclasses import dataclass
from typing import Callable, Deque, List, Optional

from .storage import append_text_log, error_log_path, warning_log_path

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_SIZE = 1000


@dataclass(frozen=True)
class LogEvent:
    """Container describing a single log entry destined for the UI."""

    message: str
    level: int
    logger_name: str
    created: float
    formatted: str


Listener = Callable[[LogEvent], None]


class LogService(logging.Handler):
    """Central logging handler.

    Relays records to registered listeners (the status bar of the demo
    window), keeps a bounded in-memory history and appends warnings and
    errors to the text logs in the user data folder.
    """

    def __init__(self, *, history_size: int = DEFAULT_HISTORY_SIZE, persist: bool = True) -> None:
        super().__init__(level=logging.NOTSET)
        self._listeners: List[Listener] = []
        self._lock = threading.RLock()
        self._formatter = logging.Formatter(
            "%(asctime)s %(levelname)s [%(name)s] %(message)s", "%Y-%m-%d %H:%M:%S"
        )
        self._history: Deque[LogEvent] = deque(maxlen=max(1, int(history_size)))
        self._persist = persist
        self._installed = False
        self._shutdown = False

    # ------------------------------------------------------------------
    def emit(self, record: logging.LogRecord) -> None:
        try:
            formatted = self._formatter.format(record)
        except Exception:
            self.handleError(record)
            return
        event = LogEvent(
            message=record.getMessage(),
            level=record.levelno,
            logger_name=record.name,
            created=record.created,
            formatted=formatted,
        )
        with self._lock:
            self._history.append(event)
        self._persist_event(event)
        self._notify(event)

    # ------------------------------------------------------------------
    def add_listener(self, listener: Listener) -> None:
        with self._lock:
            if listener not in self._listeners:
                self._listeners.append(listener)

    def remove_listener(self, listener: Listener) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def recent_events(self, *, min_level: int = logging.NOTSET, keyword: Optional[str] = None) -> List[LogEvent]:
        """Return buffered events, oldest first, filtered by level and keyword."""
        with self._lock:
            events = list(self._history)
        needle = keyword.lower() if keyword else None
        return [
            event
            for event in events
            if event.level >= min_level and (needle is None or needle in event.formatted.lower())
        ]

    # ------------------------------------------------------------------
    def ensure_installed(self) -> None:
        """Attach the handler to the root logger once."""

        with self._lock:
            if self._installed:
                return
            root = logging.getLogger()
            if self not in root.handlers:
                root.addHandler(self)
            self._installed = True

    def install_on_logger(self, target: logging.Logger) -> None:
        """Attach the handler to ``target`` and stop propagation to the root."""

        with self._lock:
            if self not in target.handlers:
                target.addHandler(self)
            target.propagate = False
        self.ensure_installed()

    def shutdown(self) -> None:
        """Stop notifying listeners; the UI objects behind them may be gone."""
        with self._lock:
            self._shutdown = True
            self._listeners.clear()

    # ------------------------------------------------------------------
    def _notify(self, event: LogEvent) -> None:
        if self._shutdown:
            return
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(event)
            except Exception:
                _print_exception()

    def _persist_event(self, event: LogEvent) -> None:
        if not self._persist:
            return
        try:
            if event.level >= logging.WARNING:
                append_text_log(warning_log_path(), event.formatted)
            if event.level >= logging.ERROR:
                append_text_log(error_log_path(), event.formatted)
        except OSError:
            _print_exception()


def _print_exception() -> None:
    # Logging through the service here would recurse.
    stream = getattr(sys, "__stderr__", None) or getattr(sys, "__stdout__", None)
    if stream is not None:
        traceback.print_exc(file=stream)


_service = LogService()


def get_log_service() -> LogService:
    return _service
