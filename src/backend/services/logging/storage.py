from __future__ import annotations
import threading
from pathlib import Path

from core.paths import get_log_directory

_text_log_lock = threading.RLock()


def warning_log_path() -> Path:
    return get_log_directory() / "warnings.log"


def error_log_path() -> Path:
    return get_log_directory() / "errors.log"


def crash_log_path() -> Path:
    return get_log_directory() / "crash.log"


def append_text_log(path: Path, line: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with _text_log_lock:
        with path.open("a", encoding="utf-8") as handle:
            handle.write(line.rstrip("\n") + "\n")


def read_text_log(path: Path, *, limit: int | None = None) -> list[str]:
    """Return the lines of a text log, newest last; missing files read as empty."""
    if not path.exists():
        return []
    with _text_log_lock:
        lines = path.read_text(encoding="utf-8").splitlines()
    if limit is not None:
        lines = lines[-limit:] if limit > 0 else []
    return lines


__all__ = [
    "append_text_log",
    "crash_log_path",
    "error_log_path",
    "read_text_log",
    "warning_log_path",
]
