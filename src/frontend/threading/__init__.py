"""Threading helpers used by the frontend."""

from .runner import WorkerThread, run_in_thread, stop_all_worker_threads
from .utils import call_soon

__all__ = [
    "WorkerThread",
    "call_soon",
    "run_in_thread",
    "stop_all_worker_threads",
]
