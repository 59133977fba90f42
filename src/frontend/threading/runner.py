import atexit
import threading
import weakref

from PySide6.QtCore import QCoreApplication, QThread, Signal
import logging

logger = logging.getLogger(__name__)

_active_threads: "set[WorkerThread]" = set()
_keyed_threads: "dict[tuple[int, object], WorkerThread]" = {}
_cleanup_hook_registered = False


def _register_app_cleanup_hook() -> None:
    """Stop worker threads when the Qt application quits."""

    global _cleanup_hook_registered
    if _cleanup_hook_registered:
        return

    app = QCoreApplication.instance()
    if app is None:
        return

    app.aboutToQuit.connect(lambda: stop_all_worker_threads(wait=False))
    _cleanup_hook_registered = True


class WorkerThread(QThread):
    """Runs one blocking call (a git invocation, a parse) off the GUI thread.

    A ``stop_event`` keyword is passed to the target when it accepts one.
    Results of a stopped worker are discarded.
    """

    finished_with = Signal(object)
    error = Signal(str)

    def __init__(self, target, *args, **kwargs):
        super().__init__()
        self.target = target
        self.args = args
        self.kwargs = kwargs
        self.stop_event = threading.Event()
        _active_threads.add(self)
        _register_app_cleanup_hook()

    @property
    def stopped(self) -> bool:
        return self.stop_event.is_set()

    def run(self):
        try:
            code = getattr(self.target, "__code__", None)
            if code is not None and "stop_event" in code.co_varnames:
                self.kwargs["stop_event"] = self.stop_event
            result = self.target(*self.args, **self.kwargs)
            if not self.stopped:
                self.finished_with.emit(result)
        except Exception as e:
            logger.exception("Worker thread target failed")
            if not self.stopped:
                self.error.emit(str(e))

    def stop(self, wait=False):
        self.stop_event.set()
        if wait:
            self.wait()


def run_in_thread(
    func,
    on_result=None,
    on_error=None,
    *args,
    owner: object | None = None,
    key: object | None = None,
    cancel_previous: bool = False,
    **kwargs,
) -> WorkerThread:
    """Start ``func(*args, **kwargs)`` on a worker thread.

    ``on_result``/``on_error`` are delivered on the GUI thread. With
    ``cancel_previous`` the last worker started for the same ``owner`` and
    ``key`` is stopped first, so only the newest result is delivered.
    Callbacks are skipped once ``owner`` has been garbage collected.
    """
    slot = (id(owner), key) if owner is not None else None
    if cancel_previous and slot is not None:
        previous = _keyed_threads.pop(slot, None)
        if previous is not None:
            previous.stop(wait=False)

    thread = WorkerThread(func, *args, **kwargs)
    owner_ref = weakref.ref(owner) if owner is not None else None

    def _guard(callback):
        if owner_ref is None:
            return callback

        def _wrapped(*cb_args):
            if owner_ref() is None or thread.stopped:
                return
            callback(*cb_args)
        return _wrapped

    if on_result is not None:
        thread.finished_with.connect(_guard(on_result))
    if on_error is not None:
        thread.error.connect(_guard(on_error))

    if slot is not None:
        _keyed_threads[slot] = thread

    def _untrack():
        _active_threads.discard(thread)
        if slot is not None and _keyed_threads.get(slot) is thread:
            _keyed_threads.pop(slot, None)
        thread.deleteLater()

    # QThread.finished fires once run() has returned.
    thread.finished.connect(_untrack)
    thread.start()
    return thread


def stop_all_worker_threads(wait: bool = True, timeout: float | None = 2.0) -> None:
    """Signal every active worker to stop, optionally waiting for each."""

    for thread in list(_active_threads):
        thread.stop(wait=False)
        if not wait:
            continue
        wait_ms = int(timeout * 1000) if timeout is not None else -1
        if not thread.wait(wait_ms):
            logger.warning("Worker thread did not stop within %.1fs", timeout or 0.0)


# Worker threads must not keep the interpreter alive on abrupt exits
atexit.register(lambda: stop_all_worker_threads(wait=False))
