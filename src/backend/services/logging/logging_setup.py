import logging
import sys
import threading
import traceback

from .log_service import get_log_service
from .storage import append_text_log, crash_log_path

APP_LOGGER_NAME = "activity_graph"


def configure_logging(level: int | str = logging.INFO, *, name: str = APP_LOGGER_NAME) -> logging.Logger:
    """Create or fetch the application logger and route it through the LogService.

    The LogService does the formatting and persisting, so no separate
    StreamHandler is added. ``level`` also applies to the root logger, which
    the module loggers (``logging.getLogger(__name__)``) propagate to.
    """

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    app_logger = logging.getLogger(name)
    app_logger.setLevel(level)
    logging.getLogger().setLevel(level)

    service = get_log_service()
    service.install_on_logger(app_logger)
    return app_logger


def install_global_exception_hooks() -> None:
    """Install process-wide hooks so uncaught exceptions always reach crash.log."""

    def _handle_exception(exc_type, exc_value, exc_tb) -> None:
        if issubclass(exc_type, KeyboardInterrupt):
            sys.__excepthook__(exc_type, exc_value, exc_tb)
            return
        logging.getLogger(f"{APP_LOGGER_NAME}.unhandled").critical(
            "Unhandled exception",
            exc_info=(exc_type, exc_value, exc_tb),
        )
        text = "".join(traceback.format_exception(exc_type, exc_value, exc_tb)).rstrip("\n")
        try:
            append_text_log(crash_log_path(), text)
        except OSError:
            traceback.print_exception(exc_type, exc_value, exc_tb, file=sys.__stderr__)

    def _handle_thread_exception(args: threading.ExceptHookArgs) -> None:
        _handle_exception(args.exc_type, args.exc_value, args.exc_traceback)

    sys.excepthook = _handle_exception
    threading.excepthook = _handle_thread_exception


__all__ = ["APP_LOGGER_NAME", "configure_logging", "install_global_exception_hooks"]
