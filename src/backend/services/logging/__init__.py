"""Logging utilities available to both backend and frontend."""

from .log_service import LogEvent, LogService, get_log_service
from .logging_setup import APP_LOGGER_NAME, configure_logging, install_global_exception_hooks
from .storage import append_text_log, crash_log_path, error_log_path, read_text_log, warning_log_path

__all__ = [
    "APP_LOGGER_NAME",
    "LogEvent",
    "LogService",
    "append_text_log",
    "configure_logging",
    "crash_log_path",
    "error_log_path",
    "get_log_service",
    "install_global_exception_hooks",
    "read_text_log",
    "warning_log_path",
]
