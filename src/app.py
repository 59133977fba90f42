import sys
import logging
import faulthandler

from PySide6.QtCore import QtMsgType, qInstallMessageHandler
from PySide6.QtWidgets import QApplication, QMessageBox

from core.settings_manager import SettingsManager
from backend.services.logging import configure_logging, install_global_exception_hooks
from backend.services.logging.storage import crash_log_path

logger = logging.getLogger(__name__)
_FAULT_LOG_HANDLE = None


def _install_qt_message_bridge() -> None:
    qt_logger = logging.getLogger("qt")

    def _handler(mode, context, message):
        level = logging.DEBUG
        if mode == QtMsgType.QtInfoMsg:
            level = logging.INFO
        elif mode == QtMsgType.QtWarningMsg:
            level = logging.WARNING
        elif mode in (QtMsgType.QtCriticalMsg, QtMsgType.QtFatalMsg):
            level = logging.ERROR
        qt_logger.log(level, "Qt: %s", str(message or ""))

    qInstallMessageHandler(_handler)


def _enable_fault_log() -> None:
    global _FAULT_LOG_HANDLE
    try:
        _FAULT_LOG_HANDLE = crash_log_path().open("a", encoding="utf-8")
        _FAULT_LOG_HANDLE.write("=== faulthandler session start ===\n")
        _FAULT_LOG_HANDLE.flush()
        faulthandler.enable(file=_FAULT_LOG_HANDLE, all_threads=True)
    except OSError:
        logger.exception("Failed to enable faulthandler crash logging")


def main(argv: list[str] | None = None) -> int:
    argv = list(sys.argv if argv is None else argv)
    settings_manager = SettingsManager()
    configure_logging(settings_manager.get_log_level())
    install_global_exception_hooks()
    _enable_fault_log()
    _install_qt_message_bridge()

    app = QApplication(argv)
    app.setStyle("Fusion")

    try:
        from frontend.windows.main_window import MainWindow
        win = MainWindow(settings_manager)
    except Exception as exc:
        logger.exception("Main window failed to initialize")
        QMessageBox.critical(None, "Startup Error", f"Main window failed to initialize.\n\n{exc}")
        return 1

    win.show()

    # A repository given on the command line wins over the remembered one.
    repo = argv[1] if len(argv) > 1 else settings_manager.get_last_repository()
    if repo:
        win.open_repository(repo)

    return app.exec()


if __name__ == "__main__":
    try:
        sys.exit(main())
    except Exception:
        logger.exception("Fatal uncaught exception in app entrypoint")
        raise
