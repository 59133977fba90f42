import logging
from pathlib import Path

from PySide6.QtCore import Signal
from PySide6.QtWidgets import (
    QFileDialog,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QMainWindow,
    QProgressBar,
    QPushButton,
    QStatusBar,
    QVBoxLayout,
    QWidget,
)

from backend.models.activity import ActivityStatsSelected
from backend.services.activity.git_source import GitActivity
from backend.services.logging import LogEvent, get_log_service
from core.clock import Clock
from core.datetime_utils import format_date
from core.settings_manager import SettingsManager
from ..charts.activity import ActivityGraph, ChartBackend
from ..threading import stop_all_worker_threads
from ..viewmodels.activity_viewmodel import ActivityViewModel

logger = logging.getLogger(__name__)


class MainWindow(QMainWindow):
    """Demo host: repository picker, commit search and the activity strip."""

    _log_event_received = Signal(object)

    def __init__(
        self,
        settings_manager: SettingsManager | None = None,
        *,
        backend: ChartBackend | None = None,
        clock: Clock | None = None,
        parent: QWidget | None = None,
    ):
        super().__init__(parent)
        self.setWindowTitle(self.tr("Activity Graph"))
        self.settings_manager = settings_manager or SettingsManager()
        graph_settings = self.settings_manager.graph_settings()

        self.view_model = ActivityViewModel(since_days=graph_settings.history_days, clock=clock, parent=self)
        self.view_model.activity_loaded.connect(self._on_activity_loaded)
        self.view_model.search_finished.connect(self._on_search_finished)
        self.view_model.busy_changed.connect(self._on_busy_changed)
        self.view_model.failed.connect(self._on_failed)

        central = QWidget(self)
        layout = QVBoxLayout(central)
        layout.setContentsMargins(8, 8, 8, 8)
        layout.setSpacing(6)

        toolbar = QHBoxLayout()
        self.open_button = QPushButton(self.tr("Open repository…"), central)
        self.open_button.clicked.connect(self.choose_repository)
        self.repository_label = QLabel(self.tr("No repository"), central)
        self.search_edit = QLineEdit(central)
        self.search_edit.setPlaceholderText(self.tr("Search commit messages"))
        self.search_edit.setClearButtonEnabled(True)
        self.search_edit.returnPressed.connect(self._run_search)
        self.search_edit.textChanged.connect(self._on_search_text_changed)
        toolbar.addWidget(self.open_button)
        toolbar.addWidget(self.repository_label, 1)
        toolbar.addWidget(self.search_edit, 1)
        layout.addLayout(toolbar)

        self.graph = ActivityGraph(central, backend=backend, clock=clock, settings=graph_settings)
        self.graph.selected.connect(self._on_day_selected)
        self.graph.render_failed.connect(self._on_failed)
        layout.addWidget(self.graph)

        self.selection_label = QLabel(self.tr("Click a day to select it"), central)
        layout.addWidget(self.selection_label)
        layout.addStretch(1)
        self.setCentralWidget(central)

        status = QStatusBar(self)
        self._status_label = QLabel("", status)
        self._progress = QProgressBar(status)
        self._progress.setRange(0, 0)
        self._progress.setMaximumWidth(120)
        self._progress.setVisible(False)
        status.addWidget(self._status_label, 1)
        status.addPermanentWidget(self._progress)
        self.setStatusBar(status)

        # Log records arrive from any thread; relay them through a queued signal.
        self._log_event_received.connect(self._show_log_event)
        self._log_listener = self._log_event_received.emit
        get_log_service().add_listener(self._log_listener)

        self.resize(960, 220)

    # ------------------------------------------------------------------
    def choose_repository(self) -> None:
        start = self.settings_manager.get_last_repository()
        folder = QFileDialog.getExistingDirectory(
            self,
            self.tr("Select git repository"),
            str(start) if start else "",
        )
        if folder:
            self.open_repository(folder)

    def open_repository(self, path: str | Path) -> None:
        path = Path(path)
        self.settings_manager.set_last_repository(path)
        self.repository_label.setText(str(path))
        self.graph.set_search_results(None)
        self.view_model.load_repository(path)

    def set_status_text(self, text: str) -> None:
        self._status_label.setText(str(text or ""))

    # ------------------------------------------------------------------
    def _run_search(self) -> None:
        self.view_model.search(self.search_edit.text())

    def _on_search_text_changed(self, text: str) -> None:
        if not text.strip():
            self.view_model.search("")

    def _on_activity_loaded(self, activity: GitActivity) -> None:
        self.graph.set_data(activity.data)
        self.graph.set_markers(activity.markers)
        if self.search_edit.text().strip():
            self._run_search()

    def _on_search_finished(self, results) -> None:
        self.graph.set_search_results(results)
        if results is not None:
            self.set_status_text(self.tr("{count} matching days").format(count=len(results)))

    def _on_busy_changed(self, busy: bool) -> None:
        self._progress.setVisible(busy)
        self.open_button.setEnabled(not busy)
        if busy:
            self.set_status_text(self.tr("Reading history…"))
        else:
            self.set_status_text("")

    def _on_failed(self, message: str) -> None:
        logger.warning("Activity graph: %s", message)

    def _on_day_selected(self, payload: ActivityStatsSelected) -> None:
        text = format_date(payload.day)
        if payload.sha:
            text = f"{text} • {payload.sha[:10]}"
        self.selection_label.setText(text)
        self.graph.select(payload.day)

    def _show_log_event(self, event: LogEvent) -> None:
        if event.level >= logging.WARNING:
            self.set_status_text(event.message)

    # ------------------------------------------------------------------
    def closeEvent(self, event):
        get_log_service().remove_listener(self._log_listener)
        self.graph.detach()
        # Stop any running worker threads so the application can exit cleanly
        stop_all_worker_threads()
        super().closeEvent(event)
