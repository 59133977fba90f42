import os
import sys
from datetime import date, datetime
from pathlib import Path

import pytest

# Avoid GUI crashes in headless CI (Qt/PySide/PyQt etc.)
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

# Add src directory to path
src_dir = Path(__file__).parent.parent / "src"
if str(src_dir) not in sys.path:
    sys.path.insert(0, str(src_dir))

from PySide6.QtWidgets import QApplication  # noqa: E402

from core.clock import FixedClock  # noqa: E402
from core.datetime_utils import day_from_date  # noqa: E402
from frontend.charts.activity.backend import ChartHandleDestroyed, loaded_series_from_columns  # noqa: E402


@pytest.fixture(scope="session")
def qapp():
    app = QApplication.instance() or QApplication([])
    yield app


@pytest.fixture(autouse=True)
def _isolated_user_data(tmp_path, monkeypatch):
    """Keep text logs written during tests out of the real user data folder."""
    monkeypatch.setenv("ACTIVITY_GRAPH_HOME", str(tmp_path / "user-data"))


TODAY = date(2026, 10, 19)


def day(d: date) -> int:
    return day_from_date(d)


@pytest.fixture
def clock():
    return FixedClock(datetime(2026, 10, 19, 15, 30))


class RecordingAxis:
    def __init__(self, handle: "RecordingHandle") -> None:
        self._handle = handle

    def max(self, *, y=None) -> None:
        self._handle._record("axis.max", y)
        self._handle.y_max = y


class RecordingHandle:
    """Chart handle fake that keeps the loaded columns and logs every call."""

    def __init__(self, backend: "RecordingBackend", config) -> None:
        self.backend = backend
        self.config = config
        self.columns = config.columns
        self.y_max = config.y_max
        self.current_regions = list(config.regions)
        self.selections: dict[str, list[int]] = {}
        self.destroy_count = 0
        self.axis = RecordingAxis(self)

    def _record(self, name, *args) -> None:
        if self.destroy_count:
            raise ChartHandleDestroyed("handle used after destroy")
        self.backend.calls.append((name, *args))

    def load(self, columns) -> None:
        self._record("load", columns)
        self.columns = columns

    def regions(self, regions) -> None:
        self._record("regions", list(regions))
        self.current_regions = list(regions)

    def select(self, series_id, indices) -> None:
        self._record("select", series_id, list(indices))
        self.selections = {series_id: sorted(set(indices))}

    def unselect(self, series_id=None, indices=None) -> None:
        self._record("unselect", series_id, None if indices is None else list(indices))
        targets = [series_id] if series_id is not None else list(self.selections)
        for sid in targets:
            if indices is None:
                self.selections.pop(sid, None)
            else:
                self.selections[sid] = [i for i in self.selections.get(sid, []) if i not in indices]

    def selected(self, series_id):
        return list(self.selections.get(series_id, []))

    def data(self):
        return loaded_series_from_columns(self.columns, primary=self.config.primary)

    def destroy(self) -> None:
        self.backend.calls.append(("destroy",))
        self.destroy_count += 1

    # --- test helpers ---------------------------------------------------
    def click(self, x: int) -> None:
        primary = self.data()[0]
        index = primary.index_of(x)
        assert index is not None, f"{x} is not a loaded day"
        self.config.on_click(primary.point(index))


class RecordingBackend:
    def __init__(self, *, fail_with: Exception | None = None) -> None:
        self.handles: list[RecordingHandle] = []
        self.calls: list[tuple] = []
        self.fail_with = fail_with

    def generate(self, config) -> RecordingHandle:
        self.calls.append(("generate", config))
        if self.fail_with is not None:
            raise self.fail_with
        handle = RecordingHandle(self, config)
        self.handles.append(handle)
        return handle

    @property
    def handle(self) -> RecordingHandle | None:
        return self.handles[-1] if self.handles else None

    def call_names(self) -> list[str]:
        return [call[0] for call in self.calls]


@pytest.fixture
def recording_backend():
    return RecordingBackend()
