from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path

from PySide6.QtCore import QSettings


@dataclass(frozen=True)
class GraphSettings:
    """Tunables of the activity graph."""

    debounce_ms: int = 150
    chart_height: int = 44
    y_padding: float = 100.0
    percentile: float = 0.99
    headroom_ratio: float = 0.01
    history_days: int = 365


class SettingsManager:
    def __init__(self, organization="ActivityGraph", application="ActivityGraph", *, settings: QSettings | None = None):
        self.settings = settings if settings is not None else QSettings(organization, application)

    # --- Graph ---------------------------------------------------------------
    def graph_settings(self) -> GraphSettings:
        defaults = GraphSettings()
        return GraphSettings(
            debounce_ms=self._int("graph/debounce_ms", defaults.debounce_ms, minimum=0),
            chart_height=self._int("graph/chart_height", defaults.chart_height, minimum=16),
            y_padding=self._float("graph/y_padding", defaults.y_padding),
            percentile=min(1.0, max(0.0, self._float("graph/percentile", defaults.percentile))),
            headroom_ratio=max(0.0, self._float("graph/headroom_ratio", defaults.headroom_ratio)),
            history_days=self._int("graph/history_days", defaults.history_days, minimum=1),
        )

    def set_graph_settings(self, value: GraphSettings) -> None:
        self.settings.setValue("graph/debounce_ms", int(value.debounce_ms))
        self.settings.setValue("graph/chart_height", int(value.chart_height))
        self.settings.setValue("graph/y_padding", float(value.y_padding))
        self.settings.setValue("graph/percentile", float(value.percentile))
        self.settings.setValue("graph/headroom_ratio", float(value.headroom_ratio))
        self.settings.setValue("graph/history_days", int(value.history_days))

    # --- Repository ------------------------------------------------------------
    def get_last_repository(self) -> Path | None:
        path_str = self.settings.value("last_repository", "")
        return Path(str(path_str)) if path_str else None

    def set_last_repository(self, path: Path | str) -> None:
        self.settings.setValue("last_repository", str(path))

    # --- Logging ---------------------------------------------------------------
    def get_log_level(self) -> str:
        value = str(self.settings.value("log_level", "INFO") or "INFO").upper()
        return value if value in {"DEBUG", "INFO", "WARNING", "ERROR"} else "INFO"

    def set_log_level(self, level: str) -> None:
        self.settings.setValue("log_level", str(level or "INFO").upper())

    # ------------------------------------------------------------------
    def _int(self, key: str, default: int, *, minimum: int | None = None) -> int:
        try:
            value = int(self.settings.value(key, default))
        except (TypeError, ValueError):
            value = default
        if minimum is not None and value < minimum:
            return default
        return value

    def _float(self, key: str, default: float) -> float:
        try:
            return float(self.settings.value(key, default))
        except (TypeError, ValueError):
            return default
