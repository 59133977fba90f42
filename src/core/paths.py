"""
Path resolution for the activity graph application.

User data (logs) lives in the per-user application data folder. Set
``ACTIVITY_GRAPH_HOME`` to relocate it, e.g. for tests.
"""

import os
import sys
from pathlib import Path

APP_DIR_NAME = "ActivityGraph"
HOME_ENV_VAR = "ACTIVITY_GRAPH_HOME"


def _get_user_data_path() -> Path:
    """
    Get the user data directory.

    On Windows: %LOCALAPPDATA%/ActivityGraph
    On macOS: ~/Library/Application Support/ActivityGraph
    On Linux: ~/.local/share/ActivityGraph
    """
    override = os.getenv(HOME_ENV_VAR)
    if override:
        return Path(override)
    if os.name == "nt":  # Windows
        base = Path(os.getenv("LOCALAPPDATA", Path.home()))
    elif sys.platform == "darwin":  # macOS
        base = Path.home() / "Library" / "Application Support"
    else:  # Linux and others
        base = Path.home() / ".local" / "share"

    return base / APP_DIR_NAME


def get_user_data_directory() -> Path:
    """Return the user data directory, creating it if needed."""
    directory = _get_user_data_path()
    directory.mkdir(parents=True, exist_ok=True)
    return directory


def get_log_directory() -> Path:
    """Return the folder holding the text logs, creating it if needed."""
    folder = _get_user_data_path() / "logs"
    folder.mkdir(parents=True, exist_ok=True)
    return folder
