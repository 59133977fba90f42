"""Top-level windows for the frontend application."""

from .main_window import MainWindow

__all__ = ["MainWindow"]
