"""Shared chart widgets that can be reused across windows."""

from .activity import ActivityGraph, QtChartsBackend

__all__ = [
    "ActivityGraph",
    "QtChartsBackend",
]
