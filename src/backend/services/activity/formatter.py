
from __future__ import annotations
from datetime import datetime
from typing import Callable, Optional, Sequence

from backend.models.activity import Marker
from core.datetime_utils import capitalize, format_date, from_now


def format_numeric(value) -> str:
    number = float(value)
    if number.is_integer():
        return f"{int(number):,}"
    return f"{number:,.2f}"


def pluralize(
    noun: str,
    count,
    *,
    fmt: Optional[Callable[[object], str]] = None,
    zero: Optional[str] = None,
    plural: Optional[str] = None,
) -> str:
    """``pluralize("change", 3)`` -> ``"3 changes"``; with ``zero="No"``, 0 -> ``"No changes"``."""
    if count == 0 and zero is not None:
        amount = zero
    else:
        amount = fmt(count) if fmt is not None else str(count)
    word = noun if count == 1 else (plural or f"{noun}s")
    return f"{amount} {word}"


def format_value(value, series_id: str) -> str:
    """Tooltip text for one series value."""
    if series_id == "activity":
        return pluralize("change", value, fmt=format_numeric, zero="No")
    if series_id == "commits":
        return pluralize("commit", value, fmt=format_numeric, zero="No")
    if series_id in ("additions", "deletions"):
        return pluralize("line", value, fmt=format_numeric)
    return format_numeric(value)


def format_title(day, markers: Optional[Sequence[Marker]], now: datetime) -> str:
    """``"October 19th, 2026 (3 days ago) • main, v1.2"``."""
    title = f"{format_date(day)} ({capitalize(from_now(day, now))})"
    if markers:
        title += " • " + ", ".join(m.name for m in markers)
    return title


__all__ = ["format_numeric", "format_title", "format_value", "pluralize"]
