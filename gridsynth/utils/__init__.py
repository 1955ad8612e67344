"""Utility helpers shared by the engine and scripts."""

from .grid import count_changed_cells
from .logging import EventLog, open_event_log

__all__ = [
    "count_changed_cells",
    "EventLog",
    "open_event_log",
]
