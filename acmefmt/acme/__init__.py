"""Acme integration — window files, the event log and save watching."""

from .events import AcmeLog, SaveEvent, parse_log_line, read_index
from .window import AcmeWindow, open_window

__all__ = [
    "AcmeLog", "SaveEvent", "parse_log_line", "read_index",
    "AcmeWindow", "open_window",
]
