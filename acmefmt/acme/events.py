"""
Acme event log reader.

acme's ``log`` file blocks until a window event happens and then yields
one line ``<id> <op> <name>``.  Saves are reported with op ``put``.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Iterator

logger = logging.getLogger(__name__)

SAVE_OP = "put"


@dataclass(frozen=True)
class SaveEvent:
    """A window event; only ``put`` events with a file name matter."""
    win_id: int
    name: str
    op: str

    @property
    def is_save(self) -> bool:
        return self.op == SAVE_OP and self.name != ""


def parse_log_line(line: str) -> SaveEvent | None:
    """Parse one line of acme's log; returns None when malformed."""
    parts = line.rstrip("\n").split(" ", 2)
    if len(parts) < 2:
        return None
    try:
        win_id = int(parts[0])
    except ValueError:
        return None
    name = parts[2] if len(parts) > 2 else ""
    return SaveEvent(win_id=win_id, name=name, op=parts[1])


class AcmeLog:
    """Iterate over the events in ``<mount>/log``.

    Iteration ends when the log reaches end of file (acme exited).
    """

    def __init__(self, mount: str) -> None:
        self._path = os.path.join(mount, "log")

    def __iter__(self) -> Iterator[SaveEvent]:
        with open(self._path, "r", encoding="utf-8", errors="replace") as f:
            for line in f:
                if not line.strip():
                    continue
                event = parse_log_line(line)
                if event is None:
                    logger.warning("[Acme] Malformed log line: %r", line)
                    continue
                yield event


def read_index(mount: str) -> dict[str, int]:
    """Map file names to window ids using acme's ``index`` file.

    Each index line has five numeric fields (id, tag length, body length,
    isdir, isdirty) followed by the tag; the tag's first word is the
    window's file name.
    """
    windows: dict[str, int] = {}
    with open(os.path.join(mount, "index"), "r", encoding="utf-8", errors="replace") as f:
        for line in f:
            parts = line.split(None, 5)
            if len(parts) < 6:
                continue
            try:
                win_id = int(parts[0])
            except ValueError:
                continue
            tag = parts[5].split()
            if tag:
                windows[tag[0]] = win_id
    return windows
