"""
Snapshot guard — refuses a replay when the live buffer no longer matches
the content the edit script was computed against.
"""

from __future__ import annotations


class StaleBufferError(Exception):
    """Raised when the window changed between snapshot and replay."""


def guard(snapshot: bytes, live_now: bytes) -> bool:
    """Return True when *live_now* is byte-identical to *snapshot*."""
    return snapshot == live_now


def check_snapshot(snapshot: bytes, live_now: bytes, name: str = "") -> None:
    """Raise :class:`StaleBufferError` unless the buffers are identical."""
    if not guard(snapshot, live_now):
        raise StaleBufferError(
            f"window modified since put{': ' + name if name else ''} "
            f"(snapshot {len(snapshot)} bytes, window {len(live_now)} bytes)"
        )
