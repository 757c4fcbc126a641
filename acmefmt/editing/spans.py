"""Byte-span extraction by line number."""

from __future__ import annotations


def extract_lines(buf: bytes, start: int, end: int) -> bytes:
    """Return the bytes of lines *start* through *end* (1-based, inclusive).

    A range running past the last line is clipped to the end of *buf*.
    An empty range (``start == 0`` or ``end < start``) yields ``b""``.
    """
    if start < 1 or end < start:
        return b""

    i = 0
    n = len(buf)
    skip = start - 1
    while i < n and skip > 0:
        if buf[i] == 0x0A:
            skip -= 1
            end -= 1
        i += 1
    begin = i

    while i < n and end > 0:
        if buf[i] == 0x0A:
            end -= 1
        i += 1
    return buf[begin:i]
