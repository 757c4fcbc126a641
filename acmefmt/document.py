"""
Document backends — the three primitives the replayer needs from an
editor window: read the body, set an address, write at the address.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod


class AddressError(Exception):
    """Raised when the backend rejects an address expression."""


class Document(ABC):
    """An open editor buffer addressed by line ranges.

    Address expressions follow acme's syntax, restricted to the forms
    the replayer issues: ``$``, ``N``, ``N,M`` and ``N+#0``.
    """

    @abstractmethod
    def read_all(self, region: str = "body") -> bytes:
        """Return the full current content of *region*."""

    @abstractmethod
    def set_address(self, expr: str) -> None:
        """Select *expr*; raises :class:`AddressError` if out of range."""

    @abstractmethod
    def write(self, region: str, data: bytes) -> None:
        """Write *data* to ``data`` (at the address) or ``ctl``."""

    def delete(self, start: int, end: int) -> None:
        """Remove lines *start* through *end* (1-based, inclusive)."""
        self.set_address(f"{start},{end}")
        self.write("data", b"")

    def close(self) -> None:
        """Release any resources held by the document."""

    def __enter__(self) -> "Document":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


_ADDR_RE = re.compile(r"^(?:(\$)|(\d+)\+#0|(\d+)(?:,(\d+))?)$")


class MemoryDocument(Document):
    """An in-memory buffer with acme address semantics.

    Line ``N`` spans through its trailing newline, ``N+#0`` is the empty
    range just after line ``N`` and ``$`` the empty range at the end.
    After a data write the address collapses to the end of the written
    text, as in acme.

    Every address and write is recorded in :attr:`addresses` and
    :attr:`writes` so callers can inspect what a replay did.
    """

    def __init__(self, content: bytes = b"") -> None:
        self._buf = bytes(content)
        self._q0 = 0
        self._q1 = 0
        self.addresses: list[str] = []
        self.writes: list[tuple[str, bytes]] = []
        self.closed = False

    @property
    def content(self) -> bytes:
        return self._buf

    @property
    def address(self) -> tuple[int, int]:
        return self._q0, self._q1

    def read_all(self, region: str = "body") -> bytes:
        if region != "body":
            raise ValueError(f"cannot read region {region!r}")
        return self._buf

    def set_address(self, expr: str) -> None:
        m = _ADDR_RE.match(expr)
        if not m:
            raise AddressError(f"bad address {expr!r}")
        dollar, after, start, end = m.groups()
        if dollar:
            q0 = q1 = len(self._buf)
        elif after is not None:
            q0 = q1 = self._line_span(int(after), expr)[1]
        else:
            q0, q1 = self._line_span(int(start), expr)
            if end is not None:
                if int(end) < int(start):
                    raise AddressError(f"addresses out of order in {expr!r}")
                q1 = self._line_span(int(end), expr)[1]
        self._q0, self._q1 = q0, q1
        self.addresses.append(expr)

    def write(self, region: str, data: bytes) -> None:
        data = bytes(data or b"")
        if region == "ctl":
            self.writes.append((region, data))
            return
        if region != "data":
            raise ValueError(f"cannot write region {region!r}")
        self._buf = self._buf[:self._q0] + data + self._buf[self._q1:]
        self._q0 += len(data)
        self._q1 = self._q0
        self.writes.append((region, data))

    def close(self) -> None:
        self.closed = True

    def _line_count(self) -> int:
        n = self._buf.count(b"\n")
        if self._buf and not self._buf.endswith(b"\n"):
            n += 1
        return n

    def _line_span(self, n: int, expr: str) -> tuple[int, int]:
        """Byte offsets ``[q0, q1)`` of line *n*; line 0 is the empty start."""
        if n == 0:
            return 0, 0
        if n > self._line_count():
            raise AddressError(f"address out of range: {expr!r}")
        q0 = 0
        for _ in range(n - 1):
            q0 = self._buf.index(b"\n", q0) + 1
        nl = self._buf.find(b"\n", q0)
        q1 = len(self._buf) if nl == -1 else nl + 1
        return q0, q1
