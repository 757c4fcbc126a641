"""
Acme window backend.

Talks to a running acme through its file server mounted on the local
filesystem (for example ``9pfuse $(namespace)/acme ~/mnt/acme``).  Each
window is a directory ``<mount>/<id>/`` holding ``addr``, ``body``,
``ctl`` and ``data``.
"""

from __future__ import annotations

import logging
import os

from ..document import AddressError, Document
from ..editing.diff_engine import split_lines

logger = logging.getLogger(__name__)

# acme rejects 9P writes larger than its message size
_WRITE_CHUNK = 8192


class AcmeWindow(Document):
    """An open acme window.

    The ``addr`` and ``data`` files stay open until :meth:`close`; acme
    forgets the address when ``addr`` is closed, so a write to ``data``
    must go through the same open file set.

    Parameters
    ----------
    win_id:
        Window id as reported in acme's ``log`` or ``index``.
    mount:
        Directory where the acme file server is mounted.
    """

    def __init__(self, win_id: int, mount: str) -> None:
        self.id = win_id
        self._dir = os.path.join(mount, str(win_id))
        if not os.path.isdir(self._dir):
            raise FileNotFoundError(f"no acme window {win_id} under {mount}")
        self._fds: dict[str, int] = {}

    def _open(self, name: str) -> int:
        fd = self._fds.get(name)
        if fd is None:
            fd = os.open(os.path.join(self._dir, name), os.O_RDWR)
            self._fds[name] = fd
        return fd

    def read_all(self, region: str = "body") -> bytes:
        with open(os.path.join(self._dir, region), "rb") as f:
            return f.read()

    def set_address(self, expr: str) -> None:
        fd = self._open("addr")
        try:
            os.write(fd, expr.encode("utf-8"))
        except OSError as exc:
            raise AddressError(f"window {self.id}: address {expr!r}: {exc}") from exc

    def write(self, region: str, data: bytes) -> None:
        data = bytes(data or b"")
        if not data:
            # write(2) of zero bytes never reaches the file server
            raise ValueError(f"empty write to {region} of window {self.id}; use delete()")
        fd = self._open(region)
        for i in range(0, len(data), _WRITE_CHUNK):
            chunk = data[i:i + _WRITE_CHUNK]
            while chunk:
                n = os.write(fd, chunk)
                chunk = chunk[n:]

    def delete(self, start: int, end: int) -> None:
        """Remove lines *start* through *end* without an empty data write.

        The selection is widened by one neighbouring line, which is read
        from the current body and written back unchanged.  Lines before
        *start* are still in old-buffer numbering during a reverse replay,
        and lines after *end* are whatever the body holds now.
        """
        lines = split_lines(self.read_all("body"))
        if start < 1 or end < start or end > len(lines):
            raise AddressError(
                f"window {self.id}: delete {start},{end} out of range "
                f"({len(lines)} lines)")
        if start > 1:
            addr, keep = f"{start - 1},{end}", lines[start - 2]
        elif end < len(lines):
            addr, keep = f"1,{end + 1}", lines[end]
        else:
            raise AddressError(
                f"window {self.id}: cannot empty the body through its data file")
        self.set_address(addr)
        self.write("data", keep)

    def close(self) -> None:
        for name, fd in self._fds.items():
            try:
                os.close(fd)
            except OSError as exc:
                logger.debug("[Acme] Closing %s of window %d: %s", name, self.id, exc)
        self._fds.clear()


def open_window(mount: str):
    """Return a factory that opens windows under *mount* by id."""
    def _open(win_id: int) -> AcmeWindow:
        return AcmeWindow(win_id, mount)
    return _open
