"""
Diff engine — produces a classic normal-format ("ed style") line diff
between two byte buffers.

The built-in renderer walks ``difflib.SequenceMatcher`` opcodes; an
external ``diff`` binary can be used instead by passing its name.
"""

from __future__ import annotations

import logging
import os
import subprocess
import tempfile
from difflib import SequenceMatcher

logger = logging.getLogger(__name__)

NO_NEWLINE_SENTINEL = "\\ No newline at end of file"


class DiffError(Exception):
    """Raised when the external diff command fails."""


def split_lines(data: bytes) -> list[bytes]:
    """Split *data* into lines, keeping the ``\\n`` terminators.

    Unlike ``bytes.splitlines`` only ``\\n`` ends a line; a final line
    without a newline is kept as-is.
    """
    lines = data.split(b"\n")
    out = [line + b"\n" for line in lines[:-1]]
    if lines[-1]:
        out.append(lines[-1])
    return out


def _fmt_range(start: int, end: int) -> str:
    """Format a 1-based inclusive range the way diff prints it."""
    if start >= end:
        return str(start)
    return f"{start},{end}"


def _body(prefix: str, lines: list[bytes]) -> list[str]:
    out: list[str] = []
    for line in lines:
        text = line.decode("utf-8", errors="replace")
        if text.endswith("\n"):
            out.append(prefix + text[:-1])
        else:
            out.append(prefix + text)
            out.append(NO_NEWLINE_SENTINEL)
    return out


class DiffEngine:
    """Compute normal-format diffs between two buffers.

    Parameters
    ----------
    command:
        Optional external diff program (e.g. ``"diff"``).  When unset the
        report is rendered in-process.
    """

    def __init__(self, command: str | None = None) -> None:
        self._command = command or None

    @property
    def command(self) -> str | None:
        return self._command

    def diff(self, old: bytes, new: bytes) -> str:
        """Return the diff report turning *old* into *new*.

        Identical inputs produce an empty string.
        """
        if self._command:
            return self._run_external(old, new)
        return self.render(old, new)

    # ------------------------------------------------------------------
    # Built-in renderer
    # ------------------------------------------------------------------

    @staticmethod
    def render(old: bytes, new: bytes) -> str:
        a = split_lines(old)
        b = split_lines(new)
        matcher = SequenceMatcher(None, a, b, autojunk=False)

        out: list[str] = []
        for tag, i1, i2, j1, j2 in matcher.get_opcodes():
            if tag == "equal":
                continue
            if tag == "insert":
                out.append(f"{i1}a{_fmt_range(j1 + 1, j2)}")
                out.extend(_body("> ", b[j1:j2]))
            elif tag == "delete":
                out.append(f"{_fmt_range(i1 + 1, i2)}d{j1}")
                out.extend(_body("< ", a[i1:i2]))
            else:
                out.append(f"{_fmt_range(i1 + 1, i2)}c{_fmt_range(j1 + 1, j2)}")
                out.extend(_body("< ", a[i1:i2]))
                out.append("---")
                out.extend(_body("> ", b[j1:j2]))

        if not out:
            return ""
        return "\n".join(out) + "\n"

    # ------------------------------------------------------------------
    # External diff
    # ------------------------------------------------------------------

    def _run_external(self, old: bytes, new: bytes) -> str:
        paths: list[str] = []
        try:
            for data, suffix in ((old, ".old"), (new, ".new")):
                fd, path = tempfile.mkstemp(prefix="acmefmt_", suffix=suffix)
                paths.append(path)
                with os.fdopen(fd, "wb") as f:
                    f.write(data)

            try:
                proc = subprocess.run(
                    [self._command, paths[0], paths[1]],
                    capture_output=True,
                    check=False,
                )
            except OSError as exc:
                raise DiffError(f"cannot run {self._command}: {exc}") from exc

            # diff exits 1 when the inputs differ
            if proc.returncode not in (0, 1):
                raise DiffError(
                    f"{self._command} exited {proc.returncode}: "
                    f"{proc.stderr.decode('utf-8', errors='replace').strip()}"
                )
            return proc.stdout.decode("utf-8", errors="replace")
        finally:
            for path in paths:
                try:
                    os.unlink(path)
                except OSError:
                    logger.debug("[Diff] Could not remove temp file %s", path)
