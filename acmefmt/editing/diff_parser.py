"""
Diff parser — turns a normal-format diff report into an ordered edit
script of line-range operations.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field

from .diff_engine import NO_NEWLINE_SENTINEL

logger = logging.getLogger(__name__)

_OPERATORS = "acd"


class ParseError(ValueError):
    """Raised when a hunk header cannot be decomposed."""


class OpKind(enum.Enum):
    ADD = "a"
    CHANGE = "c"
    DELETE = "d"
    EOF_NEWLINE = "$"


@dataclass(frozen=True)
class EditOp:
    """A single change instruction.

    Ranges are 1-based and inclusive.  For ``ADD`` the old range is the
    insertion point (insert after ``old_start``); ``EOF_NEWLINE`` has no
    line range and carries ``(0, 0)`` on both sides.
    """
    kind: OpKind
    old_start: int = 0
    old_end: int = 0
    new_start: int = 0
    new_end: int = 0

    @property
    def old_range(self) -> tuple[int, int]:
        return self.old_start, self.old_end

    @property
    def new_range(self) -> tuple[int, int]:
        return self.new_start, self.new_end


@dataclass
class DiffScript:
    """Edit operations in ascending old-buffer order."""
    ops: list[EditOp] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.ops)

    def __iter__(self):
        return iter(self.ops)

    def __bool__(self) -> bool:
        return bool(self.ops)


def parse_range(text: str) -> tuple[int, int]:
    """Parse ``N`` or ``N,M`` into ``(start, end)``.

    Raises
    ------
    ParseError
        If either side is not a non-negative integer.
    """
    start_text, sep, end_text = text.partition(",")
    try:
        start = int(start_text)
        end = int(end_text) if sep else start
    except ValueError:
        raise ParseError(f"cannot parse span {text!r}") from None
    if start < 0 or end < start:
        raise ParseError(f"cannot parse span {text!r}")
    return start, end


def parse_header(line: str) -> EditOp:
    """Decompose a hunk header such as ``12,14c10,11`` into an EditOp."""
    j = 0
    while j < len(line) and line[j] not in _OPERATORS:
        j += 1
    if j >= len(line):
        raise ParseError(f"cannot parse diff line: {line!r}")

    kind = OpKind(line[j])
    old_start, old_end = parse_range(line[:j])
    new_start, new_end = parse_range(line[j + 1:])

    # Zero is only meaningful as the insertion point of an add (old side)
    # or the line preceding a delete (new side).
    if old_start == 0 and kind is not OpKind.ADD:
        raise ParseError(f"invalid old line 0 in {line!r}")
    if new_start == 0 and kind is not OpKind.DELETE:
        raise ParseError(f"invalid new line 0 in {line!r}")

    return EditOp(kind, old_start, old_end, new_start, new_end)


class DiffParser:
    """Parse normal-format diff text into a :class:`DiffScript`."""

    def parse(self, diff_text: str) -> DiffScript:
        script = DiffScript()
        side = ""  # "<" or ">": which side the last body line came from

        for line in diff_text.split("\n"):
            if not line:
                continue
            if line == NO_NEWLINE_SENTINEL:
                # Only the old buffer's missing newline needs an edit; a
                # missing newline in the new buffer falls out of span
                # extraction.
                if side == "<":
                    script.ops.append(EditOp(OpKind.EOF_NEWLINE))
                continue
            if line[0] in "<>":
                side = line[0]
                continue
            if line.startswith("---"):
                side = ""
                continue

            side = ""
            try:
                script.ops.append(parse_header(line))
            except ParseError as exc:
                logger.warning("[Parse] Skipping hunk: %s", exc)
                script.errors.append(str(exc))

        return script
