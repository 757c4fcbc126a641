"""
Edit replayer — applies a parsed diff script to a live window using
address-relative writes.

Operations are applied last-to-first.  Every address in the script is in
the *old* buffer's line numbering; an edit only shifts lines after it, so
walking backwards keeps every remaining address valid without any
offset bookkeeping.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..document import AddressError, Document
from .diff_parser import DiffScript, EditOp, OpKind
from .spans import extract_lines

logger = logging.getLogger(__name__)


@dataclass
class ReplayResult:
    """Outcome of one replay pass."""
    applied: bool = False
    ops_applied: int = 0
    ops_failed: int = 0
    error: str = ""


def address_for(op: EditOp) -> str:
    """Return the acme address expression that selects *op*'s old range."""
    if op.kind is OpKind.EOF_NEWLINE:
        return "$"
    if op.kind is OpKind.ADD:
        return f"{op.old_start}+#0"
    return f"{op.old_start},{op.old_end}"


def payload_for(op: EditOp, new_content: bytes) -> bytes:
    """Return the bytes that replace *op*'s selection (deletes excepted)."""
    if op.kind is OpKind.EOF_NEWLINE:
        return b"\n"
    return extract_lines(new_content, op.new_start, op.new_end)


class Replayer:
    """Drive a :class:`~acmefmt.document.Document` through a diff script."""

    def __init__(self, document: Document) -> None:
        self._doc = document

    def replay(
        self,
        script: DiffScript,
        new_content: bytes,
        order: str = "reverse",
    ) -> ReplayResult:
        """Apply *script* to the document.

        Parameters
        ----------
        script:
            Ops in ascending old-buffer order, as produced by the parser.
        new_content:
            The formatter output the script was computed against.
        order:
            ``"reverse"`` (the only correct order) or ``"forward"``.

        Returns
        -------
        ReplayResult
            ``applied`` is True iff at least one write reached the window.
        """
        result = ReplayResult()
        if not script.ops:
            return result

        if order == "reverse":
            ops = list(reversed(script.ops))
        elif order == "forward":
            ops = list(script.ops)
        else:
            raise ValueError(f"unknown replay order {order!r}")

        # One undo unit for the whole pass
        self._doc.write("ctl", b"mark")
        self._doc.write("ctl", b"nomark")

        for op in ops:
            addr = address_for(op)
            try:
                if op.kind is OpKind.DELETE:
                    self._doc.delete(op.old_start, op.old_end)
                else:
                    self._doc.set_address(addr)
                    self._doc.write("data", payload_for(op, new_content))
            except AddressError as exc:
                result.ops_failed = len(ops) - result.ops_applied
                result.error = str(exc)
                logger.warning(
                    "[Replay] Address %s rejected, aborting %d remaining op(s): %s",
                    addr, result.ops_failed, exc,
                )
                break

            result.ops_applied += 1
            result.applied = True
            logger.debug("[Replay] %s at %s", op.kind.name, addr)

        return result
