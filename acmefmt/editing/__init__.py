"""Diff-to-edit translation — turn a formatter's output into window edits."""

from .diff_engine import DiffEngine, DiffError, split_lines
from .diff_parser import DiffParser, DiffScript, EditOp, OpKind, ParseError
from .spans import extract_lines
from .replayer import Replayer, ReplayResult, address_for
from .guard import StaleBufferError, check_snapshot, guard
from .metrics import log_replay_metric, read_replay_stats

__all__ = [
    "DiffEngine", "DiffError", "split_lines",
    "DiffParser", "DiffScript", "EditOp", "OpKind", "ParseError",
    "extract_lines",
    "Replayer", "ReplayResult", "address_for",
    "StaleBufferError", "check_snapshot", "guard",
    "log_replay_metric", "read_replay_stats",
]
