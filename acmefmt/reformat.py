"""
Reformat-on-save — the per-event glue between acme, the formatters and
the diff-to-edit replayer.

For each save the file on disk is run through its formatter; when the
output differs, only the changed lines are patched into the open window.
The file itself is never written.
"""

from __future__ import annotations

import logging
import subprocess
import time
from typing import Callable, Iterable, Optional, Sequence

from .acme.events import SaveEvent
from .document import Document
from .editing.diff_engine import DiffEngine, DiffError
from .editing.diff_parser import DiffParser
from .editing.guard import StaleBufferError, check_snapshot
from .editing.metrics import log_replay_metric
from .editing.replayer import Replayer
from .formatters import Formatter, FormatterError, FormatterRegistry

logger = logging.getLogger(__name__)


class Reformatter:
    """Handle save events one at a time.

    Parameters
    ----------
    registry:
        Formatters keyed by extension.
    open_document:
        Callable returning the :class:`~acmefmt.document.Document` for a
        window id.
    diff_engine:
        Engine used to diff the saved file against the formatter output.
    after_save:
        Commands (argv lists) run with the file name appended whenever a
        save left the window untouched or was handled by the default
        formatter.
    metrics_path:
        Optional JSONL file receiving one record per handled save.
    """

    def __init__(
        self,
        registry: FormatterRegistry,
        open_document: Callable[[int], Document],
        diff_engine: Optional[DiffEngine] = None,
        after_save: Sequence[Sequence[str]] = (),
        metrics_path: str | None = None,
    ) -> None:
        self._registry = registry
        self._open_document = open_document
        self._engine = diff_engine or DiffEngine()
        self._parser = DiffParser()
        self._after_save = [list(cmd) for cmd in after_save]
        self._metrics_path = metrics_path or None

    # ------------------------------------------------------------------
    # Event loop
    # ------------------------------------------------------------------

    def run(self, events: Iterable[SaveEvent]) -> int:
        """Process *events* sequentially; returns the number of saves handled.

        A failure while handling one event is logged and the loop moves on.
        """
        handled = 0
        for event in events:
            if not event.is_save:
                continue
            try:
                self.handle(event)
            except Exception:
                logger.exception("[Reformat] Error handling %s", event.name)
            handled += 1
        return handled

    def handle(self, event: SaveEvent) -> bool:
        """Reformat the file behind a save event; True if the window changed."""
        if not event.is_save:
            return False

        formatter, used_default = self._registry.lookup(event.name)
        modified = self.reformat(event.win_id, event.name, formatter)
        if not modified or used_default:
            self._run_after_save(event.name)
        return modified

    # ------------------------------------------------------------------
    # Single reformat
    # ------------------------------------------------------------------

    def reformat(self, win_id: int, name: str, formatter: Formatter) -> bool:
        """Format *name* and patch the differences into window *win_id*.

        Returns
        -------
        bool
            True iff at least one edit was written to the window.
        """
        started = time.monotonic()

        try:
            with open(name, "rb") as f:
                old = f.read()
        except OSError as exc:
            logger.debug("[Reformat] Cannot read %s: %s", name, exc)
            return False

        try:
            new = formatter.format(name)
        except FormatterError as exc:
            logger.warning("[Reformat] %s left unformatted: %s", name, exc)
            self._record(name, "formatter_error", started)
            return False

        if old == new:
            self._record(name, "unchanged", started)
            return False

        try:
            diff_text = self._engine.diff(old, new)
        except DiffError as exc:
            logger.warning("[Reformat] Cannot diff %s: %s", name, exc)
            self._record(name, "diff_error", started)
            return False

        script = self._parser.parse(diff_text)
        if not script:
            logger.warning("[Reformat] No usable hunks for %s", name)
            self._record(name, "parse_error", started,
                         parse_errors=len(script.errors))
            return False

        try:
            document = self._open_document(win_id)
        except OSError as exc:
            logger.warning("[Reformat] Cannot open window %d: %s", win_id, exc)
            self._record(name, "window_error", started)
            return False

        with document:
            try:
                check_snapshot(old, document.read_all("body"))
            except StaleBufferError as exc:
                logger.info("[Reformat] skipped update to %s: %s", name, exc)
                self._record(name, "stale", started)
                return False

            result = Replayer(document).replay(script, new)

        outcome = "applied" if result.applied and not result.error else (
            "partial" if result.applied else "address_error")
        logger.info(
            "[Reformat] %s: %d edit(s) applied to window %d%s",
            name, result.ops_applied, win_id,
            f" ({result.ops_failed} aborted)" if result.ops_failed else "",
        )
        self._record(
            name, outcome, started,
            ops_applied=result.ops_applied,
            ops_failed=result.ops_failed,
            parse_errors=len(script.errors),
        )
        return result.applied

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _run_after_save(self, name: str) -> None:
        for cmd in self._after_save:
            try:
                proc = subprocess.run(
                    [*cmd, name],
                    stdout=subprocess.PIPE,
                    stderr=subprocess.STDOUT,
                    check=False,
                )
            except OSError as exc:
                logger.warning("[Reformat] after-save %s failed: %s", cmd[0], exc)
                continue
            output = proc.stdout.decode("utf-8", errors="replace").rstrip()
            if output:
                logger.info("%s", output)
            if proc.returncode != 0:
                logger.warning(
                    "[Reformat] after-save %s %s: exit status %d",
                    cmd[0], name, proc.returncode,
                )

    def _record(self, name: str, outcome: str, started: float, **fields) -> None:
        if not self._metrics_path:
            return
        data = {
            "file": name,
            "outcome": outcome,
            "duration_ms": round((time.monotonic() - started) * 1000, 1),
        }
        data.update(fields)
        log_replay_metric(data, self._metrics_path)
