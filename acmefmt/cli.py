"""
`acmefmt` command line.

Commands
--------
acmefmt watch                      -- reformat files as they are Put in acme
acmefmt watch --source fs --root . -- same, noticing saves through the filesystem
acmefmt script OLD NEW             -- show the diff and edit script for two files
acmefmt stats                      -- show rolling replay statistics
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional

from .config import Config
from .log import setup_logging

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------

def _cmd_watch(args: argparse.Namespace, cfg: Config) -> int:
    """Run the save-event loop until acme exits or Ctrl-C."""
    from .acme.events import AcmeLog
    from .acme.window import open_window
    from .editing.diff_engine import DiffEngine
    from .formatters import FormatterRegistry
    from .reformat import Reformatter

    mount = args.mount or cfg.MOUNT
    try:
        registry = FormatterRegistry.from_config(cfg.FORMATTERS)
    except ValueError as exc:
        logger.error("Bad formatter configuration: %s", exc)
        return 2

    reformatter = Reformatter(
        registry,
        open_document=open_window(mount),
        diff_engine=DiffEngine(cfg.DIFF_COMMAND),
        after_save=cfg.AFTER_SAVE,
        metrics_path=cfg.METRICS_FILE,
    )

    if args.source == "fs":
        from .acme.watcher import SaveWatcher
        events = SaveWatcher(mount, args.root, debounce_seconds=cfg.DEBOUNCE_SECONDS)
    else:
        events = AcmeLog(mount)

    logger.info(
        "Watching acme at %s (formatters: %s)",
        mount, ", ".join(registry.extensions()),
    )
    try:
        reformatter.run(events)
    except KeyboardInterrupt:
        return 0
    except OSError as exc:
        logger.error("Cannot read acme events under %s: %s", mount, exc)
        return 1
    return 0


def _cmd_script(args: argparse.Namespace, cfg: Config) -> int:
    """Print the diff and parsed edit script turning OLD into NEW."""
    from .editing.diff_engine import DiffEngine, DiffError
    from .editing.diff_parser import DiffParser
    from .editing.replayer import address_for

    try:
        with open(args.old, "rb") as f:
            old = f.read()
        with open(args.new, "rb") as f:
            new = f.read()
    except OSError as exc:
        print(f"acmefmt: {exc}", file=sys.stderr)
        return 1

    try:
        diff_text = DiffEngine(cfg.DIFF_COMMAND).diff(old, new)
    except DiffError as exc:
        print(f"acmefmt: {exc}", file=sys.stderr)
        return 1

    script = DiffParser().parse(diff_text)
    if args.diff:
        sys.stdout.write(diff_text)
        if diff_text:
            print()

    if not script:
        print("(no edits)")
        return 0
    for op in reversed(script.ops):
        print(f"{op.kind.name:<12} addr {address_for(op):<10} "
              f"old {op.old_start},{op.old_end}  new {op.new_start},{op.new_end}")
    for error in script.errors:
        print(f"skipped: {error}")
    return 0


def _cmd_stats(args: argparse.Namespace, cfg: Config) -> int:
    """Show rolling replay statistics."""
    from .editing.metrics import read_replay_stats

    path = args.metrics or cfg.METRICS_FILE
    if not path:
        print("No metrics file configured (set metrics_file in .acmefmt.yaml).")
        return 1

    stats = read_replay_stats(path, last_n=args.last_n)
    if stats["total_events"] == 0:
        print("No replay metrics found yet.")
        return 0

    print(f"Replay stats (last {args.last_n} saves)")
    print(f"  Total saves:       {stats['total_events']}")
    print(f"  Applied:           {stats['applied_rate']:.0f}%")
    print(f"  Skipped (stale):   {stats['stale_rate']:.0f}%")
    print(f"  Avg edits/save:    {stats['avg_ops_applied']:.1f}")
    print(f"  Avg duration:      {stats['avg_duration_ms']:.1f} ms")
    outcomes = stats.get("outcomes", {})
    if outcomes:
        print("  Outcomes:")
        for outcome, pct in outcomes.items():
            print(f"    {outcome + ':':<18}{pct:.0f}%")
    return 0


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------

def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="acmefmt",
        description="Reformat files saved in acme and patch the changes into the window",
    )
    parser.add_argument("--config", default=None,
                        help="Path to .acmefmt.yaml config file")
    parser.add_argument("--log-level", default=None,
                        help="Log level for stderr (default: from config)")
    subparsers = parser.add_subparsers(dest="command")

    # --- watch ---
    watch_p = subparsers.add_parser(
        "watch", help="Reformat files as they are Put"
    )
    watch_p.add_argument(
        "--mount", default=None,
        help="Directory where acme's file server is mounted",
    )
    watch_p.add_argument(
        "--source", choices=["log", "fs"], default="log",
        help="Read saves from acme's log file or watch the filesystem",
    )
    watch_p.add_argument(
        "--root", default=".",
        help="Directory to watch with --source fs (default: CWD)",
    )
    watch_p.set_defaults(func=_cmd_watch)

    # --- script ---
    script_p = subparsers.add_parser(
        "script", help="Show the edit script turning OLD into NEW"
    )
    script_p.add_argument("old", help="Original file")
    script_p.add_argument("new", help="Formatted file")
    script_p.add_argument(
        "--diff", action="store_true",
        help="Also print the raw diff report",
    )
    script_p.set_defaults(func=_cmd_script)

    # --- stats ---
    stats_p = subparsers.add_parser(
        "stats", help="Show rolling replay statistics"
    )
    stats_p.add_argument(
        "--last-n", dest="last_n", type=int, default=50,
        help="Number of recent saves to include (default: 50)",
    )
    stats_p.add_argument(
        "--metrics", default=None,
        help="Metrics file (default: from config)",
    )
    stats_p.set_defaults(func=_cmd_stats)

    return parser


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def main(argv: Optional[list[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    cfg = Config.load(args.config)
    setup_logging(args.log_level or cfg.LOG_LEVEL, cfg.LOG_DIR or None)

    if not hasattr(args, "func"):
        parser.print_help()
        return 2
    return args.func(args, cfg)


if __name__ == "__main__":
    sys.exit(main())
