"""
Replay metrics — one JSONL record per handled save event.
"""

from __future__ import annotations

import json
import logging
import os
from collections import Counter
from datetime import datetime, timezone

logger = logging.getLogger(__name__)


def log_replay_metric(data: dict, path: str) -> None:
    """Append a single replay metric entry to the JSONL log at *path*.

    Parameters
    ----------
    data:
        Metric fields to log (file, outcome, ops_applied, etc.).
    path:
        Metrics file; parent directories are created as needed.
    """
    parent = os.path.dirname(os.path.abspath(path))
    entry = {"timestamp": datetime.now(timezone.utc).isoformat()}
    entry.update(data)

    try:
        os.makedirs(parent, exist_ok=True)
        with open(path, "a", encoding="utf-8") as f:
            f.write(json.dumps(entry) + "\n")
    except OSError as exc:
        logger.warning("[Metrics] Failed to write metrics: %s", exc)


def read_replay_stats(path: str, last_n: int = 50) -> dict:
    """Compute rolling statistics from the metrics log.

    Returns
    -------
    dict
        ``total_events``, ``applied_rate``, ``stale_rate``,
        ``avg_ops_applied``, ``avg_duration_ms`` and ``outcomes`` (percent
        per outcome).
    """
    entries: list[dict] = []
    if os.path.isfile(path):
        try:
            with open(path, "r", encoding="utf-8") as f:
                for line in f:
                    line = line.strip()
                    if line:
                        try:
                            entries.append(json.loads(line))
                        except json.JSONDecodeError:
                            continue
        except OSError:
            pass

    entries = entries[-last_n:]

    if not entries:
        return {
            "total_events": 0,
            "applied_rate": 0.0,
            "stale_rate": 0.0,
            "avg_ops_applied": 0.0,
            "avg_duration_ms": 0.0,
            "outcomes": {},
        }

    total = len(entries)
    outcomes = Counter(e.get("outcome", "unknown") for e in entries)
    ops = [e["ops_applied"] for e in entries if "ops_applied" in e]
    durations = [e["duration_ms"] for e in entries if "duration_ms" in e]

    return {
        "total_events": total,
        "applied_rate": outcomes.get("applied", 0) / total * 100,
        "stale_rate": outcomes.get("stale", 0) / total * 100,
        "avg_ops_applied": sum(ops) / len(ops) if ops else 0.0,
        "avg_duration_ms": sum(durations) / len(durations) if durations else 0.0,
        "outcomes": {
            outcome: count / total * 100
            for outcome, count in outcomes.most_common()
        },
    }
