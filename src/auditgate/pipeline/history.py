"""Historical snapshots, deltas and retention.

Snapshots are named ``report-<UTC timestamp>.json`` so that a plain
lexicographic sort of the filenames is also a chronological sort.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any

from auditgate.artifacts.canonical_json import read_json, write_json
from auditgate.types import coverage_pct, mutation_score

logger = logging.getLogger(__name__)

SNAPSHOT_PREFIX = "report-"
SNAPSHOT_SUFFIX = ".json"
TREND_WINDOW = 15


@dataclass(frozen=True)
class Deltas:
    coverage_statements_pct: float | None = None
    mutation_score_pct: float | None = None
    unsafe_any_count: int | None = None


def snapshot_filename(now: datetime) -> str:
    return f"{SNAPSHOT_PREFIX}{now.strftime('%Y-%m-%dT%H-%M-%S.%fZ')}{SNAPSHOT_SUFFIX}"


def list_snapshots(history_dir: Path) -> list[Path]:
    """Snapshot files, oldest first."""
    if not history_dir.is_dir():
        return []
    snapshots = [p for p in history_dir.iterdir() if p.is_file() and p.suffix == SNAPSHOT_SUFFIX]
    snapshots.sort(key=lambda p: p.name)
    return snapshots


def _read_snapshot(path: Path) -> dict[str, Any] | None:
    try:
        data = read_json(path)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.warning("Unreadable history snapshot %s: %s", path, e)
        return None
    return data if isinstance(data, dict) else None


def load_previous_snapshot(history_dir: Path) -> dict[str, Any] | None:
    """Most recent snapshot; must be called before the current run is persisted."""
    snapshots = list_snapshots(history_dir)
    if not snapshots:
        return None
    return _read_snapshot(snapshots[-1])


def load_recent_snapshots(history_dir: Path, limit: int = TREND_WINDOW) -> list[dict[str, Any]]:
    recent: list[dict[str, Any]] = []
    for path in list_snapshots(history_dir)[-limit:]:
        snapshot = _read_snapshot(path)
        if snapshot is not None:
            recent.append(snapshot)
    return recent


def _round_delta(current: float | None, previous: float | None) -> float | None:
    if current is None or previous is None:
        return None
    return round(current - previous, 2)


def previous_unsafe_any(previous: dict[str, Any] | None) -> int | None:
    if not previous:
        return None
    value = (previous.get("quality") or {}).get("unsafeAnyCount")
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


def compute_deltas(
    *,
    coverage_statements_pct: float | None,
    mutation_score_pct: float | None,
    unsafe_any_count: int | None,
    previous: dict[str, Any] | None,
) -> Deltas:
    """Current minus previous for each tracked metric; ``None`` when either side is missing."""
    if previous is None:
        return Deltas()
    prev_unsafe = previous_unsafe_any(previous)
    return Deltas(
        coverage_statements_pct=_round_delta(
            coverage_statements_pct, coverage_pct(previous.get("coverage"), "statements")
        ),
        mutation_score_pct=_round_delta(mutation_score_pct, mutation_score(previous.get("mutation"))),
        unsafe_any_count=(
            unsafe_any_count - prev_unsafe
            if unsafe_any_count is not None and prev_unsafe is not None
            else None
        ),
    )


def write_snapshot(history_dir: Path, report: dict[str, Any], now: datetime) -> Path:
    path = history_dir / snapshot_filename(now)
    write_json(path, report)
    return path


def prune_snapshots(history_dir: Path, max_files: int) -> list[Path]:
    """Delete the oldest snapshots beyond ``max_files``; return what was removed."""
    snapshots = list_snapshots(history_dir)
    excess = len(snapshots) - max_files
    if excess <= 0:
        return []
    removed: list[Path] = []
    for path in snapshots[:excess]:
        try:
            path.unlink()
        except OSError as e:
            logger.warning("Could not prune snapshot %s: %s", path, e)
            continue
        removed.append(path)
    logger.debug("Pruned %d snapshot(s) from %s", len(removed), history_dir)
    return removed


def metric_series(snapshots: list[dict[str, Any]]) -> dict[str, list[float]]:
    """Time series of the tracked metrics across snapshots (missing points dropped)."""

    def numbers(values: list[Any]) -> list[float]:
        return [v for v in values if isinstance(v, (int, float)) and not isinstance(v, bool)]

    return {
        "coverageStatementsPct": numbers([coverage_pct(s.get("coverage"), "statements") for s in snapshots]),
        "mutationScorePct": numbers([mutation_score(s.get("mutation")) for s in snapshots]),
        "eslintNewErrors": numbers([(s.get("quality") or {}).get("eslintNewErrors") for s in snapshots]),
        "unsafeAnyCount": numbers([(s.get("quality") or {}).get("unsafeAnyCount") for s in snapshots]),
    }
