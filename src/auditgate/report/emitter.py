"""Writes every run artifact from one master report.

The master JSON is the primary contract and is written first; a failure
there propagates. Every other artifact is isolated: a failure is logged as
a warning and the remaining artifacts are still produced.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

from auditgate.artifacts.canonical_json import write_json
from auditgate.pipeline.history import (
    TREND_WINDOW,
    load_recent_snapshots,
    metric_series,
    prune_snapshots,
    write_snapshot,
)
from auditgate.report.badges import BADGES_DIRNAME, badge_specs, write_badge
from auditgate.report.html import REPORT_HTML_FILENAME, write_html_report
from auditgate.report.markdown import SUMMARY_FILENAME, write_summary_markdown
from auditgate.report.master import MASTER_REPORT_FILENAME, MasterReport

logger = logging.getLogger(__name__)

TREND_FILENAME = "trend.json"


@dataclass
class EmitResult:
    written: dict[str, Path] = field(default_factory=dict)
    failed: dict[str, str] = field(default_factory=dict)


def _guarded(result: EmitResult, name: str, action: Callable[[], Path | None]) -> None:
    try:
        path = action()
    except Exception as e:
        logger.warning("%s generation failed: %s", name, e)
        result.failed[name] = str(e)
        return
    if path is not None:
        result.written[name] = path


def write_master_report(out_dir: Path, payload: dict[str, Any]) -> Path:
    path = out_dir / MASTER_REPORT_FILENAME
    write_json(path, payload, pretty=True)
    return path


def trend_payload(generated_at: str, series: dict[str, list[float]]) -> dict[str, Any]:
    return {
        "generatedAt": generated_at,
        "series": {
            "coverageStatementsPct": series.get("coverageStatementsPct", []),
            "mutationScorePct": series.get("mutationScorePct", []),
            "eslintNewErrors": series.get("eslintNewErrors", []),
        },
    }


def emit_reports(
    report: MasterReport,
    *,
    out_dir: Path,
    history_dir: Path,
    history_max_files: int,
    now: datetime,
    root: Path | None = None,
) -> EmitResult:
    """Write the master report, history snapshot, summary, dashboard, trend and badges."""
    result = EmitResult()
    payload = report.to_dict()

    result.written["master-report"] = write_master_report(out_dir, payload)

    def history() -> Path:
        path = write_snapshot(history_dir, payload, now)
        prune_snapshots(history_dir, history_max_files)
        return path

    _guarded(result, "history", history)
    _guarded(result, "summary", lambda: write_summary_markdown(out_dir / SUMMARY_FILENAME, report, root=root))

    snapshots: list[dict[str, Any]] = []

    def load_trend_window() -> None:
        snapshots.extend(load_recent_snapshots(history_dir, TREND_WINDOW))

    _guarded(result, "history-read", load_trend_window)
    series = metric_series(snapshots)

    _guarded(
        result, "html",
        lambda: write_html_report(out_dir / REPORT_HTML_FILENAME, report, series, len(snapshots)),
    )

    def trend() -> Path:
        path = out_dir / TREND_FILENAME
        write_json(path, trend_payload(report.generated_at, series), pretty=True)
        return path

    _guarded(result, "trend", trend)

    badge_dir = out_dir / BADGES_DIRNAME
    for label, value, color in badge_specs(report):
        _guarded(
            result, f"badge:{label}",
            lambda label=label, value=value, color=color: write_badge(badge_dir, label, value, color),
        )

    return result
