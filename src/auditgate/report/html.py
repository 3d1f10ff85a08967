"""Static HTML dashboard with sparkline trends."""

from __future__ import annotations

import json
from html import escape
from pathlib import Path
from typing import Any

from auditgate.report.master import MasterReport

REPORT_HTML_FILENAME = "report.html"
SPARK_BLOCKS = "▁▂▃▄▅▆▇█"

_STYLE = """
body{font-family:Arial,Helvetica,sans-serif;margin:20px;}
h1{margin-top:0}
.fail{color:#b30000;font-weight:bold}
.pass{color:#0a730a;font-weight:bold}
table{border-collapse:collapse;margin:10px 0;}
th,td{border:1px solid #ccc;padding:4px 8px;font-size:12px;}
code{background:#f5f5f5;padding:2px 4px;border-radius:3px;}
"""


def sparkline(values: list[float], scale: float = 100) -> str:
    """Render values as unicode block characters scaled against ``max(values, scale)``."""
    if not values:
        return ""
    top = max(*values, scale)
    if top <= 0:
        return SPARK_BLOCKS[0] * len(values)
    last = len(SPARK_BLOCKS) - 1
    return "".join(SPARK_BLOCKS[max(0, min(last, round(v / top * last)))] for v in values)


def _value(value: Any, missing: str = "n/a") -> str:
    return missing if value is None else escape(str(value))


def _pre(payload: Any) -> str:
    return f"<pre>{escape(json.dumps(payload, indent=2, sort_keys=True, ensure_ascii=False))}</pre>"


def render_html(report: MasterReport, series: dict[str, list[float]], history_count: int) -> str:
    payload = report.to_dict()
    quality = payload["quality"]
    deltas = payload["deltas"]

    if report.gates:
        gate_items = "".join(f'<li class="fail">FAILED: {escape(g.message)}</li>' for g in report.gates)
    else:
        gate_items = '<li class="pass">All gates passed</li>'

    eslint_series = series.get("eslintNewErrors", [])
    unsafe_series = series.get("unsafeAnyCount", [])
    rows = [
        ("Coverage statements %", report.metrics.coverage_statements_pct,
         deltas["coverageStatementsPct"], sparkline(series.get("coverageStatementsPct", []))),
        ("Mutation score %", report.metrics.mutation_score,
         deltas["mutationScorePct"], sparkline(series.get("mutationScorePct", []))),
        ("New ESLint errors", quality["eslintNewErrors"], None,
         sparkline(eslint_series, max([*eslint_series, 10]))),
        ("Unsafe any count", quality["unsafeAnyCount"], quality["unsafeAnyDelta"],
         sparkline(unsafe_series, max([*unsafe_series, 10]))),
    ]
    metric_rows = "".join(
        f"<tr><td>{label}</td><td>{_value(current)}</td><td>{_value(delta, '')}</td>"
        f"<td><code>{spark}</code></td></tr>"
        for label, current, delta, spark in rows
    )

    skipped = ""
    if report.skipped:
        skipped = "<h2>Skipped Inputs</h2><ul>" + "".join(
            f"<li><code>{escape(item.path)}</code>: {escape(item.reason)}</li>" for item in report.skipped
        ) + "</ul>"

    return (
        "<!DOCTYPE html><html><head><meta charset=\"utf-8\"/><title>Audit Report</title>"
        f"<style>{_STYLE}</style></head><body>"
        "<h1>Audit Report</h1>"
        f"<p>Generated: {escape(report.generated_at)}</p>"
        f"<h2>Gate Status</h2><ul>{gate_items}</ul>"
        "<h2>Key Metrics</h2>"
        f"<table><tr><th>Metric</th><th>Current</th><th>Δ</th><th>Trend (last {history_count})</th></tr>"
        f"{metric_rows}</table>"
        "<h2>Risk Acceptance</h2>"
        f"<p>Accepted findings: {report.summary.accepted_count}</p>"
        f"<h2>Totals</h2>{_pre(payload['totals'])}"
        f"<h2>Security Packages</h2>{_pre(payload['security']['packages'])}"
        f"<h2>Quality</h2>{_pre(quality)}"
        f"<h2>Licenses</h2>{_pre(payload['licenses'])}"
        f"<h2>Secrets</h2>{_pre(payload['secrets'])}"
        f"<h2>Coverage</h2>{_pre(payload['coverage'])}"
        f"<h2>Mutation</h2>{_pre(payload['mutation'])}"
        f"{skipped}"
        f"<p><em>History snapshots analysed: {history_count}</em></p>"
        "</body></html>"
    )


def write_html_report(path: Path, report: MasterReport, series: dict[str, list[float]],
                      history_count: int) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_html(report, series, history_count), encoding="utf-8")
    return path
