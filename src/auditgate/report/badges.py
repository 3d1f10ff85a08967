"""SVG status badges."""

from __future__ import annotations

import re
from html import escape
from pathlib import Path

from auditgate.report.master import MasterReport

BADGES_DIRNAME = "badges"

GREEN = "#2e7d32"
RED = "#c62828"

# (minimum pct, color), highest first
PERCENT_SCALE: tuple[tuple[float, str], ...] = (
    (90, GREEN),
    (75, "#558b2f"),
    (60, "#f9a825"),
    (45, "#ef6c00"),
)


def percent_color(pct: float) -> str:
    for minimum, color in PERCENT_SCALE:
        if pct >= minimum:
            return color
    return RED


def count_color(count: int) -> str:
    return GREEN if count == 0 else RED


def badge_filename(label: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", label.lower()) + ".svg"


def render_badge(label: str, value: str, color: str) -> str:
    label_text = escape(label, quote=True)
    value_text = escape(value, quote=True)
    return (
        "<svg xmlns='http://www.w3.org/2000/svg' width='180' height='20' role='img' "
        f"aria-label='{label_text}: {value_text}'>"
        "<linearGradient id='s' x2='0' y2='100%'><stop offset='0' stop-color='#bbb' stop-opacity='.1'/>"
        "<stop offset='1' stop-opacity='.1'/></linearGradient>"
        "<rect rx='3' width='180' height='20' fill='#555'/>"
        f"<rect rx='3' x='80' width='100' height='20' fill='{color}'/>"
        f"<path fill='{color}' d='M80 0h4v20h-4z'/>"
        "<rect rx='3' width='180' height='20' fill='url(#s)'/>"
        "<g fill='#fff' text-anchor='middle' font-family='Verdana,Geneva,DejaVu Sans,sans-serif' font-size='11'>"
        f"<text x='40' y='14'>{label_text}</text><text x='130' y='14'>{value_text}</text></g></svg>"
    )


def _fmt_pct(value: float) -> str:
    return f"{int(value)}%" if float(value).is_integer() else f"{value}%"


def badge_specs(report: MasterReport) -> list[tuple[str, str, str]]:
    """(label, value, color) for every badge this report should produce."""
    specs: list[tuple[str, str, str]] = []
    coverage = report.metrics.coverage_statements_pct
    if coverage is not None:
        specs.append(("coverage", _fmt_pct(coverage), percent_color(coverage)))
    mutation = report.metrics.mutation_score
    if mutation is not None:
        specs.append(("mutation", _fmt_pct(mutation), percent_color(mutation)))
    eslint_new = report.summary.eslint_new_errors
    specs.append(("eslint-new", str(eslint_new), count_color(eslint_new)))
    high_crit = report.security_high_critical
    specs.append(("security-hc", str(high_crit), count_color(high_crit)))
    return specs


def write_badge(badge_dir: Path, label: str, value: str, color: str) -> Path:
    badge_dir.mkdir(parents=True, exist_ok=True)
    path = badge_dir / badge_filename(label)
    path.write_text(render_badge(label, value, color), encoding="utf-8")
    return path
