"""SVG badge rendering."""

from __future__ import annotations

from pathlib import Path

import pytest

from auditgate.report.badges import (
    badge_filename,
    badge_specs,
    count_color,
    percent_color,
    render_badge,
    write_badge,
)
from tests.unit.report.factories import make_report


@pytest.mark.parametrize(
    ("pct", "color"),
    [(95, "#2e7d32"), (90, "#2e7d32"), (80, "#558b2f"), (60, "#f9a825"), (50, "#ef6c00"), (10, "#c62828")],
)
def test_percent_color_scale(pct: float, color: str) -> None:
    assert percent_color(pct) == color


def test_count_color() -> None:
    assert count_color(0) == "#2e7d32"
    assert count_color(3) == "#c62828"


def test_specs_skip_missing_metrics() -> None:
    specs = badge_specs(make_report(coverage_pct=None, eslint_new_errors=2))

    assert specs == [("eslint-new", "2", "#c62828"), ("security-hc", "1", "#c62828")]


def test_specs_include_percentages() -> None:
    labels = {label: value for label, value, _ in badge_specs(make_report(coverage_pct=82.5, mutation_score=90))}

    assert labels["coverage"] == "82.5%"
    assert labels["mutation"] == "90%"


def test_render_escapes_text() -> None:
    svg = render_badge("a<b", "1&2", "#000")

    assert "a&lt;b" in svg
    assert "1&amp;2" in svg
    assert svg.startswith("<svg")


def test_write_badge(tmp_path: Path) -> None:
    path = write_badge(tmp_path / "badges", "Security HC", "0", "#2e7d32")

    assert path.name == badge_filename("Security HC") == "security-hc.svg"
    assert "#2e7d32" in path.read_text(encoding="utf-8")
