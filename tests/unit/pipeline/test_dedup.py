"""Cross-finding deduplication."""

from __future__ import annotations

from auditgate.pipeline.dedup import dedup, dedup_key
from auditgate.types import Finding


def _finding(id: str, *, tool: str = "semgrep", file: str | None = "a.ts", line: int | None = 1,
             description: str = "") -> Finding:
    return Finding(id=id, category="security", severity="low", source_tool=tool, file=file, line=line,
                   description=description)


def test_first_occurrence_wins() -> None:
    first = _finding("r1", description="first")
    second = _finding("r1", description="second")

    assert dedup([first, second]) == [first]


def test_distinct_location_or_tool_is_kept() -> None:
    findings = [
        _finding("r1"),
        _finding("r1", line=2),
        _finding("r1", file="b.ts"),
        _finding("r1", tool="eslint"),
    ]

    assert dedup(findings) == findings


def test_key_tolerates_missing_location() -> None:
    assert dedup_key(_finding("dep:CVE-1", tool="osv", file=None, line=None)) == "osv:::dep:CVE-1"


def test_order_is_preserved() -> None:
    a, b, c = _finding("a"), _finding("b"), _finding("c")

    assert dedup([c, a, b, a]) == [c, a, b]
