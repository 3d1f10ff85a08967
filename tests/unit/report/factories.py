"""Builders for report-layer tests."""

from __future__ import annotations

from auditgate.pipeline.history import Deltas
from auditgate.pipeline.unsafe_scan import UnsafeAnyScan
from auditgate.report.master import MasterReport
from auditgate.types import Finding, GateResult, PackageRisk, RunMetrics, SkippedInput, Summary


def make_report(*, gates: list[GateResult] | None = None, findings: list[Finding] | None = None,
                coverage_pct: float | None = 82.5, mutation_score: float | None = None,
                skipped: list[SkippedInput] | None = None, eslint_new_errors: int = 0) -> MasterReport:
    metrics = RunMetrics(
        coverage={"total": {"statements": {"pct": coverage_pct}}} if coverage_pct is not None else None,
        mutation=(
            {"schemaVersion": "1", "files": {"a.ts": {}}, "systemUnderTestMetrics": {"mutationScore": mutation_score}}
            if mutation_score is not None else None
        ),
        perf={"startup": {"p50": 900}},
    )
    summary = Summary(
        totals={"high": 1},
        security_high=1,
        eslint_errors=eslint_new_errors,
        eslint_new_errors=eslint_new_errors,
        security_packages={"left-pad": PackageRisk(highest="high", count=1)},
    )
    return MasterReport(
        generated_at="2026-10-18T12:00:00Z",
        summary=summary,
        metrics=metrics,
        unsafe_any=UnsafeAnyScan(count=2, files={"src/a.ts": 2}),
        deltas=Deltas(coverage_statements_pct=2.5, unsafe_any_count=-1),
        gates=gates or [],
        skipped=skipped or [],
        findings=findings if findings is not None else [
            Finding(id="dep:CVE-1", category="security", severity="high", source_tool="osv",
                    description="left-pad - CVE-1", score=8, raw={"package": "left-pad"}),
        ],
    )
