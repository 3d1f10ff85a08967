"""The master report: the durable machine contract of a run."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Literal

from auditgate.pipeline.history import Deltas
from auditgate.pipeline.unsafe_scan import UnsafeAnyScan
from auditgate.types import Finding, GateResult, RunMetrics, SkippedInput, Summary

SCHEMA_VERSION = "1.0"

MASTER_REPORT_FILENAME = "master-report.json"


def format_timestamp(ts: datetime) -> str:
    return ts.isoformat().replace("+00:00", "Z")


@dataclass
class MasterReport:
    """Complete output of one run."""

    generated_at: str
    summary: Summary
    metrics: RunMetrics
    unsafe_any: UnsafeAnyScan
    deltas: Deltas
    gates: list[GateResult] = field(default_factory=list)
    skipped: list[SkippedInput] = field(default_factory=list)
    findings: list[Finding] = field(default_factory=list)
    schema_version: str = SCHEMA_VERSION

    @property
    def status(self) -> Literal["passed", "failed"]:
        return "failed" if self.gates else "passed"

    @property
    def passed(self) -> bool:
        return not self.gates

    @property
    def security_high_critical(self) -> int:
        return self.summary.security_high + self.summary.security_critical

    def mutation_payload(self) -> dict[str, Any] | None:
        """Only the system-under-test metrics; full mutant listings stay in the producer file."""
        mutation = self.metrics.mutation
        if mutation is None:
            return None
        metrics = mutation.get("systemUnderTestMetrics")
        return {"systemUnderTestMetrics": metrics} if isinstance(metrics, dict) else {}

    def to_dict(self) -> dict[str, Any]:
        summary = self.summary
        return {
            "schemaVersion": self.schema_version,
            "generatedAt": self.generated_at,
            "status": self.status,
            "totals": dict(summary.totals),
            "gates": [gate.message for gate in self.gates],
            "gatesDetailed": [gate.to_dict() for gate in self.gates],
            "perf": self.metrics.perf,
            "a11y": self.metrics.a11y,
            "stability": self.metrics.stability,
            "quality": {
                "eslintErrors": summary.eslint_errors,
                "eslintNewErrors": summary.eslint_new_errors,
                "deadExports": summary.dead_exports,
                "unsafeAnyCount": self.unsafe_any.count,
                "unsafeAnyDelta": self.deltas.unsafe_any_count,
                "unsafeAnyFiles": dict(self.unsafe_any.files),
            },
            "licenses": {"deny": summary.license_denies},
            "secrets": {"total": summary.secret_findings},
            "coverage": self.metrics.coverage,
            "mutation": self.mutation_payload(),
            "deltas": {
                "coverageStatementsPct": self.deltas.coverage_statements_pct,
                "mutationScorePct": self.deltas.mutation_score_pct,
            },
            "risk": {"accepted": summary.accepted_count},
            "security": {
                "critical": summary.security_critical,
                "high": summary.security_high,
                "packages": {
                    name: {"highest": risk.highest, "count": risk.count}
                    for name, risk in sorted(summary.security_packages.items())
                },
            },
            "skippedInputs": [item.to_dict() for item in self.skipped],
            "findings": [finding.to_dict() for finding in self.findings],
        }
