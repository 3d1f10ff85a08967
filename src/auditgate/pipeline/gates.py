"""Multi-domain release gates.

Every domain is evaluated independently and all failures are accumulated;
a domain with no configured thresholds (or no metric document) is skipped.
"""

from __future__ import annotations

import logging
from typing import Any

from auditgate.config import Thresholds
from auditgate.types import ExpiredAcceptance, GateResult, RunMetrics, Summary, coverage_pct

logger = logging.getLogger(__name__)

COVERAGE_KEYS: tuple[tuple[str, str], ...] = (
    ("statements", "statements_min"),
    ("branches", "branches_min"),
    ("lines", "lines_min"),
    ("functions", "functions_min"),
)


def _fmt(value: float) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _as_percent(minimum: float) -> float:
    """Minimums up to 1 are fractions; larger values are already percentages."""
    return minimum * 100 if minimum <= 1 else minimum


def _metric(data: dict[str, Any] | None, *keys: str) -> float | None:
    value: Any = data
    for key in keys:
        if not isinstance(value, dict):
            return None
        value = value.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value


class GateCollector:
    """Accumulates gate failures in evaluation order."""

    def __init__(self) -> None:
        self.results: list[GateResult] = []

    def fail(self, domain: str, name: str, message: str) -> None:
        logger.debug("Gate failed [%s/%s]: %s", domain, name, message)
        self.results.append(GateResult(domain=domain, name=name, message=message))

    def check_max(self, domain: str, name: str, label: str, value: float, limit: float | None) -> None:
        if limit is not None and value > limit:
            self.fail(domain, name, f"{label} {_fmt(value)} > {_fmt(limit)}")


def _security_gates(gates: GateCollector, summary: Summary, thresholds: Thresholds,
                    expired: list[ExpiredAcceptance]) -> None:
    if thresholds.security is not None:
        gates.check_max(
            "security", "criticalVulns", "Critical security findings (unaccepted)",
            summary.security_critical, thresholds.security.critical_vuln_max,
        )
        gates.check_max(
            "security", "highVulns", "High security findings (unaccepted)",
            summary.security_high, thresholds.security.high_vuln_max,
        )
    for item in expired:
        gates.fail("security", "riskAcceptanceExpired",
                   f"Expired risk acceptance: {item.finding_id} (reason={item.reason})")


def _quality_gates(gates: GateCollector, summary: Summary, thresholds: Thresholds) -> None:
    if thresholds.quality is None:
        return
    gates.check_max("quality", "eslintNew", "New ESLint errors",
                    summary.eslint_new_errors, thresholds.quality.eslint_error_max)
    gates.check_max("quality", "deadExports", "Dead exports",
                    summary.dead_exports, thresholds.quality.dead_exports_max)


def _zero_tolerance_gates(gates: GateCollector, summary: Summary) -> None:
    if summary.license_denies > 0:
        gates.fail("licenses", "denyList", f"License policy violations (deny) = {summary.license_denies} > 0")
    if summary.secret_findings > 0:
        gates.fail("secrets", "secrets", f"Secrets detected {summary.secret_findings} > 0")


def _performance_gates(gates: GateCollector, perf: dict[str, Any] | None, thresholds: Thresholds) -> None:
    if perf is None or thresholds.performance is None:
        return
    limits = thresholds.performance
    p50 = _metric(perf, "startup", "p50")
    if p50 and limits.startup_p50_ms is not None and p50 > limits.startup_p50_ms:
        gates.fail("performance", "startupP50", f"startup p50 {_fmt(p50)}ms > {_fmt(limits.startup_p50_ms)}")
    p95 = _metric(perf, "startup", "p95")
    if p95 and limits.startup_p95_ms is not None and p95 > limits.startup_p95_ms:
        gates.fail("performance", "startupP95", f"startup p95 {_fmt(p95)}ms > {_fmt(limits.startup_p95_ms)}")
    frame_drop = _metric(perf, "jsFrameDropPct")
    if (frame_drop is not None and limits.js_frame_drop_pct_max is not None
            and frame_drop > limits.js_frame_drop_pct_max):
        gates.fail("performance", "frameDrop",
                   f"js frame drop pct {_fmt(frame_drop)}% > {_fmt(limits.js_frame_drop_pct_max)}%")


def _bundle_gates(gates: GateCollector, perf: dict[str, Any] | None, thresholds: Thresholds) -> None:
    if perf is None or thresholds.bundle is None:
        return
    for platform, limit in (
        ("android", thresholds.bundle.android_release_kb),
        ("ios", thresholds.bundle.ios_release_kb),
    ):
        size_bytes = _metric(perf, "bundleSize", platform)
        if not size_bytes or limit is None:
            continue
        size_kb = round(size_bytes / 1024, 1)
        if size_kb > limit:
            gates.fail("bundle", platform, f"{platform} bundle {_fmt(size_kb)}KB > {_fmt(limit)}KB")


def _a11y_gates(gates: GateCollector, a11y: dict[str, Any] | None, thresholds: Thresholds) -> None:
    if a11y is None or thresholds.a11y is None:
        return
    limits = thresholds.a11y
    label_coverage = _metric(a11y, "labelCoverage")
    if (label_coverage is not None and limits.label_coverage_min is not None
            and label_coverage < limits.label_coverage_min):
        gates.fail("a11y", "labelCoverage",
                   f"a11y label coverage {_fmt(label_coverage)} < {_fmt(limits.label_coverage_min)}")
    contrast = _metric(a11y, "contrastIssues")
    if contrast is not None:
        gates.check_max("a11y", "contrastIssues", "a11y contrast issues", contrast, limits.contrast_issues_max)


def _stability_gates(gates: GateCollector, stability: dict[str, Any] | None, thresholds: Thresholds) -> None:
    if stability is None or thresholds.stability is None:
        return
    crash_free = _metric(stability, "crashFreePct")
    minimum = thresholds.stability.crash_free_min_pct
    if crash_free is not None and minimum is not None and crash_free < minimum:
        gates.fail("stability", "crashFree", f"crash-free sessions {_fmt(crash_free)}% < {_fmt(minimum)}%")


def _coverage_gates(gates: GateCollector, metrics: RunMetrics, thresholds: Thresholds) -> None:
    limits = thresholds.coverage
    if limits is None:
        return
    if metrics.coverage is not None:
        for key, attr in COVERAGE_KEYS:
            minimum = getattr(limits, attr)
            if minimum is None:
                continue
            pct = coverage_pct(metrics.coverage, key) or 0.0
            required = _as_percent(minimum)
            if pct < required:
                gates.fail("coverage", key, f"coverage {key} {_fmt(pct)}% < {required:.1f}%")

    score = metrics.mutation_score
    if score is not None and limits.mutation_score_min is not None:
        required = _as_percent(limits.mutation_score_min)
        if score < required:
            gates.fail("mutation", "score", f"mutation score {_fmt(score)}% < {required:.1f}%")


def evaluate_gates(
    summary: Summary,
    metrics: RunMetrics,
    thresholds: Thresholds,
    expired: list[ExpiredAcceptance],
) -> list[GateResult]:
    """Evaluate every domain; never stops at the first failure."""
    gates = GateCollector()
    _security_gates(gates, summary, thresholds, expired)
    _quality_gates(gates, summary, thresholds)
    _zero_tolerance_gates(gates, summary)
    _performance_gates(gates, metrics.perf, thresholds)
    _bundle_gates(gates, metrics.perf, thresholds)
    _a11y_gates(gates, metrics.a11y, thresholds)
    _stability_gates(gates, metrics.stability, thresholds)
    _coverage_gates(gates, metrics, thresholds)
    return gates.results
