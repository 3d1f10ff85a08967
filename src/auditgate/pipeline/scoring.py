"""Risk scoring and domain aggregation."""

from __future__ import annotations

import logging
import re
from collections import Counter

from auditgate.types import Finding, PackageRisk, Summary

logger = logging.getLogger(__name__)

SEVERITY_RANK: dict[str, int] = {
    "critical": 5,
    "high": 4,
    "medium": 3,
    "low": 2,
}

SECURITY_WEIGHT = 2


def severity_rank(severity: str) -> int:
    return SEVERITY_RANK.get(severity, 1)


def risk_score(finding: Finding) -> int:
    weight = SECURITY_WEIGHT if finding.category == "security" else 1
    return severity_rank(finding.severity) * weight


def apply_scores(findings: list[Finding]) -> list[Finding]:
    """Recompute every score; producer-supplied scores are never trusted."""
    for finding in findings:
        finding.score = risk_score(finding)
    return findings


def compile_secret_allow_patterns(patterns: list[str]) -> list[re.Pattern[str]]:
    compiled: list[re.Pattern[str]] = []
    for pattern in patterns:
        try:
            compiled.append(re.compile(pattern, re.IGNORECASE))
        except re.error as e:
            logger.warning("Invalid secrets allow-list pattern %r: %s", pattern, e)
    return compiled


def _is_allowlisted_secret(finding: Finding, allow: list[re.Pattern[str]]) -> bool:
    return any(p.search(finding.description or "") or p.search(finding.file or "") for p in allow)


def package_of(finding: Finding) -> str:
    raw = finding.raw if isinstance(finding.raw, dict) else {}
    package = raw.get("package") or raw.get("module") or (finding.description or "").split(" - ")[0]
    return str(package) if package else "unknown"


def summarize(
    findings: list[Finding],
    *,
    eslint_baseline: int = 0,
    secret_allow_patterns: list[str] | None = None,
) -> Summary:
    """Tally per-severity totals and the gate inputs over unaccepted findings."""
    allow = compile_secret_allow_patterns(secret_allow_patterns or [])
    active = [f for f in findings if not f.accepted]

    summary = Summary(
        totals=dict(Counter(f.severity for f in findings)),
        accepted_count=len(findings) - len(active),
    )

    for finding in active:
        tool = finding.source_tool
        if finding.category == "security":
            if finding.severity == "critical":
                summary.security_critical += 1
            elif finding.severity == "high":
                summary.security_high += 1

            package = package_of(finding)
            risk = summary.security_packages.setdefault(package, PackageRisk(highest=finding.severity))
            risk.count += 1
            if severity_rank(finding.severity) > severity_rank(risk.highest):
                risk.highest = finding.severity

        if tool == "eslint" and finding.severity == "medium":
            summary.eslint_errors += 1
        elif tool == "ts-prune":
            summary.dead_exports += 1
        elif tool == "license-scan":
            if isinstance(finding.raw, dict) and finding.raw.get("status") == "deny":
                summary.license_denies += 1
        elif tool == "secrets-scan" and not _is_allowlisted_secret(finding, allow):
            summary.secret_findings += 1

    summary.eslint_new_errors = max(0, summary.eslint_errors - eslint_baseline)
    return summary
