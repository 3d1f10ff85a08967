"""Core record types shared by every pipeline stage."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Literal

Category = Literal["security", "quality", "performance", "a11y", "dependency", "other"]
Severity = Literal["info", "low", "medium", "high", "critical"]

CATEGORIES: tuple[str, ...] = ("security", "quality", "performance", "a11y", "dependency", "other")
SEVERITIES: tuple[str, ...] = ("info", "low", "medium", "high", "critical")


@dataclass
class Finding:
    """One normalized issue record from any producer.

    Only ``score`` and ``accepted`` change after creation, and only within
    the run that created the finding.
    """

    id: str
    category: Category
    severity: Severity
    source_tool: str
    description: str = ""
    file: str | None = None
    line: int | None = None
    remediation: str | None = None
    raw: Any = None
    score: int = 0
    accepted: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the camelCase report contract."""
        payload: dict[str, Any] = {
            "id": self.id,
            "category": self.category,
            "severity": self.severity,
            "score": self.score,
            "description": self.description,
            "sourceTool": self.source_tool,
            "accepted": self.accepted,
            "raw": self.raw,
        }
        if self.file is not None:
            payload["file"] = self.file
        if self.line is not None:
            payload["line"] = self.line
        if self.remediation is not None:
            payload["remediation"] = self.remediation
        return payload


@dataclass(frozen=True)
class AcceptanceRule:
    """Compiled risk-acceptance rule."""

    id_pattern: str
    regex: re.Pattern[str]
    expires: datetime | None = None
    reason: str = ""

    def matches(self, finding: Finding) -> bool:
        return bool(self.regex.search(finding.id) or self.regex.search(finding.description or ""))

    def is_expired(self, now: datetime) -> bool:
        return self.expires is not None and self.expires < now


@dataclass(frozen=True)
class ExpiredAcceptance:
    """A finding whose first matching acceptance rule has lapsed."""

    finding_id: str
    reason: str


@dataclass(frozen=True)
class GateResult:
    """A failed gate. Passing gates produce nothing."""

    domain: str
    name: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"domain": self.domain, "name": self.name, "message": self.message}


@dataclass(frozen=True)
class SkippedInput:
    """Input document that could not be turned into findings."""

    path: str
    reason: str

    def to_dict(self) -> dict[str, str]:
        return {"path": self.path, "reason": self.reason}


@dataclass
class PackageRisk:
    """Highest unaccepted security severity seen for one package."""

    highest: str
    count: int = 0


@dataclass
class Summary:
    """Aggregates computed over the deduplicated, acceptance-evaluated findings."""

    totals: dict[str, int] = field(default_factory=dict)
    security_critical: int = 0
    security_high: int = 0
    eslint_errors: int = 0
    eslint_new_errors: int = 0
    dead_exports: int = 0
    license_denies: int = 0
    secret_findings: int = 0
    accepted_count: int = 0
    security_packages: dict[str, PackageRisk] = field(default_factory=dict)


@dataclass
class RunMetrics:
    """Metric documents found in the output tree (raw producer payloads)."""

    perf: dict[str, Any] | None = None
    a11y: dict[str, Any] | None = None
    stability: dict[str, Any] | None = None
    coverage: dict[str, Any] | None = None
    mutation: dict[str, Any] | None = None

    @property
    def coverage_statements_pct(self) -> float | None:
        return coverage_pct(self.coverage, "statements")

    @property
    def mutation_score(self) -> float | None:
        return mutation_score(self.mutation)


def coverage_pct(coverage: dict[str, Any] | None, key: str) -> float | None:
    """Read a percentage from an istanbul/lcov style summary."""
    if not isinstance(coverage, dict):
        return None
    totals = coverage.get("total", coverage)
    if not isinstance(totals, dict):
        return None
    entry = totals.get(key)
    if not isinstance(entry, dict):
        return None
    value = entry.get("pct", entry.get("percentage"))
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


def mutation_score(mutation: dict[str, Any] | None) -> float | None:
    """Read the 0-100 mutation score from a mutation report."""
    if not isinstance(mutation, dict):
        return None
    metrics = mutation.get("systemUnderTestMetrics")
    if not isinstance(metrics, dict):
        return None
    value = metrics.get("mutationScore")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)
