"""Map producer documents into ``Finding`` records."""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Callable, Iterator
from typing import Any

from auditgate.context import PipelineContext
from auditgate.pipeline.documents import (
    METRIC_DOCUMENT_TYPES,
    AccessibilityMetricsDocument,
    CoverageSummaryDocument,
    DeadCodeDocument,
    GenericDocument,
    LicenseDocument,
    LintDocument,
    MutationReportDocument,
    PerformanceMetricsDocument,
    ProducerDocument,
    RlsDocument,
    SecretsDocument,
    SecurityScanDocument,
    StabilityMetricsDocument,
    VulnerabilityDocument,
)
from auditgate.types import CATEGORIES, SEVERITIES, Finding, RunMetrics

logger = logging.getLogger(__name__)

GENERIC_DESCRIPTION_MAX_CHARS = 140

_NUMERIC = re.compile(r"^[0-9.]+$")


class DocumentShapeError(ValueError):
    """A document's content does not match its producer signature."""


def normalize_severity(value: Any, default: str = "medium") -> str:
    """Lowercase a producer severity; anything unrecognized becomes ``default``."""
    if not isinstance(value, str):
        return default
    severity = value.strip().lower()
    if "crit" in severity:
        return "critical"
    return severity if severity in SEVERITIES else default


def severity_from_cvss(score: float) -> str:
    if score >= 9:
        return "critical"
    if score >= 7:
        return "high"
    if score >= 4:
        return "medium"
    return "low"


def vulnerability_severity(vuln: dict[str, Any]) -> str:
    """A recognized severity wins; otherwise band the numeric CVSS score."""
    raw = str(vuln.get("severity") or "").strip().lower()
    severity = ""
    if raw and _NUMERIC.match(raw):
        try:
            severity = severity_from_cvss(float(raw))
        except ValueError:
            severity = ""
    elif raw:
        severity = normalize_severity(raw, default="")
    if severity:
        return severity

    cvss = next(
        (vuln[k] for k in ("cvssScore", "cvss", "cvss_v3", "cvss_v2") if vuln.get(k) is not None),
        None,
    )
    if isinstance(cvss, (int, float)) and not isinstance(cvss, bool):
        return severity_from_cvss(float(cvss))
    return "medium"


def _records(data: Any, *keys: str) -> list[Any]:
    """Return the first list found under ``keys`` of a mapping document."""
    if not isinstance(data, dict):
        raise DocumentShapeError(f"expected an object with one of {list(keys)}")
    for key in keys:
        value = data.get(key)
        if value:
            if not isinstance(value, list):
                raise DocumentShapeError(f"'{key}' is not a list")
            return value
    return []


def _array(data: Any) -> list[Any]:
    if not isinstance(data, list):
        raise DocumentShapeError("expected a top-level array")
    return data


def _int_or_none(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


def _map_lint(doc: LintDocument, ctx: PipelineContext) -> Iterator[Finding]:
    for result in _array(doc.data):
        if not isinstance(result, dict):
            continue
        file_path = result.get("filePath")
        for msg in result.get("messages") or []:
            if not isinstance(msg, dict):
                continue
            rule_id = msg.get("ruleId")
            line = _int_or_none(msg.get("line"))
            yield Finding(
                id=f"eslint:{rule_id}:{file_path}:{msg.get('line')}",
                category="quality",
                severity="medium" if msg.get("severity") == 2 else "low",
                file=file_path,
                line=line,
                description=f"{rule_id} - {msg.get('message', '')}",
                source_tool="eslint",
                raw=msg,
            )


def _map_security_scan(doc: SecurityScanDocument, ctx: PipelineContext) -> Iterator[Finding]:
    for result in _records(doc.data, "results"):
        if not isinstance(result, dict):
            continue
        extra = result.get("extra") or {}
        metadata = extra.get("metadata") or {}
        start = result.get("start") or {}
        end = result.get("end") or {}
        line = _int_or_none(start.get("line")) or _int_or_none(end.get("line"))
        check_id = result.get("check_id", "")

        category = metadata.get("category")
        if category is None:
            category = "security"
        elif category not in CATEGORIES:
            category = "other"

        yield Finding(
            id=f"semgrep:{check_id}:{result.get('path')}:{line if line is not None else ''}",
            category=category,
            severity=normalize_severity(extra.get("severity")),
            file=result.get("path"),
            line=line,
            description=extra.get("message") or check_id,
            remediation=metadata.get("fix") or None,
            source_tool="semgrep",
            raw=result,
        )


def _map_dead_code(doc: DeadCodeDocument, ctx: PipelineContext) -> Iterator[Finding]:
    for item in _array(doc.data):
        if not isinstance(item, dict):
            continue
        name = item.get("name") or item.get("identifier")
        yield Finding(
            id=f"deadcode:{name}",
            category="quality",
            severity="info",
            file=item.get("file") or item.get("path"),
            description=f"Unused export {name}",
            source_tool="ts-prune",
            raw=item,
        )


def _map_vulnerabilities(doc: VulnerabilityDocument, ctx: PipelineContext) -> Iterator[Finding]:
    for vuln in _records(doc.data, "vulnerabilities", "issues"):
        if not isinstance(vuln, dict):
            continue
        package = vuln.get("package") or vuln.get("module")
        id_raw = vuln.get("id") or vuln.get("cve") or vuln.get("identifier") or f"{package}:{vuln.get('title')}"
        global_id = f"{package or 'pkg'}::{id_raw}"
        if global_id in ctx.seen_vulnerabilities:
            continue
        ctx.seen_vulnerabilities.add(global_id)

        fix_version = vuln.get("fixVersion")
        yield Finding(
            id=f"dep:{id_raw}",
            category="security",
            severity=vulnerability_severity(vuln),
            description=f"{package} - {vuln.get('title') or id_raw}",
            remediation=f"Update to {fix_version}" if fix_version else None,
            source_tool=doc.source_tool,
            raw=vuln,
        )


def _map_licenses(doc: LicenseDocument, ctx: PipelineContext) -> Iterator[Finding]:
    for idx, lic in enumerate(_array(doc.data)):
        if not isinstance(lic, dict):
            continue
        status = lic.get("status")
        yield Finding(
            id=f"license:{lic.get('package')}:{idx}",
            category="dependency",
            severity="high" if status == "deny" else "low",
            description=(
                f"Non-allowlisted license {lic.get('license')} for {lic.get('package')} (status={status})"
            ),
            source_tool="license-scan",
            raw=lic,
        )


def _map_rls(doc: RlsDocument, ctx: PipelineContext) -> Iterator[Finding]:
    for record in _records(doc.data, "findings"):
        if not isinstance(record, dict):
            continue
        yield Finding(
            id=str(record.get("id")),
            category="security",
            severity=normalize_severity(record.get("severity")),
            description=f"RLS: {record.get('description')}",
            source_tool="rls-tests",
            raw=record,
        )


def _map_secrets(doc: SecretsDocument, ctx: PipelineContext) -> Iterator[Finding]:
    for leak in _records(doc.data, "findings", "secrets"):
        if not isinstance(leak, dict):
            continue
        location = leak.get("file") or leak.get("path")
        rule = leak.get("rule_id") or leak.get("id")
        yield Finding(
            id=f"secret:{rule}:{location}",
            category="security",
            severity="high",
            file=location,
            description=f"Potential secret: {leak.get('description') or leak.get('rule') or leak.get('rule_id')}",
            source_tool="secrets-scan",
            raw=leak,
        )


def _map_generic(doc: GenericDocument, ctx: PipelineContext) -> Iterator[Finding]:
    if not isinstance(doc.data, list):
        ctx.skip(doc.path, "generic document is not a top-level array")
        return
    for idx, element in enumerate(doc.data):
        dump = json.dumps(element, separators=(",", ":"), ensure_ascii=False, default=str)
        yield Finding(
            id=f"{doc.name}:{idx}",
            category="other",
            severity="info",
            description=dump[:GENERIC_DESCRIPTION_MAX_CHARS],
            source_tool=doc.name,
            raw=element,
        )


MAPPERS: dict[type, Callable[[Any, PipelineContext], Iterator[Finding]]] = {
    LintDocument: _map_lint,
    SecurityScanDocument: _map_security_scan,
    DeadCodeDocument: _map_dead_code,
    VulnerabilityDocument: _map_vulnerabilities,
    LicenseDocument: _map_licenses,
    RlsDocument: _map_rls,
    SecretsDocument: _map_secrets,
    GenericDocument: _map_generic,
}


def normalize_document(doc: ProducerDocument, ctx: PipelineContext) -> list[Finding]:
    """Map one document; a malformed document is skipped, not fatal."""
    if isinstance(doc, METRIC_DOCUMENT_TYPES):
        return []
    mapper = MAPPERS[type(doc)]
    try:
        return list(mapper(doc, ctx))
    except (DocumentShapeError, AttributeError, TypeError, KeyError, ValueError) as e:
        ctx.skip(doc.path, f"unexpected {doc.kind} document shape: {e}")
        return []


def normalize(documents: list[ProducerDocument], ctx: PipelineContext) -> list[Finding]:
    findings: list[Finding] = []
    for doc in documents:
        findings.extend(normalize_document(doc, ctx))
    logger.debug("Normalized %d document(s) into %d finding(s)", len(documents), len(findings))
    return findings


def extract_metrics(documents: list[ProducerDocument], ctx: PipelineContext) -> RunMetrics:
    """Pick the metric documents that feed the perf/a11y/stability/coverage gates.

    The first document of each kind (in collection order) wins.
    """
    metrics = RunMetrics()
    for doc in documents:
        if isinstance(doc, (PerformanceMetricsDocument, AccessibilityMetricsDocument, StabilityMetricsDocument)):
            if doc.name != doc.canonical_name:
                continue
            attr = doc.kind
        elif isinstance(doc, CoverageSummaryDocument):
            attr = "coverage"
        elif isinstance(doc, MutationReportDocument):
            attr = "mutation"
        else:
            continue

        if not isinstance(doc.data, dict):
            ctx.skip(doc.path, f"{doc.kind} metrics must be an object")
            continue
        if getattr(metrics, attr) is None:
            setattr(metrics, attr, doc.data)
    return metrics
