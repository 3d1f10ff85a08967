"""Second-level deduplication across the whole finding list."""

from __future__ import annotations

from auditgate.types import Finding


def dedup_key(finding: Finding) -> str:
    line = "" if finding.line is None else str(finding.line)
    return f"{finding.source_tool}:{finding.file or ''}:{line}:{finding.id}"


def dedup(findings: list[Finding]) -> list[Finding]:
    """Keep the first finding per (sourceTool, file, line, id), preserving order."""
    kept: dict[str, Finding] = {}
    for finding in findings:
        kept.setdefault(dedup_key(finding), finding)
    return list(kept.values())
