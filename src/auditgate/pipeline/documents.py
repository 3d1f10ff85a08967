"""Producer documents: one variant per recognized producer plus a generic fallback.

Variants are resolved from the document's filename at load time, so the
normalizer dispatches on a concrete type instead of probing fields.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any, ClassVar

from auditgate.context import PipelineContext


@dataclass(frozen=True)
class _Document:
    path: Path
    data: Any

    kind: ClassVar[str] = "generic"

    @property
    def name(self) -> str:
        return self.path.name


@dataclass(frozen=True)
class LintDocument(_Document):
    kind: ClassVar[str] = "eslint"


@dataclass(frozen=True)
class SecurityScanDocument(_Document):
    kind: ClassVar[str] = "semgrep"


@dataclass(frozen=True)
class DeadCodeDocument(_Document):
    kind: ClassVar[str] = "ts-prune"


@dataclass(frozen=True)
class VulnerabilityDocument(_Document):
    kind: ClassVar[str] = "vulnerability"

    @property
    def source_tool(self) -> str:
        return "snyk" if "snyk" in self.name else "osv"


@dataclass(frozen=True)
class LicenseDocument(_Document):
    kind: ClassVar[str] = "license-scan"


@dataclass(frozen=True)
class SecretsDocument(_Document):
    kind: ClassVar[str] = "secrets-scan"


@dataclass(frozen=True)
class RlsDocument(_Document):
    kind: ClassVar[str] = "rls-tests"


@dataclass(frozen=True)
class PerformanceMetricsDocument(_Document):
    kind: ClassVar[str] = "perf"
    canonical_name: ClassVar[str] = "perf.json"


@dataclass(frozen=True)
class AccessibilityMetricsDocument(_Document):
    kind: ClassVar[str] = "a11y"
    canonical_name: ClassVar[str] = "a11y.json"


@dataclass(frozen=True)
class StabilityMetricsDocument(_Document):
    kind: ClassVar[str] = "stability"
    canonical_name: ClassVar[str] = "stability.json"


@dataclass(frozen=True)
class CoverageSummaryDocument(_Document):
    kind: ClassVar[str] = "coverage"


@dataclass(frozen=True)
class MutationReportDocument(_Document):
    kind: ClassVar[str] = "mutation"


@dataclass(frozen=True)
class GenericDocument(_Document):
    kind: ClassVar[str] = "generic"


ProducerDocument = (
    LintDocument
    | SecurityScanDocument
    | DeadCodeDocument
    | VulnerabilityDocument
    | LicenseDocument
    | SecretsDocument
    | RlsDocument
    | PerformanceMetricsDocument
    | AccessibilityMetricsDocument
    | StabilityMetricsDocument
    | CoverageSummaryDocument
    | MutationReportDocument
    | GenericDocument
)

METRIC_DOCUMENT_TYPES: tuple[type, ...] = (
    PerformanceMetricsDocument,
    AccessibilityMetricsDocument,
    StabilityMetricsDocument,
    CoverageSummaryDocument,
    MutationReportDocument,
)

# Checked in order; first match wins.
SIGNATURES: tuple[tuple[Callable[[str], bool], type[_Document]], ...] = (
    (lambda n: n.startswith(("lcov-summary", "coverage-summary")), CoverageSummaryDocument),
    (lambda n: n.startswith("mutation-report"), MutationReportDocument),
    (lambda n: n.startswith("eslint"), LintDocument),
    (lambda n: "semgrep" in n, SecurityScanDocument),
    (lambda n: "deadcode" in n or "ts-prune" in n, DeadCodeDocument),
    (lambda n: "osv" in n or "snyk" in n, VulnerabilityDocument),
    (lambda n: "licenses" in n, LicenseDocument),
    (lambda n: "perf" in n, PerformanceMetricsDocument),
    (lambda n: "a11y" in n, AccessibilityMetricsDocument),
    (lambda n: "rls" in n, RlsDocument),
    (lambda n: "secrets" in n, SecretsDocument),
    (lambda n: "stability" in n, StabilityMetricsDocument),
)


def resolve_document_type(filename: str) -> type[_Document]:
    """Map a filename to its producer variant (generic when unrecognized)."""
    for matches, document_type in SIGNATURES:
        if matches(filename):
            return document_type
    return GenericDocument


def load_document(path: Path, ctx: PipelineContext) -> ProducerDocument | None:
    """Parse one collected file; record a skip and return ``None`` on failure."""
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        ctx.skip(path, f"unreadable: {e}")
        return None

    if not text.strip():
        ctx.skip(path, "empty document")
        return None

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        ctx.skip(path, f"invalid JSON: {e}")
        return None

    document_type = resolve_document_type(path.name)
    return document_type(path=path, data=data)  # type: ignore[return-value]


def load_documents(paths: list[Path], ctx: PipelineContext) -> list[ProducerDocument]:
    documents: list[ProducerDocument] = []
    for path in paths:
        document = load_document(path, ctx)
        if document is not None:
            documents.append(document)
    return documents
