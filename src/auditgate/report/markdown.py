"""Human-readable SUMMARY.md writer."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, TextIO

from auditgate.report.master import MasterReport

SUMMARY_FILENAME = "SUMMARY.md"
TOP_FINDINGS = 20


def _json_block(f: TextIO, payload: Any) -> None:
    f.write("```json\n")
    f.write(json.dumps(payload, indent=2, sort_keys=True, ensure_ascii=False))
    f.write("\n```\n\n")


def _relative(path: str | None, root: Path | None) -> str:
    if not path:
        return ""
    if root is not None:
        try:
            return Path(path).relative_to(root).as_posix()
        except ValueError:
            pass
    return path


def _cell(text: str) -> str:
    return text.replace("|", "/").replace("\n", " ")


def write_summary_markdown(path: Path, report: MasterReport, *, root: Path | None = None) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        _write_summary(f, report, root)
    return path


def _write_summary(f: TextIO, report: MasterReport, root: Path | None) -> None:
    payload = report.to_dict()
    status_emoji = "✅" if report.passed else "❌"

    f.write("# Audit Summary\n\n")
    f.write(f"**Status**: {status_emoji} {report.status.upper()}\n\n")
    f.write(f"**Generated**: {report.generated_at}\n\n")

    f.write("## Totals\n\n")
    _json_block(f, payload["totals"])

    f.write("## Gates\n\n")
    if report.gates:
        for gate in report.gates:
            f.write(f"- [FAILED] ({gate.domain}) {gate.message}\n")
        f.write("\n")
    else:
        f.write("All gates passed\n\n")

    f.write("## Quality Metrics\n\n")
    quality = payload["quality"]
    _json_block(f, {k: quality[k] for k in (
        "eslintErrors", "eslintNewErrors", "deadExports", "unsafeAnyCount", "unsafeAnyDelta"
    )})

    f.write("## License Policy\n\n")
    f.write(f"Denied licenses: {report.summary.license_denies}\n\n")

    f.write("## Secret Scan\n\n")
    f.write(f"Detected secrets: {report.summary.secret_findings}\n\n")

    f.write("## Risk Acceptance\n\n")
    f.write(f"Accepted findings: {report.summary.accepted_count}\n\n")

    f.write("## Deltas\n\n")
    _json_block(f, payload["deltas"])

    f.write("## Security Packages (unaccepted)\n\n")
    _json_block(f, payload["security"]["packages"])

    f.write("## Performance Metrics\n\n")
    if report.metrics.perf is not None:
        _json_block(f, report.metrics.perf)
    else:
        f.write("_No performance metrics_\n\n")

    f.write("## Accessibility Metrics\n\n")
    if report.metrics.a11y is not None:
        _json_block(f, report.metrics.a11y)
    else:
        f.write("_No accessibility metrics_\n\n")

    if report.skipped:
        f.write("## Skipped Inputs\n\n")
        for item in report.skipped:
            f.write(f"- `{_relative(item.path, root)}`: {item.reason}\n")
        f.write("\n")

    f.write(f"## Top {TOP_FINDINGS} Findings\n\n")
    f.write("| Severity | Category | Description | File |\n")
    f.write("|----------|----------|-------------|------|\n")
    top = sorted(report.findings, key=lambda item: item.score, reverse=True)[:TOP_FINDINGS]
    for finding in top:
        f.write(
            f"| {finding.severity} | {finding.category} | {_cell(finding.description or '')} "
            f"| {_relative(finding.file, root)} |\n"
        )

    f.write("\n---\n")
    f.write("All findings: see master-report.json\n")
