"""Audit run orchestration: every stage, strictly in order."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from auditgate.config import AuditPaths, AuditSettings
from auditgate.context import PipelineContext
from auditgate.pipeline import (
    apply_acceptance,
    apply_scores,
    collect_paths,
    compile_rules,
    dedup,
    evaluate_gates,
    extract_metrics,
    load_documents,
    normalize,
    summarize,
)
from auditgate.pipeline.history import compute_deltas, load_previous_snapshot
from auditgate.pipeline.unsafe_scan import scan_unsafe_any
from auditgate.report import EmitResult, MasterReport, emit_reports, format_timestamp

logger = logging.getLogger(__name__)


@dataclass
class AuditRunResult:
    report: MasterReport
    artifacts: EmitResult
    paths: AuditPaths

    @property
    def passed(self) -> bool:
        return self.report.passed


def build_report(settings: AuditSettings, ctx: PipelineContext) -> MasterReport:
    """Run collection through history deltas; writes nothing."""
    paths = settings.paths

    collected = collect_paths(paths.out_dir)
    documents = load_documents(collected, ctx)
    findings = normalize(documents, ctx)
    metrics = extract_metrics(documents, ctx)
    logger.info("Collected %d document(s), %d raw finding(s)", len(collected), len(findings))

    findings = apply_scores(dedup(findings))

    rules = compile_rules(settings.acceptance_entries)
    expired = apply_acceptance(findings, rules, ctx.now)

    summary = summarize(
        findings,
        eslint_baseline=settings.eslint_baseline,
        secret_allow_patterns=settings.secret_allow_patterns,
    )
    gates = evaluate_gates(summary, metrics, settings.thresholds, expired)

    # Read before this run's snapshot is written.
    previous = load_previous_snapshot(paths.history_dir)
    unsafe_any = scan_unsafe_any(paths.root, paths.source_dir)
    deltas = compute_deltas(
        coverage_statements_pct=metrics.coverage_statements_pct,
        mutation_score_pct=metrics.mutation_score,
        unsafe_any_count=unsafe_any.count,
        previous=previous,
    )

    return MasterReport(
        generated_at=format_timestamp(ctx.now),
        summary=summary,
        metrics=metrics,
        unsafe_any=unsafe_any,
        deltas=deltas,
        gates=gates,
        skipped=list(ctx.skipped),
        findings=findings,
    )


def run_audit(settings: AuditSettings, *, now: datetime | None = None) -> AuditRunResult:
    """Execute one full audit run and write all artifacts."""
    ctx = PipelineContext(now=now) if now is not None else PipelineContext()
    paths = settings.paths
    paths.out_dir.mkdir(parents=True, exist_ok=True)

    report = build_report(settings, ctx)
    artifacts = emit_reports(
        report,
        out_dir=paths.out_dir,
        history_dir=paths.history_dir,
        history_max_files=settings.history_max_files,
        now=ctx.now,
        root=paths.root,
    )

    if report.gates:
        logger.info("%d gate(s) failed", len(report.gates))
    if report.skipped:
        logger.warning("%d input document(s) skipped; see skippedInputs", len(report.skipped))
    return AuditRunResult(report=report, artifacts=artifacts, paths=paths)
