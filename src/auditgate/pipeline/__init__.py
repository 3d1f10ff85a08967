"""Audit pipeline stages, in execution order."""

from auditgate.pipeline.acceptance import apply_acceptance, compile_rules
from auditgate.pipeline.collector import collect_paths
from auditgate.pipeline.dedup import dedup
from auditgate.pipeline.documents import load_documents
from auditgate.pipeline.gates import evaluate_gates
from auditgate.pipeline.normalizer import extract_metrics, normalize
from auditgate.pipeline.scoring import apply_scores, summarize

__all__ = [
    "apply_acceptance",
    "apply_scores",
    "collect_paths",
    "compile_rules",
    "dedup",
    "evaluate_gates",
    "extract_metrics",
    "load_documents",
    "normalize",
    "summarize",
]
