"""Report artifacts produced from a master report."""

from auditgate.report.emitter import EmitResult, emit_reports
from auditgate.report.master import MasterReport, format_timestamp

__all__ = ["EmitResult", "MasterReport", "emit_reports", "format_timestamp"]
