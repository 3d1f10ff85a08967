"""auditgate - audit aggregation and quality-gate engine."""

__version__ = "0.1.0"
