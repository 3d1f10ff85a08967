"""Per-run state threaded through the pipeline stages."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path

from auditgate.types import SkippedInput

logger = logging.getLogger(__name__)


@dataclass
class PipelineContext:
    """Mutable state owned by exactly one audit run.

    A fresh context per run keeps repeated invocations in one process
    (tests, embedding) isolated from each other.
    """

    now: datetime = field(default_factory=lambda: datetime.now(UTC))
    seen_vulnerabilities: set[str] = field(default_factory=set)
    skipped: list[SkippedInput] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.now.tzinfo is None:
            self.now = self.now.replace(tzinfo=UTC)

    def skip(self, path: Path | str, reason: str) -> None:
        """Record an input document that contributed nothing."""
        logger.debug("Skipping %s: %s", path, reason)
        self.skipped.append(SkippedInput(path=str(path), reason=reason))
