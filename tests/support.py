"""Shared helpers for auditgate tests."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from pathlib import Path
from typing import Any


def write_json(path: Path, payload: Any) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def at(day: int, hour: int = 12) -> datetime:
    """Deterministic UTC run time in October 2026."""
    return datetime(2026, 10, day, hour, 0, 0, tzinfo=UTC)


LINT_ERROR_DOCUMENT = [
    {
        "filePath": "/repo/src/app.ts",
        "messages": [
            {"ruleId": "no-unused-vars", "severity": 2, "message": "'x' is unused", "line": 3},
        ],
    }
]
