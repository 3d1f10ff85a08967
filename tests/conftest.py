"""Pytest configuration and fixtures for auditgate tests."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pytest

from auditgate.config import AuditPaths, AuditSettings, resolve_paths
from tests.support import write_json


def pytest_sessionfinish(session, exitstatus):
    """Check that coverage data was collected if --cov was requested.

    This prevents silent "no data collected" scenarios that produce 0% coverage
    without failing the test run.
    """
    cov_enabled = any("--cov" in str(arg) for arg in session.config.args)

    if not cov_enabled:
        return

    cwd = Path.cwd()
    coverage_files = list(cwd.glob(".coverage*"))

    if not coverage_files:
        pytest.exit(
            "Coverage was enabled but no data was collected. "
            "Check that tests import from 'auditgate' (the package) not 'src/auditgate' (filesystem path).",
            returncode=1
        )


@dataclass
class AuditProject:
    """A throwaway project tree with the default audit layout."""

    paths: AuditPaths

    @property
    def root(self) -> Path:
        return self.paths.root

    def output(self, relative: str, payload: Any) -> Path:
        return write_json(self.paths.out_dir / relative, payload)

    def config(self, relative: str, payload: Any) -> Path:
        return write_json(self.paths.config_dir / relative, payload)

    def source(self, relative: str, text: str) -> Path:
        path = self.paths.source_dir / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return path

    def settings(self) -> AuditSettings:
        return AuditSettings.load(self.paths)


@pytest.fixture
def project(tmp_path: Path) -> AuditProject:
    root = tmp_path / "repo"
    root.mkdir()
    return AuditProject(paths=resolve_paths(root))
