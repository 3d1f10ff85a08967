"""Configuration loading and path resolution."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest
import yaml

from auditgate.config import (
    AUDITGATE_ROOT_ENV,
    DEFAULT_HISTORY_MAX_FILES,
    AuditConfigError,
    AuditSettings,
    Thresholds,
    get_default_root,
    load_acceptance_entries,
    load_config_document,
    load_eslint_baseline,
    load_history_max_files,
    load_thresholds,
    resolve_paths,
)
from tests.support import write_json


def test_root_precedence(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    env_root = tmp_path / "env"
    cli_root = tmp_path / "cli"
    monkeypatch.setenv(AUDITGATE_ROOT_ENV, str(env_root))

    assert get_default_root(cli_root) == cli_root.resolve()
    assert get_default_root() == env_root.resolve()

    monkeypatch.delenv(AUDITGATE_ROOT_ENV)
    assert get_default_root(cwd=tmp_path) == tmp_path.resolve()


def test_resolve_paths_defaults_and_overrides(tmp_path: Path) -> None:
    paths = resolve_paths(tmp_path, out_dir=Path("reports"), history_dir=tmp_path / "elsewhere")

    assert paths.out_dir == tmp_path.resolve() / "reports"
    assert paths.history_dir == tmp_path / "elsewhere"
    assert paths.config_dir == tmp_path.resolve() / "config" / "audit"
    assert paths.source_dir == tmp_path.resolve() / "src"
    assert paths.thresholds.name == "thresholds.json"
    assert paths.eslint_baseline == paths.config_dir / "baseline" / "eslint-baseline.json"


def test_root_must_be_a_directory(tmp_path: Path) -> None:
    not_a_dir = tmp_path / "file.txt"
    not_a_dir.write_text("", encoding="utf-8")

    with pytest.raises(AuditConfigError):
        resolve_paths(not_a_dir)


def test_missing_thresholds_disable_gates_with_warning(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING):
        thresholds = load_thresholds(tmp_path / "thresholds.json")

    assert thresholds == Thresholds()
    assert "Config not found" in caplog.text


def test_malformed_config_falls_back(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    path = tmp_path / "thresholds.json"
    path.write_text("{oops", encoding="utf-8")

    with caplog.at_level(logging.WARNING):
        assert load_config_document(path) is None

    assert "Failed to parse config" in caplog.text


def test_yaml_sibling_is_used(tmp_path: Path) -> None:
    (tmp_path / "thresholds.yaml").write_text(
        yaml.safe_dump({"quality": {"eslintErrorMax": 3}, "security": {"criticalVulnMax": 0}}),
        encoding="utf-8",
    )

    thresholds = load_thresholds(tmp_path / "thresholds.json")

    assert thresholds.quality is not None
    assert thresholds.quality.eslint_error_max == 3
    assert thresholds.quality.dead_exports_max is None
    assert thresholds.security is not None
    assert thresholds.security.critical_vuln_max == 0
    assert thresholds.bundle is None


def test_toml_acceptance_rules(tmp_path: Path) -> None:
    (tmp_path / "risk-acceptance.toml").write_text(
        '[[rules]]\nidPattern = "CVE-1"\nreason = "vendor fix pending"\n\n'
        '[[rules]]\nidPattern = "CVE-2"\nexpires = "2026-12-01"\n',
        encoding="utf-8",
    )

    entries = load_acceptance_entries(tmp_path / "risk-acceptance.json")

    assert [e["idPattern"] for e in entries] == ["CVE-1", "CVE-2"]


def test_acceptance_must_be_a_list(tmp_path: Path) -> None:
    write_json(tmp_path / "risk-acceptance.json", "nope")

    assert load_acceptance_entries(tmp_path / "risk-acceptance.json") == []


def test_non_numeric_threshold_is_ignored() -> None:
    thresholds = Thresholds.from_dict({"quality": {"eslintErrorMax": "zero", "deadExportsMax": True}})

    assert thresholds.quality is not None
    assert thresholds.quality.eslint_error_max is None
    assert thresholds.quality.dead_exports_max is None


def test_baseline_and_history_defaults(tmp_path: Path) -> None:
    assert load_eslint_baseline(tmp_path / "eslint-baseline.json") == 0
    assert load_history_max_files(tmp_path / "history.config.json") == DEFAULT_HISTORY_MAX_FILES

    write_json(tmp_path / "eslint-baseline.json", {"total": 12})
    write_json(tmp_path / "history.config.json", {"maxFiles": 5})

    assert load_eslint_baseline(tmp_path / "eslint-baseline.json") == 12
    assert load_history_max_files(tmp_path / "history.config.json") == 5


def test_settings_load(project) -> None:
    project.config("thresholds.json", {"quality": {"eslintErrorMax": 0}})
    project.config("secrets-allowlist.json", {"patterns": ["^fixtures/"]})
    project.config("baseline/eslint-baseline.json", {"total": 2})

    settings = AuditSettings.load(project.paths)

    assert settings.thresholds.quality is not None
    assert settings.secret_allow_patterns == ["^fixtures/"]
    assert settings.eslint_baseline == 2
    assert settings.acceptance_entries == []
    assert settings.history_max_files == DEFAULT_HISTORY_MAX_FILES
