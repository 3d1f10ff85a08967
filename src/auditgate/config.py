"""Configuration loading for audit runs.

Supports JSON, YAML (.yaml/.yml) and TOML config documents under
``config/audit``. Every loader falls back to defaults on a missing or
malformed document; configuration problems never abort a run.
"""

from __future__ import annotations

import json
import logging
import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml  # type: ignore[import-untyped]

logger = logging.getLogger(__name__)

AUDITGATE_ROOT_ENV = "AUDITGATE_ROOT"

DEFAULT_OUT_RELATIVE_PATH = Path("audit/out")
DEFAULT_HISTORY_RELATIVE_PATH = Path("audit/history")
DEFAULT_CONFIG_RELATIVE_PATH = Path("config/audit")

THRESHOLDS_FILENAME = "thresholds.json"
RISK_ACCEPTANCE_FILENAME = "risk-acceptance.json"
SECRETS_ALLOWLIST_FILENAME = "secrets-allowlist.json"
HISTORY_CONFIG_FILENAME = "history.config.json"
ESLINT_BASELINE_RELATIVE_PATH = Path("baseline/eslint-baseline.json")

DEFAULT_HISTORY_MAX_FILES = 120


class AuditConfigError(ValueError):
    """Invalid invocation-level configuration (not a config document problem)."""


def _number(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value


@dataclass(frozen=True)
class BundleThresholds:
    android_release_kb: float | None = None
    ios_release_kb: float | None = None


@dataclass(frozen=True)
class PerformanceThresholds:
    startup_p50_ms: float | None = None
    startup_p95_ms: float | None = None
    js_frame_drop_pct_max: float | None = None


@dataclass(frozen=True)
class A11yThresholds:
    label_coverage_min: float | None = None
    contrast_issues_max: float | None = None


@dataclass(frozen=True)
class QualityThresholds:
    eslint_error_max: float | None = None
    dead_exports_max: float | None = None


@dataclass(frozen=True)
class SecurityThresholds:
    critical_vuln_max: float | None = None
    high_vuln_max: float | None = None


@dataclass(frozen=True)
class StabilityThresholds:
    crash_free_min_pct: float | None = None


@dataclass(frozen=True)
class CoverageThresholds:
    statements_min: float | None = None
    branches_min: float | None = None
    lines_min: float | None = None
    functions_min: float | None = None
    mutation_score_min: float | None = None


@dataclass(frozen=True)
class Thresholds:
    """Per-domain gate limits. A ``None`` domain disables its gates."""

    bundle: BundleThresholds | None = None
    performance: PerformanceThresholds | None = None
    a11y: A11yThresholds | None = None
    quality: QualityThresholds | None = None
    security: SecurityThresholds | None = None
    stability: StabilityThresholds | None = None
    coverage: CoverageThresholds | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Thresholds:
        """Parse the camelCase thresholds document."""

        def section(name: str) -> dict[str, Any] | None:
            raw = data.get(name)
            return raw if isinstance(raw, dict) else None

        bundle = section("bundle")
        performance = section("performance")
        a11y = section("a11y")
        quality = section("quality")
        security = section("security")
        stability = section("stability")
        coverage = section("coverage")

        return cls(
            bundle=BundleThresholds(
                android_release_kb=_number(bundle.get("androidReleaseKb")),
                ios_release_kb=_number(bundle.get("iosReleaseKb")),
            ) if bundle is not None else None,
            performance=PerformanceThresholds(
                startup_p50_ms=_number(performance.get("startupP50Ms")),
                startup_p95_ms=_number(performance.get("startupP95Ms")),
                js_frame_drop_pct_max=_number(performance.get("jsFrameDropPctMax")),
            ) if performance is not None else None,
            a11y=A11yThresholds(
                label_coverage_min=_number(a11y.get("labelCoverageMin")),
                contrast_issues_max=_number(a11y.get("contrastIssuesMax")),
            ) if a11y is not None else None,
            quality=QualityThresholds(
                eslint_error_max=_number(quality.get("eslintErrorMax")),
                dead_exports_max=_number(quality.get("deadExportsMax")),
            ) if quality is not None else None,
            security=SecurityThresholds(
                critical_vuln_max=_number(security.get("criticalVulnMax")),
                high_vuln_max=_number(security.get("highVulnMax")),
            ) if security is not None else None,
            stability=StabilityThresholds(
                crash_free_min_pct=_number(stability.get("crashFreeMinPct")),
            ) if stability is not None else None,
            coverage=CoverageThresholds(
                statements_min=_number(coverage.get("statementsMin")),
                branches_min=_number(coverage.get("branchesMin")),
                lines_min=_number(coverage.get("linesMin")),
                functions_min=_number(coverage.get("functionsMin")),
                mutation_score_min=_number(coverage.get("mutationScoreMin")),
            ) if coverage is not None else None,
        )


@dataclass(frozen=True)
class AuditPaths:
    """Filesystem layout for one audit run."""

    root: Path
    out_dir: Path
    history_dir: Path
    config_dir: Path
    source_dir: Path

    @property
    def master_report(self) -> Path:
        return self.out_dir / "master-report.json"

    @property
    def thresholds(self) -> Path:
        return self.config_dir / THRESHOLDS_FILENAME

    @property
    def risk_acceptance(self) -> Path:
        return self.config_dir / RISK_ACCEPTANCE_FILENAME

    @property
    def secrets_allowlist(self) -> Path:
        return self.config_dir / SECRETS_ALLOWLIST_FILENAME

    @property
    def history_config(self) -> Path:
        return self.config_dir / HISTORY_CONFIG_FILENAME

    @property
    def eslint_baseline(self) -> Path:
        return self.config_dir / ESLINT_BASELINE_RELATIVE_PATH


def get_default_root(cli_root: Path | None = None, *, cwd: Path | None = None) -> Path:
    """Resolve the project root: explicit option, then env var, then cwd."""
    if cli_root is not None:
        return cli_root.expanduser().resolve()

    env_root = os.getenv(AUDITGATE_ROOT_ENV, "").strip()
    if env_root:
        return Path(env_root).expanduser().resolve()

    return (cwd or Path.cwd()).resolve()


def resolve_paths(
    root: Path | None = None,
    *,
    out_dir: Path | None = None,
    history_dir: Path | None = None,
    config_dir: Path | None = None,
    source_dir: Path | None = None,
) -> AuditPaths:
    """Build the run layout, anchoring relative overrides at the root."""
    resolved_root = get_default_root(root)
    if resolved_root.exists() and not resolved_root.is_dir():
        raise AuditConfigError(f"Project root is not a directory: {resolved_root}")

    def anchor(value: Path | None, default: Path) -> Path:
        chosen = value if value is not None else default
        return chosen if chosen.is_absolute() else resolved_root / chosen

    return AuditPaths(
        root=resolved_root,
        out_dir=anchor(out_dir, DEFAULT_OUT_RELATIVE_PATH),
        history_dir=anchor(history_dir, DEFAULT_HISTORY_RELATIVE_PATH),
        config_dir=anchor(config_dir, DEFAULT_CONFIG_RELATIVE_PATH),
        source_dir=anchor(source_dir, Path("src")),
    )


def _resolve_config_file(path: Path) -> Path | None:
    """Return ``path`` or a YAML/TOML sibling with the same stem."""
    if path.exists():
        return path
    for suffix in (".yaml", ".yml", ".toml"):
        candidate = path.with_suffix(suffix)
        if candidate.exists():
            return candidate
    return None


def load_config_document(path: Path, *, warn_if_missing: bool = False) -> Any | None:
    """Load a JSON/YAML/TOML config document, or ``None`` when unusable."""
    actual = _resolve_config_file(path)
    if actual is None:
        if warn_if_missing:
            logger.warning("Config not found at %s; using defaults", path)
        else:
            logger.debug("Optional config %s not present", path)
        return None

    try:
        if actual.suffix in {".yaml", ".yml"}:
            return yaml.safe_load(actual.read_text(encoding="utf-8"))
        if actual.suffix == ".toml":
            with open(actual, "rb") as f:
                return tomllib.load(f)
        with open(actual, encoding="utf-8") as f:
            return json.load(f)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError, yaml.YAMLError, tomllib.TOMLDecodeError) as e:
        logger.warning("Failed to parse config %s: %s; using defaults", actual, e)
        return None


def load_thresholds(path: Path) -> Thresholds:
    data = load_config_document(path, warn_if_missing=True)
    if not isinstance(data, dict):
        if data is not None:
            logger.warning("Thresholds at %s must be a mapping; all gates disabled", path)
        return Thresholds()
    return Thresholds.from_dict(data)


def load_acceptance_entries(path: Path) -> list[dict[str, Any]]:
    """Load the ordered risk-acceptance list (raw entries, compiled later)."""
    data = load_config_document(path)
    if data is None:
        return []
    if isinstance(data, dict):
        # TOML cannot express a top-level array
        data = data.get("rules", [])
    if not isinstance(data, list):
        logger.warning("Risk acceptance config %s must be a list; ignoring", path)
        return []
    return [entry for entry in data if isinstance(entry, dict)]


def load_secret_allow_patterns(path: Path) -> list[str]:
    data = load_config_document(path)
    if not isinstance(data, dict):
        return []
    patterns = data.get("patterns", [])
    if not isinstance(patterns, list):
        logger.warning("Secrets allow-list %s: 'patterns' must be a list; ignoring", path)
        return []
    return [str(p) for p in patterns]


def load_eslint_baseline(path: Path) -> int:
    data = load_config_document(path)
    if isinstance(data, dict):
        total = _number(data.get("total"))
        if total is not None:
            return int(total)
    return 0


def load_history_max_files(path: Path) -> int:
    data = load_config_document(path)
    if isinstance(data, dict):
        max_files = _number(data.get("maxFiles"))
        if max_files is not None and max_files > 0:
            return int(max_files)
    return DEFAULT_HISTORY_MAX_FILES


@dataclass
class AuditSettings:
    """Everything a run reads from configuration, loaded once per run."""

    paths: AuditPaths
    thresholds: Thresholds = field(default_factory=Thresholds)
    acceptance_entries: list[dict[str, Any]] = field(default_factory=list)
    secret_allow_patterns: list[str] = field(default_factory=list)
    eslint_baseline: int = 0
    history_max_files: int = DEFAULT_HISTORY_MAX_FILES

    @classmethod
    def load(cls, paths: AuditPaths) -> AuditSettings:
        return cls(
            paths=paths,
            thresholds=load_thresholds(paths.thresholds),
            acceptance_entries=load_acceptance_entries(paths.risk_acceptance),
            secret_allow_patterns=load_secret_allow_patterns(paths.secrets_allowlist),
            eslint_baseline=load_eslint_baseline(paths.eslint_baseline),
            history_max_files=load_history_max_files(paths.history_config),
        )
