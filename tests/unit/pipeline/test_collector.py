"""Output-tree collection."""

from __future__ import annotations

from pathlib import Path

from auditgate.pipeline.collector import collect_paths
from tests.support import write_json


def test_missing_root_yields_nothing(tmp_path: Path) -> None:
    assert collect_paths(tmp_path / "does-not-exist") == []


def test_recurses_without_depth_limit(tmp_path: Path) -> None:
    write_json(tmp_path / "eslint.json", [])
    write_json(tmp_path / "a" / "b" / "c" / "d" / "osv.json", {})

    names = sorted(p.name for p in collect_paths(tmp_path))

    assert names == ["eslint.json", "osv.json"]


def test_ignores_generated_and_non_data_files(tmp_path: Path) -> None:
    write_json(tmp_path / "master-report.json", {"findings": []})
    write_json(tmp_path / "master-report.old.json", {"findings": []})
    write_json(tmp_path / "trend.json", {"series": {}})
    (tmp_path / "SUMMARY.md").write_text("# x\n", encoding="utf-8")
    (tmp_path / "badges").mkdir()
    (tmp_path / "badges" / "coverage.svg").write_text("<svg/>", encoding="utf-8")
    write_json(tmp_path / "secrets.json", {"findings": []})

    assert [p.name for p in collect_paths(tmp_path)] == ["secrets.json"]


def test_order_is_stable(tmp_path: Path) -> None:
    for name in ("z.json", "m.json", "a.json"):
        write_json(tmp_path / name, [])

    first = collect_paths(tmp_path)
    second = collect_paths(tmp_path)

    assert first == second
    assert [p.name for p in first] == ["a.json", "m.json", "z.json"]
