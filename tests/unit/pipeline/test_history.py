"""History snapshots, deltas and retention."""

from __future__ import annotations

from pathlib import Path

from auditgate.pipeline.history import (
    compute_deltas,
    list_snapshots,
    load_previous_snapshot,
    load_recent_snapshots,
    metric_series,
    prune_snapshots,
    snapshot_filename,
    write_snapshot,
)
from tests.support import at


def _snapshot(statements: float | None = None, mutation: float | None = None,
              unsafe_any: int | None = None, eslint_new: int = 0) -> dict:
    return {
        "coverage": {"total": {"statements": {"pct": statements}}} if statements is not None else None,
        "mutation": {"systemUnderTestMetrics": {"mutationScore": mutation}} if mutation is not None else None,
        "quality": {"eslintNewErrors": eslint_new, "unsafeAnyCount": unsafe_any},
    }


def test_snapshot_names_sort_chronologically() -> None:
    names = [snapshot_filename(at(day, hour)) for day, hour in ((2, 9), (10, 1), (10, 23))]

    assert names == sorted(names)
    assert names[0] == "report-2026-10-02T09-00-00.000000Z.json"


def test_previous_snapshot_is_the_newest(tmp_path: Path) -> None:
    write_snapshot(tmp_path, _snapshot(statements=70), at(1))
    write_snapshot(tmp_path, _snapshot(statements=80), at(2))

    previous = load_previous_snapshot(tmp_path)

    assert previous is not None
    assert previous["coverage"]["total"]["statements"]["pct"] == 80


def test_no_history_means_no_deltas(tmp_path: Path) -> None:
    assert load_previous_snapshot(tmp_path / "missing") is None

    deltas = compute_deltas(coverage_statements_pct=82.5, mutation_score_pct=70.0, unsafe_any_count=3,
                            previous=None)

    assert deltas.coverage_statements_pct is None
    assert deltas.mutation_score_pct is None
    assert deltas.unsafe_any_count is None


def test_coverage_delta() -> None:
    deltas = compute_deltas(
        coverage_statements_pct=82.5,
        mutation_score_pct=61.0,
        unsafe_any_count=4,
        previous=_snapshot(statements=80.0, mutation=63.25, unsafe_any=6),
    )

    assert deltas.coverage_statements_pct == 2.5
    assert deltas.mutation_score_pct == -2.25
    assert deltas.unsafe_any_count == -2


def test_delta_is_none_when_one_side_is_missing() -> None:
    deltas = compute_deltas(coverage_statements_pct=None, mutation_score_pct=50.0, unsafe_any_count=0,
                            previous=_snapshot(statements=80.0))

    assert deltas.coverage_statements_pct is None
    assert deltas.mutation_score_pct is None
    assert deltas.unsafe_any_count is None


def test_prune_keeps_newest(tmp_path: Path) -> None:
    written = [write_snapshot(tmp_path, _snapshot(), at(day)) for day in range(1, 9)]

    removed = prune_snapshots(tmp_path, 5)

    assert removed == written[:3]
    assert list_snapshots(tmp_path) == written[3:]


def test_prune_under_limit_is_noop(tmp_path: Path) -> None:
    write_snapshot(tmp_path, _snapshot(), at(1))

    assert prune_snapshots(tmp_path, 5) == []
    assert len(list_snapshots(tmp_path)) == 1


def test_unreadable_snapshot_is_ignored(tmp_path: Path) -> None:
    write_snapshot(tmp_path, _snapshot(statements=60), at(1))
    (tmp_path / snapshot_filename(at(2))).write_text("{broken", encoding="utf-8")

    assert load_previous_snapshot(tmp_path) is None
    assert len(load_recent_snapshots(tmp_path)) == 1


def test_recent_window_and_series(tmp_path: Path) -> None:
    for day in range(1, 21):
        write_snapshot(tmp_path, _snapshot(statements=float(day), unsafe_any=day, eslint_new=day % 2), at(day))

    recent = load_recent_snapshots(tmp_path, 15)
    series = metric_series(recent)

    assert len(recent) == 15
    assert series["coverageStatementsPct"] == [float(day) for day in range(6, 21)]
    assert series["unsafeAnyCount"][-1] == 20
    assert series["mutationScorePct"] == []
    assert len(series["eslintNewErrors"]) == 15
