"""Output-tree collector."""

from __future__ import annotations

from pathlib import Path

DATA_SUFFIXES: tuple[str, ...] = (".json",)

# Artifacts this engine writes into the output tree itself.
GENERATED_PREFIXES: tuple[str, ...] = ("master-report",)
GENERATED_NAMES: frozenset[str] = frozenset({"trend.json"})


def is_generated_artifact(name: str) -> bool:
    return name in GENERATED_NAMES or name.startswith(GENERATED_PREFIXES)


def collect_paths(root: Path) -> list[Path]:
    """Return every producer data document under ``root``, sorted.

    A missing root is not an error; it simply yields nothing.
    """
    if not root.exists() or not root.is_dir():
        return []

    paths = [
        path
        for path in root.rglob("*")
        if path.is_file()
        and path.suffix in DATA_SUFFIXES
        and not is_generated_artifact(path.name)
    ]
    paths.sort(key=lambda p: p.as_posix())
    return paths
