"""Source scan for unchecked ``any`` escapes in TypeScript sources."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)

# `: any`, `<any>`, `as any`
UNSAFE_ANY_PATTERN = re.compile(r":\s*any(\W|$)|<any>|as\s+any")

SOURCE_SUFFIXES: tuple[str, ...] = (".ts", ".tsx")
DECLARATION_SUFFIX = ".d.ts"


@dataclass
class UnsafeAnyScan:
    count: int = 0
    files: dict[str, int] = field(default_factory=dict)


def _is_scannable(path: Path) -> bool:
    return path.suffix in SOURCE_SUFFIXES and not path.name.endswith(DECLARATION_SUFFIX)


def scan_unsafe_any(root: Path, source_dir: Path | None = None) -> UnsafeAnyScan:
    """Count unsafe ``any`` usages under ``source_dir`` (default ``<root>/src``).

    File keys are POSIX paths relative to ``root``. Unreadable files are skipped.
    """
    target = source_dir if source_dir is not None else root / "src"
    result = UnsafeAnyScan()
    if not target.is_dir():
        return result

    for path in sorted(p for p in target.rglob("*") if p.is_file() and _is_scannable(p)):
        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.debug("Cannot scan %s: %s", path, e)
            continue
        hits = sum(1 for _ in UNSAFE_ANY_PATTERN.finditer(content))
        if hits:
            try:
                key = path.relative_to(root).as_posix()
            except ValueError:
                key = path.as_posix()
            result.files[key] = hits
            result.count += hits
    return result
