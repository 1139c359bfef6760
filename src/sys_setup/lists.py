"""Reading the static one-item-per-line input lists."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, List


def parse_list(lines: Iterable[str]) -> List[str]:
    """Return trimmed entries, skipping blank lines and ``#`` comments."""

    entries: List[str] = []
    for line in lines:
        item = line.strip()
        if not item or item.startswith("#"):
            continue
        entries.append(item)
    return entries


def read_list(path: Path) -> List[str]:
    """Read a list file. Raises ``FileNotFoundError`` when it does not exist."""

    return parse_list(path.read_text(encoding="utf-8").splitlines())


def is_empty_file(path: Path) -> bool:
    return path.stat().st_size == 0


def preview_lines(path: Path, limit: int = 10) -> List[str]:
    """First ``limit`` raw lines of ``path`` that are neither blank nor comments."""

    with path.open(encoding="utf-8") as handle:
        head = [line.rstrip("\n") for _, line in zip(range(limit), handle)]
    return parse_list(head)


__all__ = ["is_empty_file", "parse_list", "preview_lines", "read_list"]
