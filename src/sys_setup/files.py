"""Timestamped backups shared by the settings and dotfiles components."""

from __future__ import annotations

import shutil
from datetime import datetime
from pathlib import Path
from typing import List


def backup_stamp() -> str:
    return datetime.now().strftime("%Y%m%d_%H%M%S")


def backup_copy(source: Path, backup_dir: Path, name: str) -> Path:
    """Copy ``source`` into ``backup_dir`` as ``name`` and return the new path.

    ``name`` may contain a ``{stamp}`` placeholder which is replaced by the
    current ``YYYYmmdd_HHMMSS`` timestamp.
    """

    backup_dir.mkdir(parents=True, exist_ok=True)
    target = backup_dir / name.format(stamp=backup_stamp())
    shutil.copy2(source, target)
    return target


def existing_backups(backup_dir: Path, pattern: str = "*") -> List[Path]:
    if not backup_dir.is_dir():
        return []
    return sorted(path for path in backup_dir.glob(pattern) if path.is_file())


__all__ = ["backup_copy", "backup_stamp", "existing_backups"]
