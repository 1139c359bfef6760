from __future__ import annotations

from pathlib import Path

import pytest

from sys_setup.lists import is_empty_file, parse_list, preview_lines, read_list


def test_parse_list_skips_comments_and_blank_lines() -> None:
    lines = ["# formulas", "", "   ", "  git  ", "\t# indented comment", "wget"]
    assert parse_list(lines) == ["git", "wget"]


def test_parse_list_keeps_duplicates_in_order() -> None:
    assert parse_list(["jq", "git", "jq"]) == ["jq", "git", "jq"]


def test_comment_only_file_yields_nothing(tmp_path: Path) -> None:
    path = tmp_path / "list.txt"
    path.write_text("# nothing yet\n\n   # still nothing\n")
    assert read_list(path) == []
    assert not is_empty_file(path)


def test_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        read_list(tmp_path / "missing.txt")


def test_preview_only_reads_head(tmp_path: Path) -> None:
    path = tmp_path / "apps.txt"
    path.write_text("\n".join(f"app-{index}" for index in range(15)) + "\n")
    assert preview_lines(path, limit=3) == ["app-0", "app-1", "app-2"]
