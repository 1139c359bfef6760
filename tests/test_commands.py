from __future__ import annotations

import sys
from pathlib import Path

import pytest
from loguru import logger

from sys_setup.commands import CommandRunner
from sys_setup.logs import component_log, master_log

BOTH_STREAMS = "import sys; print('to stdout', flush=True); print('to stderr', file=sys.stderr, flush=True); sys.exit(3)"


def test_run_streams_combined_output_into_logs(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    component_file = tmp_path / "logs" / "brew-formulas-install.log"
    master_file = tmp_path / "logs" / "system-setup.log"
    sink_id = master_log(master_file)
    try:
        with component_log("brew", component_file, "Homebrew Formulas Installation Log") as log:
            result = CommandRunner().run([sys.executable, "-c", BOTH_STREAMS], log=log)
    finally:
        logger.remove(sink_id)

    assert result.returncode == 3
    assert not result.ok
    assert result.lines == ["to stdout", "to stderr"]
    for path in (component_file, master_file):
        text = path.read_text()
        assert "to stdout" in text
        assert "to stderr" in text
    out = capsys.readouterr().out
    assert "to stdout" in out
    assert "to stderr" in out


def test_run_missing_binary_reports_127(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    missing = str(tmp_path / "no-such-tool")

    with component_log("cursor", tmp_path / "cursor.log", "Cursor Extension Installation Log") as log:
        result = CommandRunner().run([missing, "--version"], log=log)

    assert result.returncode == 127
    assert "[ERROR] Failed to start" in capsys.readouterr().out
    assert "Failed to start" in (tmp_path / "cursor.log").read_text()


def test_capture_is_quiet(capsys: pytest.CaptureFixture[str]) -> None:
    result = CommandRunner().capture([sys.executable, "-c", "print('listed')"])

    assert result.ok
    assert result.lines == ["listed"]
    assert "listed" not in capsys.readouterr().out


def test_capture_missing_binary(tmp_path: Path) -> None:
    assert CommandRunner().capture([str(tmp_path / "absent")]).returncode == 127


def test_component_log_keeps_other_components_out(tmp_path: Path) -> None:
    path = tmp_path / "settings.log"

    with component_log("settings", path, "Cursor Settings Clone Log") as log:
        log.info("copied settings.json")
        logger.bind(component="dot_files").info("linked .gitconfig")

    lines = path.read_text().splitlines()
    assert lines[0].startswith("Cursor Settings Clone Log - ")
    assert lines[1] == "=" * len("Cursor Settings Clone Log")
    assert "copied settings.json" in lines
    assert "linked .gitconfig" not in lines


def test_error_lines_carry_tag(capsys: pytest.CaptureFixture[str]) -> None:
    logger.error("Homebrew not found. Please install Homebrew first.")
    logger.bind(log_only=True).error("file only")

    out = capsys.readouterr().out
    assert "[ERROR] Homebrew not found. Please install Homebrew first." in out
    assert "file only" not in out
