from __future__ import annotations

from pathlib import Path
from typing import List

from conftest import FakeRunner
from sys_setup.config import SetupConfig
from sys_setup.installers import BrewCaskInstaller, BrewFormulaInstaller, CursorExtensionInstaller


def _write(path: Path, text: str) -> Path:
    path.write_text(text)
    return path


def test_comment_only_list_processes_nothing(config: SetupConfig, runner: FakeRunner, project: Path) -> None:
    _write(project / "setup-data" / "brew-formulas.txt", "# formulas\n\n")

    result = BrewFormulaInstaller(config, runner).run()

    assert result.passed
    assert result.tally is not None and result.tally.total == 0
    assert not runner.ran("brew", "install")


def test_missing_list_fails_without_creating_it(config: SetupConfig, runner: FakeRunner, project: Path) -> None:
    list_path = project / "setup-data" / "brew-formulas.txt"

    result = BrewFormulaInstaller(config, runner).run()

    assert not result.passed
    assert result.name == "Homebrew formulas"
    assert not list_path.exists()
    log_text = config.log_path("brew-formulas-install.log").read_text()
    assert "Formulas file not found" in log_text


def test_zero_byte_list_is_nothing_to_do(config: SetupConfig, runner: FakeRunner, project: Path) -> None:
    _write(project / "setup-data" / "brew-formulas.txt", "")

    result = BrewFormulaInstaller(config, runner).run()

    assert result.passed
    assert runner.calls == []


def test_missing_tool_fails(config: SetupConfig, project: Path) -> None:
    _write(project / "setup-data" / "brew-formulas.txt", "git\n")
    runner = FakeRunner(tools=())

    result = BrewFormulaInstaller(config, runner).run()

    assert not result.passed
    assert runner.calls == []


def test_formulas_are_classified_and_logged(config: SetupConfig, runner: FakeRunner, project: Path) -> None:
    _write(project / "setup-data" / "brew-formulas.txt", "git\n  wget  \n# skip me\nbroken\n")
    runner.listings[("brew", "list", "--formula")] = ["git", "jq"]
    runner.failing.add("broken")
    sleeps: List[float] = []
    config.brew.formulas.delay_seconds = 0.5

    result = BrewFormulaInstaller(config, runner, sleep=sleeps.append).run()

    assert not result.passed
    tally = result.tally
    assert tally is not None
    assert (tally.total, tally.succeeded, tally.already_installed, tally.failed) == (3, 1, 1, 1)
    assert tally.failed_items == ["broken"]
    assert runner.ran("brew", "update")
    assert runner.ran("brew", "install") == [("brew", "install", "wget"), ("brew", "install", "broken")]
    assert sleeps == [0.5, 0.5]

    lines = config.log_path("brew-formulas-install.log").read_text().splitlines()
    assert lines[0].startswith("Homebrew Formulas Installation Log - ")
    assert "ALREADY_INSTALLED: git" in lines
    assert "SUCCESS: wget" in lines
    assert "FAILED: broken" in lines


def test_brew_update_failure_is_not_fatal(config: SetupConfig, runner: FakeRunner, project: Path) -> None:
    _write(project / "setup-data" / "brew-formulas.txt", "git\n")
    runner.handlers[("brew", "update")] = lambda argv, cwd: 1

    result = BrewFormulaInstaller(config, runner).run()

    assert result.passed
    assert "WARNING: brew update failed" in config.log_path("brew-formulas-install.log").read_text()


def test_already_installed_requires_exact_match(config: SetupConfig, runner: FakeRunner, project: Path) -> None:
    _write(project / "setup-data" / "brew-formulas.txt", "python\n")
    runner.listings[("brew", "list", "--formula")] = ["python@3.12"]

    result = BrewFormulaInstaller(config, runner).run()

    assert result.passed
    assert runner.ran("brew", "install") == [("brew", "install", "python")]


def test_casks_use_cask_flag(config: SetupConfig, runner: FakeRunner, project: Path) -> None:
    _write(project / "setup-data" / "brew-apps.txt", "firefox\nraycast\n")
    runner.listings[("brew", "list", "--cask")] = ["raycast"]
    runner.listings[("xcode-select", "-p")] = ["/Library/Developer/CommandLineTools"]

    result = BrewCaskInstaller(config, runner).run()

    assert result.passed
    assert result.key == "brew_apps"
    assert runner.ran("brew", "install") == [("brew", "install", "--cask", "firefox")]
    log_text = config.log_path("brew-apps-install.log").read_text()
    assert "SUCCESS: Xcode Command Line Tools found" in log_text
    assert "ALREADY_INSTALLED: raycast" in log_text


def test_missing_xcode_tools_only_warns(config: SetupConfig, runner: FakeRunner, project: Path) -> None:
    _write(project / "setup-data" / "brew-apps.txt", "firefox\n")

    result = BrewCaskInstaller(config, runner).run()

    assert result.passed
    assert "WARNING: Xcode Command Line Tools not found" in config.log_path("brew-apps-install.log").read_text()


def test_cursor_extensions(config: SetupConfig, runner: FakeRunner, project: Path) -> None:
    _write(project / "setup-data" / "cursor-extensions.txt", "ms-python.python\nesbenp.prettier-vscode\n")
    runner.listings[("cursor", "--list-extensions")] = ["esbenp.prettier-vscode"]
    runner.failing.add("ms-python.python")

    result = CursorExtensionInstaller(config, runner).run()

    assert not result.passed
    assert runner.ran("cursor", "--install-extension") == [("cursor", "--install-extension", "ms-python.python")]
    assert not runner.ran("brew")
