from __future__ import annotations

from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Set, Tuple

import pytest

from sys_setup.commands import CommandResult, CommandRunner
from sys_setup.components import Component
from sys_setup.config import SetupConfig
from sys_setup.logs import configure_logging
from sys_setup.models import ComponentResult

Handler = Callable[[Tuple[str, ...], Optional[Path]], int]


class FakeRunner(CommandRunner):
    """Stands in for the external tools; records every invocation."""

    def __init__(self, tools: Iterable[str] = ("brew", "cursor", "git", "ssh", "xcode-select")) -> None:
        self.tools: Set[str] = set(tools)
        self.calls: List[Tuple[str, ...]] = []
        self.listings: Dict[Tuple[str, ...], List[str]] = {}
        self.failing: Set[str] = set()
        self.handlers: Dict[Tuple[str, ...], Handler] = {}

    def which(self, name: str) -> Optional[str]:
        return f"/usr/local/bin/{name}" if name in self.tools else None

    def run(self, args: Sequence[str], *, log=None, cwd: Path | None = None) -> CommandResult:
        argv = tuple(str(arg) for arg in args)
        self.calls.append(argv)
        handler = self.handlers.get(argv[:2])
        if handler is not None:
            code = handler(argv, cwd)
        else:
            code = 1 if argv[-1] in self.failing else 0
        return CommandResult(argv, code, "")

    def capture(self, args: Sequence[str], *, cwd: Path | None = None) -> CommandResult:
        argv = tuple(str(arg) for arg in args)
        self.calls.append(argv)
        if argv in self.listings:
            return CommandResult(argv, 0, "\n".join(self.listings[argv]))
        return CommandResult(argv, 1, "")

    def ran(self, *prefix: str) -> List[Tuple[str, ...]]:
        return [call for call in self.calls if call[: len(prefix)] == prefix]


class FakeComponent(Component):
    """Component whose outcome is fixed up front."""

    def __init__(self, config: SetupConfig, key: str, name: str, title: str, *, passed: bool = True,
                 error: Exception | None = None, ran: List[str] | None = None) -> None:
        super().__init__(config, FakeRunner())
        self.key = key
        self.name = name
        self.title = title
        self.passed = passed
        self.error = error
        self.ran = ran if ran is not None else []

    def run(self) -> ComponentResult:
        self.ran.append(self.key)
        if self.error is not None:
            raise self.error
        return ComponentResult(key=self.key, name=self.name, passed=self.passed)


FAKE_NAMES = {
    "brew": ("Homebrew formulas", "Homebrew formulas installer"),
    "brew_apps": ("Homebrew cask applications", "Homebrew cask applications installer"),
    "cursor": ("Cursor extensions", "Cursor extensions installer"),
    "settings": ("Cursor settings", "Cursor settings cloner"),
    "dot_files": ("Dot-files", "Dot-files installer"),
}


def make_components(config: SetupConfig, ran: List[str], failing: Iterable[str] = ()) -> Dict[str, Component]:
    failing = set(failing)
    return {
        key: FakeComponent(config, key, name, title, passed=key not in failing, ran=ran)
        for key, (name, title) in FAKE_NAMES.items()
    }


@pytest.fixture(autouse=True)
def console_logging() -> None:
    configure_logging("DEBUG")


@pytest.fixture()
def home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    path = tmp_path / "home"
    path.mkdir()
    monkeypatch.setenv("HOME", str(path))
    return path


@pytest.fixture()
def project(tmp_path: Path) -> Path:
    path = tmp_path / "project"
    (path / "setup-data").mkdir(parents=True)
    (path / "settings").mkdir()
    return path


@pytest.fixture()
def config(project: Path, home: Path) -> SetupConfig:
    config = SetupConfig(base_dir=project)
    config.brew.formulas.delay_seconds = 0
    config.brew.apps.delay_seconds = 0
    config.cursor.extensions.delay_seconds = 0
    return config


@pytest.fixture()
def runner() -> FakeRunner:
    return FakeRunner()
