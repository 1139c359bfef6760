"""List-driven installers for Homebrew formulas, casks and Cursor extensions."""

from __future__ import annotations

import time
from pathlib import Path
from typing import TYPE_CHECKING, Callable, List, Optional, Sequence, Set

from .commands import CommandRunner
from .components import Component, ComponentError
from .config import ListInstallerConfig, SetupConfig
from .lists import is_empty_file, preview_lines, read_list
from .models import InstallTally, ItemOutcome, ItemStatus

if TYPE_CHECKING:  # pragma: no cover
    from loguru import Logger


class ListInstaller(Component):
    """Install every entry of a list file with one external command per entry."""

    noun = "items"
    item_label = "item"
    file_label = "List"
    tool = ""
    tool_message = ""
    tool_hints: Sequence[str] = ()
    listing_args: Sequence[str] = ()

    def __init__(
        self,
        config: SetupConfig,
        runner: Optional[CommandRunner] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        super().__init__(config, runner)
        self.sleep = sleep

    @property
    def settings(self) -> ListInstallerConfig:
        raise NotImplementedError

    @property
    def list_path(self) -> Path:
        return self.config.resolve(self.settings.list_file)

    @property
    def log_file(self) -> Path:
        return self.config.log_path(self.settings.log_file)

    def install_args(self, item: str) -> List[str]:
        raise NotImplementedError

    def prepare(self, log: "Logger") -> None:
        """Hook run once before the first item."""

    def after_success(self, log: "Logger") -> None:
        """Hook run after a run without failures."""

    def installed_items(self) -> Set[str]:
        result = self.runner.capture(self.listing_args)
        if not result.ok:
            return set()
        return set(result.lines)

    def is_installed(self, item: str) -> bool:
        return item in self.installed_items()

    def install(self, item: str, log: "Logger") -> ItemOutcome:
        if self.is_installed(item):
            log.warning(f"Already installed: {item}")
            return ItemOutcome(item, ItemStatus.ALREADY_INSTALLED)

        log.info(f"Installing {self.item_label}: {item}")
        result = self.runner.run(self.install_args(item), log=log)
        if result.ok:
            log.success(f"Successfully installed: {item}")
            return ItemOutcome(item, ItemStatus.SUCCESS, result.returncode, result.output)
        log.error(f"Failed to install: {item}")
        return ItemOutcome(item, ItemStatus.FAILED, result.returncode, result.output)

    def execute(self, log: "Logger") -> bool:
        log.info(f"Starting {self.name} installation...")
        self.require_tool(self.tool, self.tool_message, self.tool_hints)

        path = self.list_path
        if not path.exists():
            raise ComponentError(
                f"{self.file_label} file not found: {path}",
                f"Please create the file with one {self.item_label} name per line.",
            )
        self.tally = InstallTally()
        if is_empty_file(path):
            log.warning(f"{self.file_label} file is empty: {path}")
            return True

        self.prepare(log)
        log.info(f"Reading {self.noun} from: {path}")
        quiet = log.bind(log_only=True)
        for index, item in enumerate(read_list(path)):
            if index:
                self.sleep(self.settings.delay_seconds)
            outcome = self.install(item, log)
            quiet.info(outcome.log_line)
            self.tally.record(outcome)

        self._summarize(log, self.tally)
        return not self.tally.has_failures

    def _summarize(self, log: "Logger", tally: InstallTally) -> None:
        log.bind(raw=True).info("")
        log.info("Installation Summary:")
        log.info("====================")
        log.info(f"Total {self.noun} processed: {tally.total}")
        log.success(f"Successfully installed: {tally.succeeded}")
        log.warning(f"Already installed: {tally.already_installed}")
        if tally.has_failures:
            log.error(f"Failed installations: {tally.failed}")
            log.info(f"Check the log file for details: {self.log_file}")
            return
        log.success(f"All {self.noun} processed successfully!")
        log.info(f"Log file: {self.log_file}")
        self.after_success(log)


class _BrewInstaller(ListInstaller):
    tool = "brew"
    tool_message = "Homebrew not found. Please install Homebrew first."
    tool_hints = ("Visit: https://brew.sh",)

    def update_brew(self, log: "Logger") -> None:
        if not self.config.brew.update_first:
            return
        log.info("Updating Homebrew...")
        quiet = log.bind(log_only=True)
        if self.runner.run(["brew", "update"], log=log).ok:
            log.success("Homebrew updated successfully")
            quiet.info("SUCCESS: brew update")
        else:
            log.warning("Failed to update Homebrew, continuing anyway...")
            quiet.info("WARNING: brew update failed")

    def prepare(self, log: "Logger") -> None:
        self.update_brew(log)


class BrewFormulaInstaller(_BrewInstaller):
    key = "brew"
    name = "Homebrew formulas"
    title = "Homebrew formulas installer"
    log_title = "Homebrew Formulas Installation Log"
    noun = "formulas"
    item_label = "formula"
    file_label = "Formulas"
    listing_args = ("brew", "list", "--formula")

    @property
    def settings(self) -> ListInstallerConfig:
        return self.config.brew.formulas

    def install_args(self, item: str) -> List[str]:
        return ["brew", "install", item]


class BrewCaskInstaller(_BrewInstaller):
    key = "brew_apps"
    name = "Homebrew cask applications"
    title = "Homebrew cask applications installer"
    log_title = "Homebrew Cask Applications Installation Log"
    noun = "applications"
    item_label = "application"
    file_label = "Applications"
    listing_args = ("brew", "list", "--cask")

    @property
    def settings(self) -> ListInstallerConfig:
        return self.config.brew.apps

    def install_args(self, item: str) -> List[str]:
        return ["brew", "install", "--cask", item]

    def show_preview(self, log: "Logger") -> None:
        path = self.list_path
        line_count = len(path.read_text(encoding="utf-8").splitlines())
        raw = log.bind(raw=True)
        log.info(f"Applications to install ({line_count} total):")
        raw.info("=" * 40)
        for line in preview_lines(path):
            raw.info(f"  • {line}")
        if line_count > 10:
            raw.info(f"  ... and {line_count - 10} more")
        raw.info("=" * 40)

    def check_xcode_tools(self, log: "Logger") -> None:
        log.info("Checking Xcode Command Line Tools...")
        quiet = log.bind(log_only=True)
        if self.runner.capture(["xcode-select", "-p"]).ok:
            log.success("Xcode Command Line Tools are installed")
            quiet.info("SUCCESS: Xcode Command Line Tools found")
            return
        log.warning("Xcode Command Line Tools not found")
        log.info("Some applications may require Xcode Command Line Tools")
        log.info("Install with: xcode-select --install")
        quiet.info("WARNING: Xcode Command Line Tools not found")

    def prepare(self, log: "Logger") -> None:
        self.show_preview(log)
        self.check_xcode_tools(log)
        self.update_brew(log)

    def after_success(self, log: "Logger") -> None:
        log.info("Note: Some applications may require additional setup")
        log.info("Check Applications folder or Launchpad for installed apps")


class CursorExtensionInstaller(ListInstaller):
    key = "cursor"
    name = "Cursor extensions"
    title = "Cursor extensions installer"
    log_title = "Cursor Extension Installation Log"
    noun = "extensions"
    item_label = "extension"
    file_label = "Extensions"
    tool = "cursor"
    tool_message = "Cursor command not found. Please make sure Cursor is installed and added to PATH."
    listing_args = ("cursor", "--list-extensions")

    @property
    def settings(self) -> ListInstallerConfig:
        return self.config.cursor.extensions

    def install_args(self, item: str) -> List[str]:
        return ["cursor", "--install-extension", item]


__all__ = [
    "BrewCaskInstaller",
    "BrewFormulaInstaller",
    "CursorExtensionInstaller",
    "ListInstaller",
]
