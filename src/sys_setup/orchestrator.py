"""Build the execution plan and run the selected components in order."""

from __future__ import annotations

import getpass
import os
import platform
from pathlib import Path
from typing import Dict, Iterable, Mapping, Optional, Tuple

from loguru import logger
from rich.table import Table

from .commands import CommandRunner
from .components import Component
from .config import SetupConfig
from .dotfiles import DotfilesInstaller
from .installers import BrewCaskInstaller, BrewFormulaInstaller, CursorExtensionInstaller
from .logs import console, human_time, master_log, print_header
from .models import COMPONENT_ORDER, ComponentResult, PlanStep, RunReport, Selection
from .settings import SettingsCloner

PLAN_ACTIONS: Dict[str, str] = {
    "brew": "Install Homebrew formulas",
    "brew_apps": "Install Homebrew cask applications",
    "cursor": "Install Cursor extensions",
    "settings": "Clone Cursor settings",
    "dot_files": "Install dot-files",
}

SKIP_MESSAGES: Dict[str, str] = {
    "brew": "Skipping Homebrew formulas installation",
    "brew_apps": "Skipping Homebrew cask applications installation",
    "cursor": "Skipping Cursor extensions installation",
    "settings": "Skipping Cursor settings cloning",
    "dot_files": "Skipping dot-files installation",
}


def default_components(
    config: SetupConfig, runner: Optional[CommandRunner] = None
) -> Dict[str, Component]:
    runner = runner or CommandRunner()
    components: Iterable[Component] = (
        BrewFormulaInstaller(config, runner),
        BrewCaskInstaller(config, runner),
        CursorExtensionInstaller(config, runner),
        SettingsCloner(config, runner),
        DotfilesInstaller(config, runner),
    )
    return {component.key: component for component in components}


def build_plan(selection: Selection) -> Tuple[PlanStep, ...]:
    """Number the selected components in the fixed priority order."""

    steps = []
    for key in COMPONENT_ORDER:
        if selection.is_selected(key):
            steps.append(PlanStep(key=key, number=len(steps) + 1))
    return tuple(steps)


def menu_descriptions(config: SetupConfig) -> Dict[str, str]:
    return {
        "brew": f"Install Homebrew formulas (from {config.brew.formulas.list_file})",
        "brew_apps": f"Install Homebrew cask applications (from {config.brew.apps.list_file})",
        "cursor": f"Install Cursor extensions (from {config.cursor.extensions.list_file})",
        "settings": f"Clone Cursor settings (from {config.cursor.settings_source})",
        "dot_files": f"Install dot-files (from {config.dotfiles.repo_url})",
    }


class PrerequisiteError(Exception):
    """Raised when a planned component cannot be resolved."""


class Orchestrator:
    """Run a plan sequentially; a failing component never stops the next one."""

    def __init__(
        self,
        config: SetupConfig,
        components: Optional[Mapping[str, Component]] = None,
    ) -> None:
        self.config = config
        self.components = dict(components) if components is not None else default_components(config)

    @property
    def master_log_path(self) -> Path:
        return self.config.master_log_path

    def show_system_info(self) -> None:
        print_header("System Information")
        table = Table(show_header=False, box=None)
        table.add_column("Field", style="bold")
        table.add_column("Value")
        table.add_row("OS", f"{platform.system()} {platform.release()}")
        table.add_row("User", getpass.getuser())
        table.add_row("Home", os.environ.get("HOME", str(Path.home())))
        table.add_row("Working Directory", str(Path.cwd()))
        table.add_row("Date", human_time())
        console.print(table)
        console.print()

    def check_prerequisites(self, plan: Tuple[PlanStep, ...]) -> None:
        print_header("Checking Prerequisites")
        missing = [step.key for step in plan if step.key not in self.components]
        for step in plan:
            component = self.components.get(step.key)
            if component is None:
                logger.error(f"Component not available: {step.key}")
            else:
                logger.success(f"{component.title} is ready")
        if missing:
            raise PrerequisiteError(", ".join(missing))
        logger.success("All prerequisites checked")
        console.print()

    def show_plan(self, selection: Selection) -> None:
        print_header("Setup Plan")
        step = 1
        for key in COMPONENT_ORDER:
            if selection.is_selected(key):
                console.print(f"Step {step}: {PLAN_ACTIONS[key]}")
                step += 1
            else:
                logger.warning(SKIP_MESSAGES[key])
        console.print()

    def run_step(self, step: PlanStep) -> ComponentResult:
        component = self.components[step.key]
        quiet = logger.bind(log_only=True)
        logger.log("STEP", f"Step {step.number}: Running {component.title}")
        quiet.info(f"Step {step.number}: Running {component.title} - {human_time()}")
        try:
            result = component.run()
        except Exception as exc:
            logger.opt(exception=exc).error(f"{component.title} stopped unexpectedly: {exc}")
            result = ComponentResult(key=component.key, name=component.name, passed=False)

        if result.passed:
            logger.success(f"{component.title} completed successfully")
            quiet.info(f"SUCCESS: {component.title} completed - {human_time()}")
        else:
            logger.error(f"{component.title} failed")
            quiet.info(f"FAILED: {component.title} failed - {human_time()}")
        console.print()
        return result

    def summarize(self, report: RunReport) -> None:
        quiet = logger.bind(log_only=True)
        print_header("Setup Complete")
        if not report.has_failures:
            logger.success("All components installed successfully!")
            quiet.info(f"SUCCESS: Complete system setup - {human_time()}")
        else:
            logger.error("Some components failed:")
            for name in report.failed_components:
                console.print(f"  - {name}", highlight=False)
            quiet.info(f"PARTIAL_SUCCESS: Setup completed with failures - {human_time()}")
            logger.info("Check individual log files for details.")
        logger.info(f"Main log file: {self.master_log_path}")
        logger.info(f"Individual log files in: {self.master_log_path.parent}/")

    def execute(self, selection: Selection, *, show_plan: bool = True) -> int:
        """Run every selected component and return the process exit code."""

        plan = build_plan(selection)
        self.show_system_info()
        sink_id = master_log(self.master_log_path)
        try:
            logger.info(f"Main log file: {self.master_log_path}")
            try:
                self.check_prerequisites(plan)
            except PrerequisiteError as exc:
                logger.error(f"Prerequisites check failed: {exc}")
                logger.info("Reinstall sys-setup or remove the unknown components from the selection.")
                return 1

            if show_plan:
                self.show_plan(selection)
            if not plan:
                logger.warning("All components are being skipped. Nothing to do!")
                return 0

            print_header("Executing System Setup")
            report = RunReport()
            for step in plan:
                report.add(self.run_step(step))
            self.summarize(report)
            return report.exit_code
        finally:
            logger.remove(sink_id)


__all__ = [
    "Orchestrator",
    "PrerequisiteError",
    "build_plan",
    "default_components",
    "menu_descriptions",
]
