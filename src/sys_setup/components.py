"""Base class shared by every setup component."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Optional, Sequence

from .commands import CommandRunner
from .config import SetupConfig
from .logs import component_log
from .models import ComponentResult, InstallTally

if TYPE_CHECKING:  # pragma: no cover
    from loguru import Logger


class ComponentError(Exception):
    """Raised inside a component for conditions that end its run."""

    def __init__(self, message: str, *hints: str) -> None:
        super().__init__(message)
        self.hints = hints


class Component:
    """One unit of the setup plan.

    Subclasses set ``key``, ``name`` (shown in the failure summary), ``title``
    (shown in step lines) and ``log_title`` and implement :meth:`execute`.
    """

    key: str = ""
    name: str = ""
    title: str = ""
    log_title: str = ""

    def __init__(self, config: SetupConfig, runner: Optional[CommandRunner] = None) -> None:
        self.config = config
        self.runner = runner or CommandRunner()
        self.tally: Optional[InstallTally] = None

    @property
    def log_file(self) -> Path:
        raise NotImplementedError

    def execute(self, log: "Logger") -> bool:
        raise NotImplementedError

    def run(self) -> ComponentResult:
        with component_log(self.key, self.log_file, self.log_title) as log:
            try:
                passed = self.execute(log)
            except ComponentError as exc:
                log.error(str(exc))
                for hint in exc.hints:
                    log.info(hint)
                passed = False
        return ComponentResult(key=self.key, name=self.name, passed=passed, tally=self.tally)

    def require_tool(self, tool: str, message: str, hints: Sequence[str] = ()) -> None:
        if self.runner.which(tool) is None:
            raise ComponentError(message, *hints)


__all__ = ["Component", "ComponentError"]
