"""Narrow wrapper around the external tools the installers drive."""

from __future__ import annotations

import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import IO, TYPE_CHECKING, Optional, Sequence, Tuple, cast

from loguru import logger

if TYPE_CHECKING:  # pragma: no cover
    from loguru import Logger


@dataclass(slots=True)
class CommandResult:
    """Exit status and combined stdout/stderr of one command."""

    args: Tuple[str, ...]
    returncode: int
    output: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def lines(self) -> list[str]:
        return [line.strip() for line in self.output.splitlines() if line.strip()]


class CommandRunner:
    """Run external commands without timeouts, one at a time."""

    def which(self, name: str) -> Optional[str]:
        return shutil.which(name)

    def run(
        self,
        args: Sequence[str],
        *,
        log: "Logger | None" = None,
        cwd: Path | None = None,
    ) -> CommandResult:
        """Run ``args`` and stream each output line to the console and log files."""

        log = log or logger
        argv = tuple(str(arg) for arg in args)
        logger.debug("Running {}", " ".join(argv))
        try:
            process = subprocess.Popen(
                argv,
                cwd=cwd,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                errors="replace",
            )
        except OSError as exc:
            log.error(f"Failed to start {argv[0]}: {exc}")
            return CommandResult(argv, 127, str(exc))

        captured: list[str] = []
        stdout = cast(IO[str], process.stdout)
        with stdout:
            for line in stdout:
                text = line.rstrip("\n")
                captured.append(text)
                log.bind(raw=True).info(text)
        returncode = process.wait()
        return CommandResult(argv, returncode, "\n".join(captured))

    def capture(self, args: Sequence[str], *, cwd: Path | None = None) -> CommandResult:
        """Run ``args`` quietly and return its output."""

        argv = tuple(str(arg) for arg in args)
        try:
            completed = subprocess.run(
                argv,
                cwd=cwd,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                errors="replace",
            )
        except OSError as exc:
            return CommandResult(argv, 127, str(exc))
        return CommandResult(argv, completed.returncode, completed.stdout or "")


__all__ = ["CommandResult", "CommandRunner"]
