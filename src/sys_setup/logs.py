"""Loguru sinks for the console, the master log and per-component logs."""

from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Iterator

from loguru import logger
from rich.console import Console
from rich.text import Text

if TYPE_CHECKING:  # pragma: no cover
    from loguru import Logger

console = Console()

_TAGS = {
    "DEBUG": ("[DEBUG]", "dim"),
    "INFO": ("[INFO]", "blue"),
    "STEP": ("[STEP]", "cyan"),
    "SUCCESS": ("[SUCCESS]", "green"),
    "WARNING": ("[WARNING]", "yellow"),
    "ERROR": ("[ERROR]", "red"),
    "CRITICAL": ("[ERROR]", "bold red"),
}

_FILE_FORMAT = "{message}"


def _ensure_levels() -> None:
    try:
        logger.level("STEP")
    except ValueError:
        logger.level("STEP", no=22, color="<cyan>")


_ensure_levels()


def _console_sink(message) -> None:
    record = message.record
    extra = record["extra"]
    if extra.get("log_only"):
        return
    if extra.get("raw"):
        console.print(Text(record["message"]), highlight=False, soft_wrap=True)
        return
    level = record["level"].name
    tag, style = _TAGS.get(level, (f"[{level}]", ""))
    console.print(Text.assemble((tag, style), " ", record["message"]), highlight=False, soft_wrap=True)


def configure_logging(level: str = "INFO") -> None:
    """Replace loguru's default handler with the tagged console sink.

    Raises ``ValueError`` for an unknown level and leaves the current handlers in place.
    """

    _ensure_levels()
    level = logger.level(level.upper()).name
    logger.remove()
    logger.add(_console_sink, level=level, format=_FILE_FORMAT)


def human_time() -> str:
    """Timestamp in the style of ``date`` used in log headers."""

    return datetime.now().strftime("%a %b %d %H:%M:%S %Y")


def _write_header(log: "Logger", title: str) -> None:
    heading = f"{title} - {human_time()}"
    quiet = log.bind(log_only=True)
    quiet.info(heading)
    quiet.info("=" * len(title))


def master_log(path: Path) -> int:
    """Truncate ``path`` and mirror every record into it. Returns the sink id."""

    path.parent.mkdir(parents=True, exist_ok=True)
    sink_id = logger.add(path, mode="w", level="DEBUG", format=_FILE_FORMAT, encoding="utf-8")
    _write_header(logger, "System Setup Log")
    return sink_id


@contextmanager
def component_log(key: str, path: Path, title: str) -> Iterator["Logger"]:
    """Route records bound to ``key`` into a fresh log file while the block runs."""

    path.parent.mkdir(parents=True, exist_ok=True)
    sink_id = logger.add(
        path,
        mode="w",
        level="DEBUG",
        format=_FILE_FORMAT,
        encoding="utf-8",
        filter=lambda record: record["extra"].get("component") == key,
    )
    log = logger.bind(component=key)
    _write_header(log, title)
    try:
        yield log
    finally:
        logger.remove(sink_id)


def print_header(title: str) -> None:
    console.rule(Text(title, style="bold magenta"), style="magenta")


__all__ = [
    "component_log",
    "configure_logging",
    "console",
    "human_time",
    "master_log",
    "print_header",
]
