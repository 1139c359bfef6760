"""Typer-based CLI for sys-setup."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional, Sequence

import click
import typer
from loguru import logger

from .config import ConfigError, SetupConfig, resolve_config, save_config
from .logs import configure_logging
from .menu import Menu, SetupCancelled
from .models import Selection
from .orchestrator import Orchestrator, menu_descriptions

app = typer.Typer(
    help="Bootstrap a personal machine: Homebrew formulas and casks, Cursor extensions and settings, dot-files.",
    add_completion=False,
    context_settings={"help_option_names": ["-h", "--help"]},
)

EPILOG = (
    "Without flags an interactive menu asks which components to install. "
    "Any skip flag or --non-interactive runs every component that is not skipped."
)


@app.command(epilog=EPILOG)
def main(
    skip_brew: bool = typer.Option(False, "--skip-brew", help="Skip Homebrew formulas installation"),
    skip_brew_apps: bool = typer.Option(
        False, "--skip-brew-apps", help="Skip Homebrew cask applications installation"
    ),
    skip_cursor: bool = typer.Option(False, "--skip-cursor", help="Skip Cursor extensions installation"),
    skip_settings: bool = typer.Option(False, "--skip-settings", help="Skip Cursor settings cloning"),
    skip_dot_files: bool = typer.Option(False, "--skip-dot-files", help="Skip dot-files installation"),
    non_interactive: bool = typer.Option(
        False, "--non-interactive", help="Run without interactive prompts (uses skip flags)"
    ),
    config: Optional[Path] = typer.Option(
        None, "--config", help="Path to configuration YAML (default: ./sys-setup.yml when present)"
    ),
    log_level: str = typer.Option("INFO", "--log-level", help="Console logging level"),
    init_config: Optional[Path] = typer.Option(
        None, "--init-config", help="Write a default configuration YAML to this path and exit"
    ),
) -> None:
    """Run the selected setup components in order."""

    try:
        configure_logging(log_level)
    except ValueError:
        logger.error(f"Unknown log level: {log_level}")
        raise typer.Exit(code=1)
    if init_config is not None:
        save_config(SetupConfig(), init_config)
        logger.success(f"Configuration written to {init_config}")
        raise typer.Exit(code=0)

    try:
        setup_config = resolve_config(config)
    except ConfigError as exc:
        logger.error(f"Configuration error: {exc}")
        raise typer.Exit(code=1)

    skips = (skip_brew, skip_brew_apps, skip_cursor, skip_settings, skip_dot_files)
    interactive = not (non_interactive or any(skips))

    if interactive:
        try:
            selection = Menu(menu_descriptions(setup_config)).run()
        except SetupCancelled:
            raise typer.Exit(code=0)
    else:
        selection = Selection(
            brew=not skip_brew,
            brew_apps=not skip_brew_apps,
            cursor=not skip_cursor,
            settings=not skip_settings,
            dot_files=not skip_dot_files,
        )

    orchestrator = Orchestrator(setup_config)
    raise typer.Exit(code=orchestrator.execute(selection, show_plan=not interactive))


HELP_OPTIONS = ("-h", "--help")


def _option_names() -> tuple[set[str], set[str]]:
    """Split the command's option names into flags and options taking a value."""

    flags: set[str] = set()
    valued: set[str] = set()
    for param in typer.main.get_command(app).params:
        names = [*getattr(param, "opts", ()), *getattr(param, "secondary_opts", ())]
        (flags if getattr(param, "is_flag", False) else valued).update(names)
    return flags, valued


def help_requested(args: Sequence[str]) -> bool:
    """True when ``-h``/``--help`` comes before any unrecognised argument."""

    flags, valued = _option_names()
    tokens = iter(args)
    for token in tokens:
        if token in HELP_OPTIONS:
            return True
        name, has_value, _ = token.partition("=")
        if name in valued:
            if not has_value:
                next(tokens, None)
            continue
        if token not in flags:
            return False
    return False


def run(argv: Optional[Sequence[str]] = None) -> int:
    """Invoke the CLI and return its exit code. Usage errors exit with 1."""

    configure_logging()
    args = list(argv) if argv is not None else sys.argv[1:]
    if help_requested(args):
        args = ["--help"]
    try:
        code = app(args=args, prog_name="sys-setup", standalone_mode=False)
    except click.UsageError as exc:
        logger.error(exc.format_message())
        if exc.ctx is not None:
            help_text = exc.ctx.get_help()
            if help_text:
                typer.echo(help_text)
        return 1
    except click.Abort:
        logger.warning("Interrupted")
        return 130
    return code if isinstance(code, int) else 0


def entrypoint() -> None:
    raise SystemExit(run())


if __name__ == "__main__":
    entrypoint()
