"""Configuration loading and validation for sys-setup."""

from __future__ import annotations

from pathlib import Path
from typing import List

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator


DEFAULT_CONFIG_NAME = "sys-setup.yml"


class ListInstallerConfig(BaseModel):
    """Input list, log file and throttle for one list-driven installer."""

    list_file: str
    log_file: str
    delay_seconds: float = 1.0

    @field_validator("delay_seconds")
    @classmethod
    def _non_negative_delay(cls, value: float) -> float:
        if value < 0:
            raise ValueError("delay_seconds cannot be negative")
        return value


class BrewConfig(BaseModel):
    """Homebrew formulas and cask applications."""

    update_first: bool = True
    formulas: ListInstallerConfig = Field(
        default_factory=lambda: ListInstallerConfig(
            list_file="setup-data/brew-formulas.txt",
            log_file="brew-formulas-install.log",
            delay_seconds=1.0,
        )
    )
    apps: ListInstallerConfig = Field(
        default_factory=lambda: ListInstallerConfig(
            list_file="setup-data/brew-apps.txt",
            log_file="brew-apps-install.log",
            delay_seconds=2.0,
        )
    )


class CursorConfig(BaseModel):
    """Cursor extensions and settings."""

    extensions: ListInstallerConfig = Field(
        default_factory=lambda: ListInstallerConfig(
            list_file="setup-data/cursor-extensions.txt",
            log_file="cursor-extension-install.log",
            delay_seconds=1.0,
        )
    )
    settings_source: str = "settings/cursor-settings.json"
    settings_dir: str = "~/Library/Application Support/Cursor/User"
    settings_name: str = "settings.json"
    backup_dir_name: str = "backups"
    settings_log_file: str = "cursor-settings-clone.log"


class LinkConfig(BaseModel):
    """A dotfile inside the repository and where it is linked to."""

    source: str
    target: str


def _default_links() -> List[LinkConfig]:
    return [
        LinkConfig(source=".gitconfig", target="~/.gitconfig"),
        LinkConfig(source=".gitignore", target="~/.gitignore"),
    ]


class DotfilesConfig(BaseModel):
    """Dotfiles repository, shell profile and symlinks."""

    repo_url: str = "git@github.com:itaimoorali/dot-files.git"
    branch: str = "main"
    directory: str = "~/dot-files"
    entry_file: str = "index.sh"
    profile: str = "~/.bash_profile"
    profile_backup_dir: str = "~/.bash_profile_backups"
    backup_dir: str = "~/.dotfiles_backups"
    source_line: str = "source ~/dot-files/index.sh;"
    source_marker: str = "source ~/dot-files/index.sh"
    verify_ssh: bool = True
    log_file: str = "dot-files-install.log"
    links: List[LinkConfig] = Field(default_factory=_default_links)

    @field_validator("source_marker")
    @classmethod
    def _marker_not_empty(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("source_marker cannot be empty")
        return value


class SetupConfig(BaseModel):
    """Top-level configuration."""

    base_dir: Path = Field(default_factory=Path.cwd)
    logs_dir: str = "logs"
    master_log: str = "system-setup.log"
    brew: BrewConfig = Field(default_factory=BrewConfig)
    cursor: CursorConfig = Field(default_factory=CursorConfig)
    dotfiles: DotfilesConfig = Field(default_factory=DotfilesConfig)

    def resolve(self, value: str | Path) -> Path:
        """Expand ``~`` against ``$HOME`` and anchor relative paths at ``base_dir``."""

        path = Path(value).expanduser()
        if path.is_absolute():
            return path
        return self.base_dir / path

    def log_path(self, name: str) -> Path:
        return self.resolve(self.logs_dir) / name

    @property
    def master_log_path(self) -> Path:
        return self.log_path(self.master_log)


class ConfigError(Exception):
    """Raised when a configuration file is invalid."""


def load_config(path: Path) -> SetupConfig:
    """Load configuration from YAML file."""

    try:
        data = yaml.safe_load(path.read_text())
    except FileNotFoundError as exc:
        raise ConfigError(f"Configuration file not found: {path}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse YAML: {exc}") from exc

    data = data or {}
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid configuration: expected a mapping in {path}")
    data.setdefault("base_dir", str(path.resolve().parent))

    try:
        return SetupConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc


def resolve_config(path: Path | None) -> SetupConfig:
    """Load ``path`` when given, else the default file if present, else defaults."""

    if path is not None:
        return load_config(path)
    default = Path.cwd() / DEFAULT_CONFIG_NAME
    if default.exists():
        return load_config(default)
    return SetupConfig()


def save_config(config: SetupConfig, path: Path) -> None:
    """Persist configuration to disk as YAML."""

    path.parent.mkdir(parents=True, exist_ok=True)
    rendered = config.model_dump(mode="json", exclude={"base_dir"})
    path.write_text(yaml.safe_dump(rendered, sort_keys=False))


__all__ = [
    "BrewConfig",
    "ConfigError",
    "CursorConfig",
    "DEFAULT_CONFIG_NAME",
    "DotfilesConfig",
    "LinkConfig",
    "ListInstallerConfig",
    "SetupConfig",
    "load_config",
    "resolve_config",
    "save_config",
]
