"""Copy the tracked Cursor settings file into the editor's user directory."""

from __future__ import annotations

import json
import shutil
from pathlib import Path
from typing import TYPE_CHECKING

from .components import Component, ComponentError
from .files import backup_copy, existing_backups

if TYPE_CHECKING:  # pragma: no cover
    from loguru import Logger


def is_valid_json(path: Path) -> bool:
    try:
        json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError):
        return False
    return True


class SettingsCloner(Component):
    key = "settings"
    name = "Cursor settings"
    title = "Cursor settings cloner"
    log_title = "Cursor Settings Clone Log"

    @property
    def log_file(self) -> Path:
        return self.config.log_path(self.config.cursor.settings_log_file)

    @property
    def source(self) -> Path:
        return self.config.resolve(self.config.cursor.settings_source)

    @property
    def settings_dir(self) -> Path:
        return self.config.resolve(self.config.cursor.settings_dir)

    @property
    def destination(self) -> Path:
        return self.settings_dir / self.config.cursor.settings_name

    @property
    def backup_dir(self) -> Path:
        return self.settings_dir / self.config.cursor.backup_dir_name

    def check_source(self, log: "Logger") -> None:
        quiet = log.bind(log_only=True)
        if not self.source.is_file():
            quiet.info(f"ERROR: Source file not found: {self.source}")
            raise ComponentError(
                f"Source settings file not found: {self.source}",
                "Please create the settings file first.",
            )
        if not is_valid_json(self.source):
            quiet.info("ERROR: Invalid JSON in source file")
            raise ComponentError(f"Source settings file is not valid JSON: {self.source}")
        log.success(f"Source settings file found and validated: {self.source}")

    def show_preview(self, log: "Logger") -> None:
        raw = log.bind(raw=True)
        log.info("Settings Preview (first 10 lines):")
        raw.info("=" * 37)
        with self.source.open(encoding="utf-8") as handle:
            for _, line in zip(range(10), handle):
                raw.info(f"  {line.rstrip()}")
        raw.info("=" * 37)

    def ensure_settings_dir(self, log: "Logger") -> None:
        if self.settings_dir.is_dir():
            log.success(f"Cursor settings directory found: {self.settings_dir}")
            return
        log.warning(f"Cursor settings directory not found: {self.settings_dir}")
        log.info("Creating Cursor settings directory...")
        try:
            self.settings_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise ComponentError(f"Failed to create Cursor settings directory: {exc}") from exc
        log.success("Created Cursor settings directory")

    def backup_existing(self, log: "Logger") -> Path | None:
        if not self.destination.is_file():
            log.info("No existing settings file found, skipping backup")
            return None
        log.info("Existing settings file found, creating backup...")
        try:
            backup = backup_copy(self.destination, self.backup_dir, "settings_backup_{stamp}.json")
        except OSError as exc:
            raise ComponentError(f"Failed to create backup: {exc}") from exc
        log.success(f"Backup created: {backup}")
        return backup

    def copy_settings(self, log: "Logger") -> None:
        log.info(f"Copying settings from {self.source} to {self.destination}")
        try:
            shutil.copyfile(self.source, self.destination)
        except OSError as exc:
            raise ComponentError(f"Failed to copy settings: {exc}") from exc
        log.success("Settings copied successfully!")
        if not is_valid_json(self.destination):
            raise ComponentError("Copied settings file is not valid JSON")
        log.success("Copied settings file validated successfully")

    def list_backups(self, log: "Logger") -> None:
        backups = existing_backups(self.backup_dir, "*.json")
        if not backups:
            return
        log.info(f"Available backups in {self.backup_dir}:")
        for backup in backups:
            log.bind(raw=True).info(f"  {backup.name}")

    def execute(self, log: "Logger") -> bool:
        log.info("Starting Cursor settings clone process...")
        self.check_source(log)
        self.show_preview(log)
        self.ensure_settings_dir(log)
        self.backup_existing(log)
        self.copy_settings(log)
        self.list_backups(log)

        log.info("Settings Clone Summary:")
        log.info("======================")
        log.info(f"Source: {self.source}")
        log.info(f"Destination: {self.destination}")
        log.success("Cursor settings have been successfully cloned!")
        log.info(f"Log file: {self.log_file}")
        log.info("Restart Cursor to apply the new settings.")
        return True


__all__ = ["SettingsCloner", "is_valid_json"]
