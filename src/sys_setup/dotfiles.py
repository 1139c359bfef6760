"""Clone the dotfiles repository, hook it into the shell profile and symlink files."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, List, Optional

from .components import Component, ComponentError
from .config import DotfilesConfig
from .files import backup_copy, existing_backups

if TYPE_CHECKING:  # pragma: no cover
    from loguru import Logger


_SSH_REMOTE = re.compile(r"^(?:ssh://)?(?P<login>[^@/\s]+@[^:/\s]+)[:/]")

PROFILE_COMMENT = "# Dot-files configuration - Added by sys-setup"


@dataclass(slots=True)
class SymlinkPlan:
    """Expected link from ``target`` (in the home directory) to ``source``."""

    source: Path
    target: Path

    @property
    def label(self) -> str:
        return self.target.name

    def is_correct(self) -> bool:
        return self.target.is_symlink() and os.readlink(self.target) == str(self.source)


@dataclass(slots=True)
class LinkReport:
    created: List[str]
    unchanged: List[str]
    skipped: List[str]


def ssh_login(repo_url: str) -> Optional[str]:
    """``user@host`` of an SSH remote, or ``None`` for other URL schemes."""

    match = _SSH_REMOTE.match(repo_url)
    if match is None:
        return None
    return match.group("login")


def has_source_line(profile: Path, marker: str) -> bool:
    """Substring check so an existing, slightly different line is still honoured."""

    if not profile.is_file():
        return False
    return marker in profile.read_text(encoding="utf-8", errors="replace")


class DotfilesInstaller(Component):
    key = "dot_files"
    name = "Dot-files"
    title = "Dot-files installer"
    log_title = "Dot-files Installation Log"

    @property
    def settings(self) -> DotfilesConfig:
        return self.config.dotfiles

    @property
    def log_file(self) -> Path:
        return self.config.log_path(self.settings.log_file)

    @property
    def repo_dir(self) -> Path:
        return self.config.resolve(self.settings.directory)

    @property
    def profile(self) -> Path:
        return self.config.resolve(self.settings.profile)

    @property
    def profile_backup_dir(self) -> Path:
        return self.config.resolve(self.settings.profile_backup_dir)

    @property
    def backup_dir(self) -> Path:
        return self.config.resolve(self.settings.backup_dir)

    @property
    def links(self) -> List[SymlinkPlan]:
        return [
            SymlinkPlan(source=self.repo_dir / link.source, target=self.config.resolve(link.target))
            for link in self.settings.links
        ]

    def check_git(self, log: "Logger") -> None:
        self.require_tool(
            "git",
            "Git is not installed. Please install Git first.",
            (
                "You can install Git by running: xcode-select --install",
                "Or install via Homebrew: brew install git",
            ),
        )
        log.success("Git is installed")

    def check_ssh(self, log: "Logger") -> None:
        login = ssh_login(self.settings.repo_url)
        if not self.settings.verify_ssh or login is None:
            return
        host = login.split("@", 1)[1]
        log.info(f"Testing SSH connection to {host}...")
        result = self.runner.capture(["ssh", "-T", "-o", "BatchMode=yes", login])
        if "successfully authenticated" in result.output:
            log.success(f"SSH key is properly configured for {host}")
            return
        log.warning(f"SSH key might not be configured for {host}")
        log.info("You may need to set up your SSH key. Proceeding anyway...")

    def clone_or_update(self, log: "Logger") -> None:
        if self.repo_dir.is_dir():
            log.info(f"Dot-files directory already exists: {self.repo_dir}")
            log.info("Updating existing repository...")
            result = self.runner.run(
                ["git", "pull", "origin", self.settings.branch], log=log, cwd=self.repo_dir
            )
            if not result.ok:
                raise ComponentError("Failed to update repository")
            log.success("Repository updated successfully")
            return

        log.info("Cloning dot-files repository...")
        log.info(f"Repository: {self.settings.repo_url}")
        log.info(f"Destination: {self.repo_dir}")
        result = self.runner.run(["git", "clone", self.settings.repo_url, str(self.repo_dir)], log=log)
        if not result.ok:
            raise ComponentError(
                "Failed to clone repository",
                "Make sure your SSH key is properly configured for the remote",
            )
        log.success("Repository cloned successfully")

    def verify_structure(self, log: "Logger") -> None:
        entry = self.repo_dir / self.settings.entry_file
        if not entry.is_file():
            raise ComponentError(f"Expected file not found: {entry}")
        missing = [plan.source for plan in self.links if not plan.source.is_file()]
        if missing:
            log.warning("Some expected files are missing from dot-files repository:")
            for path in missing:
                log.warning(f"  - {path}")
        log.success("Dot-files structure verified")

    def add_source_line(self, log: "Logger") -> bool:
        """Append the source line unless the marker is already present."""

        if has_source_line(self.profile, self.settings.source_marker):
            log.warning(f"Source line already exists in {self.profile.name}, skipping...")
            return False

        if self.profile.is_file():
            log.info(f"Existing {self.profile.name} found, creating backup...")
            try:
                backup = backup_copy(
                    self.profile,
                    self.profile_backup_dir,
                    self.profile.name.lstrip(".") + "_backup_{stamp}",
                )
            except OSError as exc:
                raise ComponentError(f"Failed to create backup: {exc}") from exc
            log.success(f"Backup created: {backup}")
        else:
            log.info(f"Creating new {self.profile.name}...")

        log.info(f"Adding source line to {self.profile.name}...")
        try:
            self.profile.parent.mkdir(parents=True, exist_ok=True)
            with self.profile.open("a", encoding="utf-8") as handle:
                handle.write(f"\n{PROFILE_COMMENT}\n{self.settings.source_line}\n")
        except OSError as exc:
            raise ComponentError(f"Failed to add source line: {exc}") from exc
        log.success(f"Source line added to {self.profile.name}")
        return True

    def backup_existing_dotfiles(self, log: "Logger") -> List[Path]:
        pending = [plan.target for plan in self.links if plan.target.is_file() and not plan.target.is_symlink()]
        if not pending:
            log.info("No existing dotfiles need backing up")
            return []

        log.info("Backing up existing dotfiles...")
        created: List[Path] = []
        for target in pending:
            try:
                backup = backup_copy(target, self.backup_dir, target.name + "_backup_{stamp}")
            except OSError as exc:
                raise ComponentError(f"Failed to backup: {target} ({exc})") from exc
            log.success(f"Backup created: {backup}")
            created.append(backup)
        return created

    def create_symlinks(self, log: "Logger") -> LinkReport:
        log.info("Creating symbolic links for dotfiles...")
        report = LinkReport(created=[], unchanged=[], skipped=[])
        for plan in self.links:
            if not plan.source.is_file():
                log.warning(f"Source file not found, skipping: {plan.source}")
                report.skipped.append(plan.label)
                continue
            if plan.is_correct():
                log.info(f"Symlink already exists and is correct: {plan.label}")
                report.unchanged.append(plan.label)
                continue
            try:
                if plan.target.exists() or plan.target.is_symlink():
                    log.info(f"Removing existing file/symlink: {plan.label}")
                    plan.target.unlink()
                log.info(f"Creating symlink: {plan.label} -> {plan.source}")
                plan.target.parent.mkdir(parents=True, exist_ok=True)
                plan.target.symlink_to(plan.source)
            except OSError as exc:
                raise ComponentError(f"Failed to create symlink for {plan.label}: {exc}") from exc
            log.success(f"Symlink created: {plan.label}")
            report.created.append(plan.label)

        if report.created:
            log.success(f"Created symlinks: {' '.join(report.created)}")
        if report.skipped:
            log.warning(f"Skipped (missing source): {' '.join(report.skipped)}")
        return report

    def verify_symlinks(self, log: "Logger") -> tuple[List[str], List[str]]:
        """Classify existing links as verified or broken. Nothing is repaired."""

        log.info("Verifying symbolic links...")
        verified: List[str] = []
        broken: List[str] = []
        for plan in self.links:
            if not plan.target.is_symlink():
                continue
            if plan.is_correct() and plan.source.is_file():
                verified.append(plan.label)
            else:
                broken.append(plan.label)
        if verified:
            log.success(f"Verified symlinks: {' '.join(verified)}")
        if broken:
            log.error(f"Broken symlinks found: {' '.join(broken)}")
        return verified, broken

    def show_profile_preview(self, log: "Logger") -> None:
        if not self.profile.is_file():
            return
        raw = log.bind(raw=True)
        log.info(f"{self.profile.name} preview (last 10 lines):")
        raw.info("=" * 41)
        for line in self.profile.read_text(encoding="utf-8", errors="replace").splitlines()[-10:]:
            raw.info(f"  {line}")
        raw.info("=" * 41)

    def list_backups(self, log: "Logger") -> None:
        for label, directory in (
            (f"{self.profile.name} backups", self.profile_backup_dir),
            ("dotfiles backups", self.backup_dir),
        ):
            backups = existing_backups(directory)
            if not backups:
                continue
            log.info(f"Available {label}:")
            for backup in backups:
                log.bind(raw=True).info(f"  {backup.name}")

    def execute(self, log: "Logger") -> bool:
        log.info("Starting dot-files installation...")
        self.check_git(log)
        self.check_ssh(log)
        self.clone_or_update(log)
        self.verify_structure(log)
        self.add_source_line(log)
        self.backup_existing_dotfiles(log)
        self.create_symlinks(log)
        self.verify_symlinks(log)
        self.show_profile_preview(log)
        self.list_backups(log)

        log.info("Dot-files Installation Summary:")
        log.info("===============================")
        log.info(f"Repository: {self.settings.repo_url}")
        log.info(f"Location: {self.repo_dir}")
        log.info(f"Profile: {self.profile}")
        log.info("Symlinked files:")
        for plan in self.links:
            if plan.target.is_symlink():
                log.info(f"  ✓ {plan.label} -> {plan.source}")
            else:
                log.warning(f"  ✗ {plan.label} (not created)")
        log.success("Dot-files have been successfully installed!")
        log.info(f"Log file: {self.log_file}")
        log.info(f"To apply changes immediately, run: source {self.settings.profile}")
        log.info("Or restart your terminal session")
        return True


__all__ = ["DotfilesInstaller", "LinkReport", "SymlinkPlan", "has_source_line", "ssh_login"]
