"""Shared models for component selection, plans and run outcomes."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional, Tuple


class ItemStatus(str, Enum):
    """Outcome class for a single list item."""

    SUCCESS = "SUCCESS"
    ALREADY_INSTALLED = "ALREADY_INSTALLED"
    FAILED = "FAILED"


@dataclass(slots=True)
class ItemOutcome:
    """Result of one installation action."""

    item: str
    status: ItemStatus
    exit_code: Optional[int] = None
    output: str = ""

    @property
    def log_line(self) -> str:
        return f"{self.status.value}: {self.item}"


@dataclass(slots=True)
class InstallTally:
    """Counters printed at the end of a list-driven run."""

    total: int = 0
    succeeded: int = 0
    already_installed: int = 0
    failed: int = 0
    failed_items: List[str] = field(default_factory=list)

    def record(self, outcome: ItemOutcome) -> None:
        self.total += 1
        if outcome.status is ItemStatus.SUCCESS:
            self.succeeded += 1
        elif outcome.status is ItemStatus.ALREADY_INSTALLED:
            self.already_installed += 1
        else:
            self.failed += 1
            self.failed_items.append(outcome.item)

    @property
    def has_failures(self) -> bool:
        return self.failed > 0


# Fixed priority order of the five components.
COMPONENT_ORDER: Tuple[str, ...] = ("brew", "brew_apps", "cursor", "settings", "dot_files")


@dataclass(frozen=True, slots=True)
class Selection:
    """Which components to run. ``True`` means run."""

    brew: bool = True
    brew_apps: bool = True
    cursor: bool = True
    settings: bool = True
    dot_files: bool = True

    @classmethod
    def none(cls) -> "Selection":
        return cls(False, False, False, False, False)

    @classmethod
    def from_keys(cls, keys: Iterable[str]) -> "Selection":
        chosen = set(keys)
        unknown = chosen.difference(COMPONENT_ORDER)
        if unknown:
            raise ValueError(f"Unknown component(s): {', '.join(sorted(unknown))}")
        return cls(**{key: key in chosen for key in COMPONENT_ORDER})

    def is_selected(self, key: str) -> bool:
        return bool(getattr(self, key))

    @property
    def selected_keys(self) -> Tuple[str, ...]:
        return tuple(key for key in COMPONENT_ORDER if self.is_selected(key))

    @property
    def is_empty(self) -> bool:
        return not self.selected_keys


@dataclass(frozen=True, slots=True)
class PlanStep:
    """One entry of the execution plan."""

    key: str
    number: int


@dataclass(slots=True)
class ComponentResult:
    """Pass/fail outcome of a single component."""

    key: str
    name: str
    passed: bool
    tally: Optional[InstallTally] = None


@dataclass(slots=True)
class RunReport:
    """Accumulated outcomes of an orchestrated run."""

    results: List[ComponentResult] = field(default_factory=list)

    def add(self, result: ComponentResult) -> None:
        self.results.append(result)

    @property
    def failed_components(self) -> List[str]:
        return [result.name for result in self.results if not result.passed]

    @property
    def has_failures(self) -> bool:
        return bool(self.failed_components)

    @property
    def exit_code(self) -> int:
        return 1 if self.has_failures else 0


__all__ = [
    "COMPONENT_ORDER",
    "ComponentResult",
    "InstallTally",
    "ItemOutcome",
    "ItemStatus",
    "PlanStep",
    "RunReport",
    "Selection",
]
