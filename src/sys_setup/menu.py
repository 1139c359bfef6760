"""Interactive component selection."""

from __future__ import annotations

from typing import Callable, Dict, List, Optional, Set, Tuple

from loguru import logger
from rich.text import Text

from .logs import console, print_header
from .models import COMPONENT_ORDER, Selection

CHOICE_LABELS: Dict[str, str] = {
    "brew": "Homebrew formulas",
    "brew_apps": "Homebrew cask applications",
    "cursor": "Cursor extensions",
    "settings": "Cursor settings",
    "dot_files": "Dot-files",
}

SELECT_ALL = "6"
EXIT = "7"

Reader = Callable[[Text], str]


class SetupCancelled(Exception):
    """The operator chose not to proceed. Not an error."""


def parse_choices(raw: str) -> Tuple[Set[int], List[str]]:
    """Split ``raw`` on commas and keep the tokens that are exactly ``1``..``5``.

    Returns the valid indices and the rejected tokens in input order.
    """

    valid: Set[int] = set()
    invalid: List[str] = []
    if not raw.strip():
        return valid, invalid
    for token in (part.strip() for part in raw.split(",")):
        if token in {"1", "2", "3", "4", "5"}:
            valid.add(int(token))
        else:
            invalid.append(token)
    return valid, invalid


def selection_from_indices(indices: Set[int]) -> Selection:
    return Selection.from_keys(COMPONENT_ORDER[index - 1] for index in indices)


def _read_console(prompt: Text) -> str:
    return console.input(prompt)


class Menu:
    """Prompt for components until a valid selection is confirmed."""

    def __init__(self, descriptions: Dict[str, str], reader: Optional[Reader] = None) -> None:
        self.descriptions = descriptions
        self.reader = reader or _read_console

    def _ask(self, tag: str, style: str, question: str) -> str:
        try:
            return self.reader(Text.assemble((tag, style), " ", question))
        except EOFError as exc:
            raise SetupCancelled("Input closed") from exc

    def show_options(self) -> None:
        print_header("System Setup - Component Selection")
        console.print("Welcome to the System Setup Script!")
        console.print("Please select which components you want to install:")
        console.print()
        for index, key in enumerate(COMPONENT_ORDER, start=1):
            console.print(f"{index}. {self.descriptions[key]}", highlight=False)
        console.print(f"{SELECT_ALL}. Install all components")
        console.print(f"{EXIT}. Exit without installing anything")
        console.print()

    def choose(self) -> Selection:
        while True:
            raw = self._ask("[SELECT]", "blue", "Enter your choice(s) [1-7, or multiple like '1,2,3']: ")
            choice = raw.strip()
            if choice == EXIT:
                logger.info("Exiting without installing anything. Goodbye!")
                raise SetupCancelled("Exit selected")
            if choice == SELECT_ALL:
                logger.success("Selected: All components will be installed")
                return Selection()

            valid, invalid = parse_choices(raw)
            for token in invalid:
                logger.error(f"Invalid choice: {token}")
            if valid:
                selection = selection_from_indices(valid)
                names = [CHOICE_LABELS[key] for key in selection.selected_keys]
                logger.success(f"Selected components: {' '.join(names)}")
                return selection
            logger.error("Please enter valid choices (1-7)")

    def confirm(self) -> None:
        console.print()
        answer = self._ask("[CONFIRM]", "yellow", "Proceed with installation? (y/N): ")
        if answer.strip() not in ("y", "Y"):
            logger.info("Installation cancelled by user. Goodbye!")
            raise SetupCancelled("Not confirmed")
        logger.success("Starting installation process...")

    def run(self) -> Selection:
        """Show the menu and return the confirmed selection.

        Raises ``SetupCancelled`` when the operator exits or declines.
        """

        self.show_options()
        selection = self.choose()
        console.print()
        logger.info("The script will now install:")
        for key in selection.selected_keys:
            console.print(f"  ✓ {CHOICE_LABELS[key]}")
        self.confirm()
        console.print()
        return selection


__all__ = ["CHOICE_LABELS", "Menu", "SetupCancelled", "parse_choices", "selection_from_indices"]
