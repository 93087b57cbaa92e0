"""
Operator prompts.

The orchestrator and workflow only talk to a ``Prompter``; the console
implementation reads answers from the terminal while ``AutoPrompter``
answers on its own for unattended runs.
"""

import abc
import logging
from typing import Optional, Sequence

from rich.console import Console
from rich.prompt import Confirm, Prompt

logger = logging.getLogger("readme-footer.prompts")


class Prompter(abc.ABC):
    """Interface for yes/no questions and single choices."""

    @abc.abstractmethod
    def confirm(self, message: str, default: bool = False) -> bool:
        """Ask a yes/no question; empty input answers ``default``."""

    @abc.abstractmethod
    def choose(self, message: str, choices: Sequence[str], default: str) -> str:
        """Ask for one of ``choices``; empty input answers ``default``."""


class ConsolePrompter(Prompter):
    """Ask on the terminal. Empty input selects the default."""

    def __init__(self, console: Optional[Console] = None) -> None:
        self.console = console or Console()

    def confirm(self, message: str, default: bool = False) -> bool:
        return Confirm.ask(f"[red]{message}[/red]", default=default, console=self.console)

    def choose(self, message: str, choices: Sequence[str], default: str) -> str:
        answer = Prompt.ask(f"[red]{message}[/red]", choices=list(choices), default=default, console=self.console)
        return answer.lower()


class AutoPrompter(Prompter):
    """
    Answer every question without reading input.

    Args:
        assume_yes: Answer yes to every confirmation and pick ``first_choice``
                    for every choice. When False, defaults are used.
        first_choice: Choice selected when ``assume_yes`` is set
    """

    def __init__(self, assume_yes: bool = True, first_choice: str = "process") -> None:
        self.assume_yes = assume_yes
        self.first_choice = first_choice

    def confirm(self, message: str, default: bool = False) -> bool:
        answer = True if self.assume_yes else default
        logger.info("%s -> %s", message, "yes" if answer else "no")
        return answer

    def choose(self, message: str, choices: Sequence[str], default: str) -> str:
        answer = self.first_choice if self.assume_yes and self.first_choice in choices else default
        logger.info("%s -> %s", message, answer)
        return answer
