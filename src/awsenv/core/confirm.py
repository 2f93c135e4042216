"""
Operator confirmation.

Engines ask questions through a Confirmer so tests can script the answers.
"""

from abc import ABC, abstractmethod
from typing import Optional

from rich.console import Console
from rich.markup import escape


class Confirmer(ABC):
    """Asks the operator a question and returns the typed answer."""

    @abstractmethod
    def ask(self, message: str) -> str:
        """Return the raw answer to message."""

    def confirm(self, message: str) -> bool:
        """Yes/no question; any answer starting with "y" counts as yes."""
        return self.ask(message).strip().lower().startswith('y')


class ConsoleConfirmer(Confirmer):
    """Reads answers from the terminal."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def ask(self, message: str) -> str:
        try:
            return self.console.input(f"{escape(message)} ")
        except EOFError:
            # No terminal attached: treat as a refusal
            return ""
