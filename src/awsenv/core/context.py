"""
Per-run output context handed to the engines.

Engines never consult global state for verbosity; they receive a RunContext
holding the console used for user-facing output and the logger used for
diagnostics.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from rich.console import Console
from rich.markup import escape


@dataclass
class RunContext:
    """Console, logger and verbosity for one command invocation."""
    console: Console = field(default_factory=Console)
    logger: logging.Logger = field(default_factory=lambda: logging.getLogger("awsenv"))
    verbose: bool = False

    def child(self, name: str) -> "RunContext":
        """Return a context sharing the console with a named sub-logger."""
        return RunContext(
            console=self.console,
            logger=self.logger.getChild(name),
            verbose=self.verbose,
        )

    def debug(self, message: str, *args) -> None:
        """Log a diagnostic line; echo it to the console in verbose mode."""
        self.logger.debug(message, *args)
        if self.verbose:
            text = message % args if args else message
            self.console.print(f"[dim]{escape(text)}[/dim]", highlight=False)

    def progress(self, marker: str) -> None:
        """Write a single progress marker without a newline."""
        self.console.print(marker, end="", highlight=False)


def default_context(name: Optional[str] = None) -> RunContext:
    context = RunContext()
    return context.child(name) if name else context
