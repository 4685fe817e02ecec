"""Interactive prompts.

A thin wrapper around ``rich.prompt`` that gives the rest of the tool two
primitives, free-text input and single choice selection, and turns Ctrl+C /
Ctrl+D into ``OperationCancelled``.  Tests substitute their own object with
the same ``text``/``select`` methods.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from rich.console import Console
from rich.prompt import Prompt

from create_openfort.utils import console as default_console

T = TypeVar("T")

Validator = Callable[[str], "str | None"]


class OperationCancelled(Exception):
    """Raised when the user aborts the interactive flow.

    Cancelling is not a failure; the CLI reports it and exits cleanly.
    """

    def __init__(self, message: str = "Operation cancelled") -> None:
        super().__init__(message)


@dataclass(frozen=True)
class Option(Generic[T]):
    """One entry of a ``select`` prompt."""

    value: T
    label: str
    hint: str | None = None


class Prompter:
    """Asks the user questions on the terminal."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or default_console

    def text(
        self,
        message: str,
        default: str | None = None,
        placeholder: str | None = None,
        validate: Validator | None = None,
    ) -> str:
        """Ask for a line of text, re-asking until *validate* returns ``None``.

        An empty answer yields *default* (or ``""`` when there is none).
        """
        shown = message
        if placeholder and not default:
            shown = f"{message} [dim]({placeholder})[/dim]"
        while True:
            answer = self._ask(shown, default=default)
            error = validate(answer) if validate else None
            if error is None:
                return answer
            self.console.print(f"[red]{error}[/red]")

    def select(self, message: str, options: Sequence[Option[T]]) -> T:
        """Ask the user to pick one of *options* and return its value."""
        self.console.print(f"[bold]{message}[/bold]")
        for index, option in enumerate(options, 1):
            hint = f" [dim]({option.hint})[/dim]" if option.hint else ""
            self.console.print(f"  {index}. {option.label}{hint}")
        choices = [str(i) for i in range(1, len(options) + 1)]
        answer = self._ask("Choose", default="1", choices=choices)
        return options[int(answer) - 1].value

    def _ask(self, message: str, **kwargs: Any) -> str:
        try:
            answer = Prompt.ask(message, console=self.console, **kwargs)
        except (KeyboardInterrupt, EOFError):
            raise OperationCancelled() from None
        return (answer or "").strip()
