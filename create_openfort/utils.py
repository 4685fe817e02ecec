"""Shared utility functions for create-openfort.

Provides Rich-based console reporting, JSON I/O, package-manager detection
from the npm user agent, and small formatting helpers.  Every component
prints through the module-level ``console`` so output can be captured in
tests by swapping the console's file.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn

console = Console()


# ---------------------------------------------------------------------------
# Package manager detection
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PackageManagerInfo:
    """Package manager that launched the CLI (``npm``, ``pnpm``, ``yarn``...)."""

    name: str = "npm"
    version: str = ""


def pkg_from_user_agent(user_agent: str | None = None) -> PackageManagerInfo | None:
    """Parse ``npm_config_user_agent`` into a ``PackageManagerInfo``.

    The user agent looks like ``pnpm/8.6.0 npm/? node/v18.16.0 linux x64``;
    only the first ``name/version`` token is relevant.

    Returns ``None`` when the variable is not set.
    """
    if user_agent is None:
        user_agent = os.environ.get("npm_config_user_agent")
    if not user_agent:
        return None
    name, _, version = user_agent.split(" ")[0].partition("/")
    return PackageManagerInfo(name=name, version=version)


# ---------------------------------------------------------------------------
# JSON I/O
# ---------------------------------------------------------------------------


def load_json_or_empty(path: str | Path) -> dict[str, Any]:
    """Load a JSON object from *path*, or ``{}`` when the file does not exist.

    Raises:
        json.JSONDecodeError: If the file exists but is not valid JSON.
        ValueError: If the file holds JSON that is not an object.
    """
    file_path = Path(path)
    if not file_path.exists():
        return {}
    data = json.loads(file_path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"{file_path} must contain a JSON object, got {type(data).__name__}")
    return data


def dump_package_json(data: dict[str, Any]) -> str:
    """Serialise a ``package.json`` payload the way npm writes it."""
    return json.dumps(data, indent=2, ensure_ascii=False) + "\n"


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------


def format_seconds(milliseconds: float) -> str:
    """Format a millisecond duration as whole-or-fractional seconds.

    Examples::

        format_seconds(60000) -> "60s"
        format_seconds(100)   -> "0.1s"
    """
    return f"{milliseconds / 1000:g}s"


def quote_path(path: str) -> str:
    """Wrap *path* in double quotes when it contains a space."""
    return f'"{path}"' if " " in path else path


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


def print_intro(message: str) -> None:
    """Print the opening banner of an interactive session."""
    console.print()
    console.print(f"[bold black on cyan] {message} [/bold black on cyan]")
    console.print()


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(f"[bold green]{message}[/bold green]")


def print_error(message: str) -> None:
    """Print a red error message."""
    console.print(f"[bold red]{message}[/bold red]")


def print_warning(message: str) -> None:
    """Print a yellow warning message."""
    console.print(f"[bold yellow]{message}[/bold yellow]")


def print_info(message: str) -> None:
    """Print a dimmed informational message (used for verbose output)."""
    console.print(f"[cyan]i[/cyan] [dim]{message}[/dim]", highlight=False)


def print_step(message: str) -> None:
    """Print a pipeline step marker."""
    console.print(f"[bold cyan]>[/bold cyan] {message}")


def create_spinner() -> Progress:
    """Create a Rich spinner for long-running steps such as downloads.

    Returns:
        A transient ``Progress`` instance suitable for use as a context manager.
    """
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    )
