"""Template catalogue and theme choices offered by the interactive flow."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from create_openfort.prompts import Option, Prompter


@dataclass(frozen=True)
class Template:
    """A quickstart published under ``examples/quickstarts/<name>``."""

    name: str
    display: str
    hint: str | None = None
    color: str = "cyan"

    @property
    def label(self) -> str:
        return f"[{self.color}]{self.display}[/{self.color}]"


TEMPLATES: tuple[Template, ...] = (
    Template("openfort-ui", "Openfort UI", hint="default", color="cyan"),
    Template("headless", "Headless UI", hint="custom, unstyled", color="green"),
    Template("firebase", "Third party auth", hint="with Firebase", color="yellow"),
)

DEFAULT_AVAILABLE_TEMPLATES: tuple[str, ...] = tuple(t.name for t in TEMPLATES)

# Templates whose UI ships with selectable themes.
THEMED_TEMPLATES = frozenset({"openfort-ui"})

THEMES: tuple[Option[str], ...] = (
    Option("auto", "Default", hint="Auto"),
    Option("midnight", "Midnight"),
    Option("minimal", "Minimal"),
    Option("soft", "Soft"),
    Option("web95", "Web95"),
    Option("rounded", "Rounded"),
    Option("retro", "Retro"),
    Option("nouns", "Nouns"),
)


def is_known_template(name: str, available: Sequence[str] = DEFAULT_AVAILABLE_TEMPLATES) -> bool:
    return any(t.name == name for t in TEMPLATES) and name in available


def prompt_template(
    prompter: Prompter,
    arg_template: str | None = None,
    available: Sequence[str] = DEFAULT_AVAILABLE_TEMPLATES,
) -> str:
    """Return the template named on the command line, or ask for one.

    An unknown *arg_template* is reported in the prompt message and the user
    picks from the full catalogue.
    """
    if arg_template and is_known_template(arg_template, available):
        return arg_template

    if arg_template:
        message = f'"{arg_template}" isn\'t a valid template. Please choose from below: '
    else:
        message = "Select a template:"

    return prompter.select(
        message,
        [Option(t.name, t.label, hint=t.hint) for t in TEMPLATES],
    )


def prompt_theme(prompter: Prompter, template: str) -> str | None:
    """Ask for a UI theme when *template* supports one."""
    if template not in THEMED_TEMPLATES:
        return None
    return prompter.select("Select a theme:", list(THEMES))
