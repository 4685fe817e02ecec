"""``.env`` generation from ``.env.example`` templates.

The example file is rewritten line by line: comments, blank lines and lines
without ``=`` are kept verbatim, and ``KEY=`` lines get a value when one is
provided.  Values are matched on the key with its first segment dropped, so
``NEXT_PUBLIC_OPENFORT_THEME`` and ``VITE_OPENFORT_THEME`` are looked up as
``PUBLIC_OPENFORT_THEME`` and ``OPENFORT_THEME`` respectively.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

from create_openfort.scaffolder.frameworks import Framework
from create_openfort.utils import print_info

if TYPE_CHECKING:
    from create_openfort.workspace.manager import ProjectWorkspace

EXAMPLE_FILE = ".env.example"
ENV_FILE = ".env"

EnvValues = Mapping[str, "str | None"]


class EnvLineKind(str, Enum):
    BLANK = "blank"
    COMMENT = "comment"
    ASSIGNMENT = "assignment"
    OTHER = "other"


@dataclass(frozen=True)
class EnvLine:
    """One line of an env file."""

    kind: EnvLineKind
    text: str
    key: str = ""


def classify_line(line: str) -> EnvLine:
    stripped = line.strip()
    if not stripped:
        return EnvLine(EnvLineKind.BLANK, line)
    if stripped.startswith("#"):
        return EnvLine(EnvLineKind.COMMENT, line)
    key, sep, _ = line.partition("=")
    if not sep or not key:
        return EnvLine(EnvLineKind.OTHER, line)
    return EnvLine(EnvLineKind.ASSIGNMENT, line, key)


def parse_env(text: str) -> list[EnvLine]:
    """Split env file content into classified lines (``\\n`` separated)."""
    return [classify_line(line) for line in text.split("\n")]


def lookup_key(key: str) -> str:
    """Key used to find a value for *key*: everything after the first ``_``."""
    _, sep, suffix = key.partition("_")
    return suffix if sep else key


def render_env(text: str, resolve: Callable[[str], "str | None"]) -> str:
    """Rewrite assignment lines of *text* using *resolve(key)*.

    A ``None`` result leaves the line untouched, including any default value
    already present after ``=``.
    """
    rendered: list[str] = []
    for line in parse_env(text):
        value = resolve(line.key) if line.kind is EnvLineKind.ASSIGNMENT else None
        rendered.append(line.text if value is None else f"{line.key}={value}")
    return "\n".join(rendered)


def fill_env_text(text: str, values: EnvValues) -> str:
    """Fill *text* from *values* keyed by ``lookup_key``."""
    return render_env(text, lambda key: values.get(lookup_key(key)))


def fill_env(workspace: ProjectWorkspace, values: EnvValues, verbose: bool = False) -> Path:
    """Write the workspace's ``.env`` from its ``.env.example``.

    Paths are resolved through the workspace, so in subfolder mode the files
    live under ``frontend/``.

    Returns:
        Path of the written ``.env``.
    """
    source = workspace.resolve_path(EXAMPLE_FILE)
    target = workspace.resolve_path(ENV_FILE)
    if verbose:
        print_info(f"Reading {EXAMPLE_FILE} from {source}")
        print_info(f"Writing {ENV_FILE} to {target}")

    example = source.read_text(encoding="utf-8")
    target.write_text(fill_env_text(example, values), encoding="utf-8")
    return target


def fill_env_exact(source: str | Path, target: str | Path, values: EnvValues) -> Path:
    """Fill *target* from *source* matching keys exactly.

    Used for files whose keys share a suffix (``OPENFORT_SECRET_KEY`` and
    ``SHIELD_SECRET_KEY``), where ``lookup_key`` would be ambiguous.
    """
    example = Path(source).read_text(encoding="utf-8")
    out = Path(target)
    out.write_text(render_env(example, values.get), encoding="utf-8")
    return out


def prefix_env(framework: Framework, values: EnvValues) -> dict[str, str | None]:
    """Give every key the framework's client-side prefix (once)."""
    prefix = framework.info.env_prefix
    return {
        (key if key.startswith(prefix) else f"{prefix}{key}"): value
        for key, value in values.items()
    }


def fill_framework_env(
    workspace: ProjectWorkspace,
    framework: Framework,
    values: EnvValues,
    verbose: bool = False,
) -> Path:
    """Prefix *values* for *framework* and fill the workspace's env files.

    When the template ships no ``.env.example`` one is generated listing the
    prefixed keys without values, alongside a ``.env`` holding them.
    """
    prefixed = prefix_env(framework, values)
    if not workspace.resolve_path(EXAMPLE_FILE).exists():
        workspace.write(EXAMPLE_FILE, "".join(f"{key}=\n" for key in prefixed))
        workspace.write(
            ENV_FILE,
            "".join(f"{key}={value or ''}\n" for key, value in prefixed.items()),
        )
        return workspace.resolve_path(ENV_FILE)
    return fill_env(
        workspace,
        {lookup_key(key): value for key, value in prefixed.items()},
        verbose=verbose,
    )


def env_reference(framework: Framework, variable: str) -> str:
    """Source-code expression reading *variable* in *framework*."""
    return framework.info.env_accessor.format(name=variable)
