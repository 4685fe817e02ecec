"""npm package-name rules.

``is_valid_name`` mirrors the registry's naming constraints closely enough to
catch every name ``npm install`` would reject for a freshly scaffolded
project; ``to_valid_name`` turns an arbitrary directory name into one that
passes.
"""

from __future__ import annotations

import re

MAX_PACKAGE_NAME_LENGTH = 214

_SEGMENT_PATTERN = re.compile(r"[a-z0-9~-][a-z0-9._~-]*")


def _is_valid_segment(segment: str) -> bool:
    return bool(_SEGMENT_PATTERN.fullmatch(segment)) and not segment.endswith(".")


def is_valid_name(name: str) -> bool:
    """Return ``True`` if *name* is usable as the ``name`` of a package.json.

    Scoped names (``@scope/name``) are valid when both segments are.

    Examples::

        is_valid_name("my-app")          -> True
        is_valid_name("@acme/my-app")    -> True
        is_valid_name("My App")          -> False
        is_valid_name("my-app.")         -> False
    """
    if not name:
        return False
    if len(name) > MAX_PACKAGE_NAME_LENGTH:
        return False
    if "*" in name or name.endswith("."):
        return False

    if name.startswith("@"):
        parts = name[1:].split("/")
        if len(parts) != 2:
            return False
        scope, package = parts
        return _is_valid_segment(scope) and _is_valid_segment(package)

    return _is_valid_segment(name)


def to_valid_name(name: str) -> str:
    """Sanitise an arbitrary string into a package name.

    * Trims and lowercases the input.
    * Collapses whitespace runs into hyphens.
    * Drops a single leading ``.`` or ``_`` and every trailing dot.
    * Replaces each run of characters outside ``[a-z0-9-~]`` with one hyphen.
    * Truncates to 214 characters.

    Examples::

        to_valid_name("My Cool App")  -> "my-cool-app"
        to_valid_name(".hidden")      -> "hidden"
        to_valid_name("a.b")          -> "a-b"
    """
    sanitized = re.sub(r"\s+", "-", name.strip().lower())
    sanitized = re.sub(r"^[._]", "", sanitized)
    sanitized = re.sub(r"\.+$", "", sanitized)
    sanitized = re.sub(r"[^a-z0-9\-~]+", "-", sanitized)
    return sanitized[:MAX_PACKAGE_NAME_LENGTH]


def format_target_dir(target_dir: str) -> str:
    """Trim whitespace and trailing slashes from a user-supplied directory."""
    return re.sub(r"/+$", "", target_dir.strip())
