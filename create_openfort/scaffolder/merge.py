"""Recursive merging of JSON-like mappings (``package.json`` fragments)."""

from __future__ import annotations

from collections.abc import Mapping, MutableMapping
from typing import Any


def deep_merge(target: MutableMapping[str, Any], source: Mapping[str, Any]) -> MutableMapping[str, Any]:
    """Merge *source* into *target* and return *target*.

    Nested mappings are merged key by key; every other value (lists,
    strings, numbers, ``None``) from *source* replaces the target's value
    outright.

    Example::

        deep_merge({"a": {"x": 1, "y": 2}}, {"a": {"y": 3}})
        -> {"a": {"x": 1, "y": 3}}
    """
    for key, value in source.items():
        if isinstance(value, Mapping):
            existing = target.get(key)
            if not isinstance(existing, MutableMapping):
                existing = {}
            target[key] = deep_merge(existing, value)
        else:
            target[key] = value
    return target
