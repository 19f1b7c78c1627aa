"""Flatten nested collected facts into a path -> value lookup table."""

from collections.abc import Mapping
from typing import Any


def flatten_facts(facts: Any, prefix: str = "") -> dict[str, Any]:
    """Flatten a nested fact object with dot/bracket paths.

    - Mapping keys are dot-joined: ``company.name``
    - List elements appear as ``items[0]`` (recursing into nested values),
      and the whole list is also kept under ``items``
    - Primitive leaves are stored as-is
    - Empty mappings contribute nothing

    Non-mapping input yields an empty view. The input is never modified.

    Example:
        >>> flatten_facts({"a": {"b": 1}, "tags": ["x", "y"]})
        {'a.b': 1, 'tags[0]': 'x', 'tags[1]': 'y', 'tags': ['x', 'y']}
    """
    if not isinstance(facts, Mapping):
        return {}

    flattened: dict[str, Any] = {}
    for key, value in facts.items():
        path = f"{prefix}.{key}" if prefix else str(key)
        _flatten_value(value, path, flattened)
    return flattened


def _flatten_value(value: Any, path: str, flattened: dict[str, Any]) -> None:
    if isinstance(value, Mapping):
        flattened.update(flatten_facts(value, path))
    elif isinstance(value, list):
        for index, item in enumerate(value):
            _flatten_value(item, f"{path}[{index}]", flattened)
        flattened[path] = value
    else:
        flattened[path] = value
