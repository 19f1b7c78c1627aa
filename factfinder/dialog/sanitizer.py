"""Strip restricted data from facts before they reach a prompt."""

import copy
from collections.abc import Iterable
from typing import Any

from factfinder.observability.logging import get_logger

logger = get_logger(__name__)


def sanitize_for_model(facts: dict[str, Any], restricted_keys: Iterable[str]) -> dict[str, Any]:
    """Return a deep copy of facts with restricted keys removed at any depth.

    Retrieved article and search data must never be sent to the model.
    The stored facts are left untouched.
    """
    restricted = frozenset(restricted_keys)
    return _strip(copy.deepcopy(facts), restricted, path="")


def _strip(value: Any, restricted: frozenset[str], path: str) -> Any:
    if isinstance(value, dict):
        cleaned = {}
        for key, item in value.items():
            key_path = f"{path}.{key}" if path else str(key)
            if key in restricted:
                logger.warning("restricted_fact_removed", path=key_path)
                continue
            cleaned[key] = _strip(item, restricted, key_path)
        return cleaned
    if isinstance(value, list):
        return [_strip(item, restricted, f"{path}[{i}]") for i, item in enumerate(value)]
    return value
