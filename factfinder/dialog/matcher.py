"""Fuzzy matching of canonical field names against flattened facts.

Models drift between naming styles (``companyName``, ``company_name``,
``company.name``), so a field counts as present when a collected key
resembles it closely enough and holds a usable value.
"""

import re
from collections.abc import Iterable
from typing import Any

from factfinder.dialog.models import MatchKind, MatchResult

_CAMEL_BOUNDARY = re.compile(r"([A-Z])")
_WHITESPACE = re.compile(r"\s+")
_SEPARATORS = re.compile(r"[_-]")
_NON_WORD = re.compile(r"\W+")

DEFAULT_SENTINELS = ("unknown", "unavailable")


def name_variants(field: str) -> list[str]:
    """Spellings of a field name used for direct matching.

    The name unchanged, lowercased, camelCase spread into words, whitespace
    removed, and underscores/hyphens removed. Duplicates and empty strings
    are dropped; order is preserved.
    """
    candidates = [
        field,
        field.lower(),
        _CAMEL_BOUNDARY.sub(r" \1", field).strip(),
        _WHITESPACE.sub("", field),
        _SEPARATORS.sub("", field),
    ]
    variants: list[str] = []
    for candidate in candidates:
        lowered = candidate.lower()
        if lowered and lowered not in variants:
            variants.append(lowered)
    return variants


def key_forms(key: str) -> list[str]:
    """Lowercased forms of a flattened key compared against name variants."""
    lowered = key.lower()
    return [
        lowered,
        _WHITESPACE.sub("", _SEPARATORS.sub("", lowered)),
        _SEPARATORS.sub(" ", lowered),
    ]


def _words(text: str) -> list[str]:
    return [word for word in _NON_WORD.split(text.lower()) if word]


class FieldMatcher:
    """Classifies canonical fields as direct, semantic, or unmatched.

    A match only counts when its value is usable: not None, not an empty
    string, and not a sentinel such as "unavailable".
    """

    def __init__(
        self,
        sentinel_values: Iterable[str] = DEFAULT_SENTINELS,
        sentinel_case_sensitive: bool = True,
    ) -> None:
        self._case_sensitive = sentinel_case_sensitive
        self._sentinels = frozenset(
            s if sentinel_case_sensitive else s.lower() for s in sentinel_values
        )

    def is_sentinel(self, value: Any) -> bool:
        if not isinstance(value, str):
            return False
        candidate = value if self._case_sensitive else value.lower()
        return candidate in self._sentinels

    def is_valid_value(self, value: Any) -> bool:
        return value is not None and value != "" and not self.is_sentinel(value)

    def is_direct_match(self, field: str, key: str) -> bool:
        forms = key_forms(key)
        return any(variant in form for variant in name_variants(field) for form in forms)

    def is_semantic_match(self, field: str, key: str) -> bool:
        """Every word of a multi-word field name appears inside some key word.

        Words of two characters or fewer never match.
        """
        field_words = _words(field)
        if len(field_words) <= 1:
            return False
        key_words = _words(key)
        return all(
            len(word) > 2 and any(word in key_word for key_word in key_words)
            for word in field_words
        )

    def match(self, field: str, flattened: dict[str, Any]) -> MatchResult:
        """Match one field against a flattened view.

        Direct matches win over semantic ones; within a kind the first key
        holding a valid value wins. When matching keys exist but hold only
        sentinels, the result is unmatched with ``sentinel`` set.
        """
        direct_keys = [key for key in flattened if self.is_direct_match(field, key)]
        semantic_keys = [key for key in flattened if self.is_semantic_match(field, key)]

        for kind, keys in ((MatchKind.DIRECT, direct_keys), (MatchKind.SEMANTIC, semantic_keys)):
            for key in keys:
                if self.is_valid_value(flattened[key]):
                    return MatchResult(field=field, kind=kind, key=key, value=flattened[key])

        for key in direct_keys + semantic_keys:
            if self.is_sentinel(flattened[key]):
                return MatchResult(field=field, key=key, value=flattened[key], sentinel=True)

        return MatchResult(field=field)

    def match_all(self, fields: Iterable[str], flattened: dict[str, Any]) -> list[MatchResult]:
        return [self.match(field, flattened) for field in fields]
