"""Repair cascade for model JSON output.

Model responses are supposed to be one JSON object, but often arrive fenced
in markdown or with raw line breaks inside string values. The cascade tries
progressively more aggressive parses and returns a tagged result instead of
raising, so callers can degrade to a fallback turn.
"""

import json
import re
from collections.abc import Callable
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, Field

from factfinder.observability.logging import get_logger
from factfinder.observability.metrics import REPAIR_STAGE

logger = get_logger(__name__)

_LEADING_FENCE = re.compile(r"^```[\w-]*\s*")
_TRAILING_FENCE = re.compile(r"\s*```$")

# A string value following a key: `"...": "<value>"`, escapes respected
_STRING_VALUE = re.compile(r'(":\s*")((?:[^"\\]|\\.)*)(")', re.DOTALL)
_ESCAPED_THEN_RAW_NEWLINE = re.compile(r"\\n\n")


class RepairStage(str, Enum):
    """Cascade stage that produced a parse."""

    DIRECT = "direct"
    TARGETED = "targeted"
    AGGRESSIVE = "aggressive"


class ParsedResponse(BaseModel):
    """The model text parsed into a JSON object."""

    kind: Literal["parsed"] = "parsed"
    payload: dict[str, Any]
    stage: RepairStage


class MalformedResponse(BaseModel):
    """No stage could parse the model text."""

    kind: Literal["malformed"] = "malformed"
    text: str
    errors: list[str] = Field(default_factory=list)


RepairResult = ParsedResponse | MalformedResponse


def strip_code_fence(text: str) -> str:
    """Remove a surrounding markdown code fence (with or without language tag)."""
    cleaned = text.strip()
    if cleaned.startswith("```"):
        cleaned = _LEADING_FENCE.sub("", cleaned)
        cleaned = _TRAILING_FENCE.sub("", cleaned)
    if len(cleaned) >= 2 and cleaned.startswith("`") and cleaned.endswith("`"):
        cleaned = cleaned[1:-1]
    return cleaned


def _load_object(text: str) -> dict[str, Any]:
    parsed = json.loads(text)
    if not isinstance(parsed, dict):
        raise ValueError(f"Expected a JSON object, got {type(parsed).__name__}")
    return parsed


_VALUE_ESCAPES = (("\r\n", "\\n"), ("\n", "\\n"), ("\r", "\\r"), ("\t", "\\t"))


def escape_string_value_newlines(text: str) -> str:
    """Escape raw line breaks and tabs inside `"key": "value"` string spans only."""

    def _escape(match: re.Match[str]) -> str:
        value = match.group(2)
        for raw, escaped in _VALUE_ESCAPES:
            value = value.replace(raw, escaped)
        return match.group(1) + value + match.group(3)

    fixed = _STRING_VALUE.sub(_escape, text)
    return _ESCAPED_THEN_RAW_NEWLINE.sub(r"\\n\\n", fixed)


def escape_all_newlines(text: str) -> str:
    """Escape every raw line break, regardless of where it sits."""
    return text.replace("\r\n", "\\n").replace("\n", "\\n")


def parse_direct(text: str) -> dict[str, Any]:
    return _load_object(text)


def parse_targeted(text: str) -> dict[str, Any]:
    return _load_object(escape_string_value_newlines(text))


def parse_aggressive(text: str) -> dict[str, Any]:
    return _load_object(escape_all_newlines(text))


REPAIR_CASCADE: tuple[tuple[RepairStage, Callable[[str], dict[str, Any]]], ...] = (
    (RepairStage.DIRECT, parse_direct),
    (RepairStage.TARGETED, parse_targeted),
    (RepairStage.AGGRESSIVE, parse_aggressive),
)


def repair_response(raw_text: str) -> RepairResult:
    """Parse model output, trying each cascade stage in order.

    Args:
        raw_text: Raw text returned by the model

    Returns:
        ParsedResponse from the first stage that succeeds, otherwise
        MalformedResponse with the error of every stage
    """
    cleaned = strip_code_fence(raw_text)
    errors: list[str] = []

    for stage, parse in REPAIR_CASCADE:
        try:
            payload = parse(cleaned)
        except ValueError as e:
            errors.append(f"{stage.value}: {e}")
            continue

        REPAIR_STAGE.labels(stage=stage.value).inc()
        if stage != RepairStage.DIRECT:
            logger.info(
                "dialog_response_repaired",
                stage=stage.value,
                original_length=len(cleaned),
            )
        return ParsedResponse(payload=payload, stage=stage)

    REPAIR_STAGE.labels(stage="malformed").inc()
    logger.warning(
        "dialog_response_unparseable",
        response_length=len(raw_text),
        response_preview=raw_text[:200],
        errors=errors,
    )
    return MalformedResponse(text=raw_text, errors=errors)
