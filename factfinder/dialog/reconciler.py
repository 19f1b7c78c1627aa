"""Reconcile a parsed model response with previously collected facts.

Models answer with synonymous keys (``isComplete`` / ``isStepComplete``,
``collectedInformation`` / ``extractedInformation``). The reconciler folds
them into one TurnResult and merges the turn's facts over the stored ones.
"""

import copy
from collections.abc import Mapping
from typing import Any

from factfinder.dialog.exceptions import ContractViolationError
from factfinder.dialog.models import TurnResult
from factfinder.observability.logging import get_logger

logger = get_logger(__name__)

COMPLETION_FLAGS = ("isComplete", "isStepComplete")
COLLECTED_KEY = "collectedInformation"
EXTRACTED_KEY = "extractedInformation"


def fact_container(payload: Mapping[str, Any]) -> Mapping[str, Any]:
    """Return the turn's fact container, collected before extracted."""
    for key in (COLLECTED_KEY, EXTRACTED_KEY):
        container = payload.get(key)
        if isinstance(container, Mapping):
            return container
    return {}


def nested_str(payload: Mapping[str, Any], key: str) -> str | None:
    """Read a non-empty string top-level, else from the fact container."""
    for source in (payload, fact_container(payload)):
        value = source.get(key)
        if isinstance(value, str) and value:
            return value
    return None


def coerce_flag(value: Any) -> bool | None:
    """Accept booleans and the strings "true"/"false"; anything else is None."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "false"):
        return value.strip().lower() == "true"
    return None


class FieldReconciler:
    """Turns a parsed model payload into a TurnResult.

    Merge rules:
    - ``collectedInformation`` present: ``{**previous, **collected}``, the
      current turn wins
    - only ``extractedInformation`` present: it is first seeded as
      ``{**extracted, **previous}`` (history wins), then merged as above,
      so previously stored values survive conflicting extractions
    - neither present: a copy of the previous facts

    Merges are shallow and never modify the inputs.
    """

    def resolve_completion(self, payload: Mapping[str, Any]) -> bool:
        """Read the completion flag under either of its names.

        Raises:
            ContractViolationError: If neither flag is present, or the flag
                is not a boolean or "true"/"false"
        """
        present = [name for name in COMPLETION_FLAGS if payload.get(name) is not None]
        if not present:
            raise ContractViolationError(
                "Model response has neither isComplete nor isStepComplete",
                response_keys=list(payload.keys()),
            )

        raw = payload[present[0]]
        flag = coerce_flag(raw)
        if flag is None:
            raise ContractViolationError(
                f"Completion flag {present[0]} has unusable value {raw!r}",
                response_keys=list(payload.keys()),
            )
        return flag

    def merge_facts(
        self,
        payload: Mapping[str, Any],
        previous_facts: Mapping[str, Any],
    ) -> dict[str, Any]:
        previous = copy.deepcopy(dict(previous_facts))
        collected = payload.get(COLLECTED_KEY)
        extracted = payload.get(EXTRACTED_KEY)

        if not isinstance(collected, Mapping) and isinstance(extracted, Mapping):
            collected = {**copy.deepcopy(dict(extracted)), **previous}

        if isinstance(collected, Mapping):
            return {**previous, **copy.deepcopy(dict(collected))}

        if collected is not None:
            logger.warning(
                "dialog_collected_information_ignored",
                value_type=type(collected).__name__,
            )
        return previous

    def reconcile(
        self,
        payload: Mapping[str, Any],
        previous_facts: Mapping[str, Any] | None = None,
        raw_text: str = "",
    ) -> TurnResult:
        """Build the turn result from a parsed payload.

        Args:
            payload: Parsed model response
            previous_facts: Facts stored before this turn
            raw_text: Unparsed model text, kept as api_response

        Returns:
            TurnResult with merged facts
        """
        is_complete = self.resolve_completion(payload)
        merged = self.merge_facts(payload, previous_facts or {})

        result = TurnResult(
            is_complete=is_complete,
            collected_information=merged,
            next_question=_optional_str(payload.get("nextQuestion")),
            suggested_next_step=_optional_str(payload.get("suggestedNextStep")),
            ready_to_generate=coerce_flag(payload.get("readyToGenerate")),
            completion_percentage=_optional_percentage(payload.get("completionPercentage")),
            missing_fields=_optional_str_list(payload.get("missingFields")),
            mode=nested_str(payload, "mode"),
            selected_workflow=nested_str(payload, "selectedWorkflow"),
            conversational_response=nested_str(payload, "conversationalResponse"),
            api_response=raw_text,
        )

        logger.debug(
            "dialog_response_reconciled",
            is_complete=is_complete,
            fact_keys=list(merged.keys()),
            has_next_question=result.next_question is not None,
        )
        return result


def _optional_str(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def _optional_percentage(value: Any) -> int | None:
    if isinstance(value, bool) or not isinstance(value, int | float):
        return None
    return max(0, min(100, round(value)))


def _optional_str_list(value: Any) -> list[str] | None:
    if not isinstance(value, list):
        return None
    return [str(item) for item in value]
