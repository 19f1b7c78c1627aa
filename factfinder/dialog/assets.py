"""Generated asset detection.

Generation steps return the finished asset (a press release, a social post)
somewhere in their payload. Collection steps sometimes produce one too
early; that content is removed before it can be stored.
"""

import json
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel

from factfinder.config.models.dialog import DialogConfig
from factfinder.dialog.reconciler import COLLECTED_KEY, COMPLETION_FLAGS
from factfinder.observability.logging import get_logger
from factfinder.workflow.models import DialogStep

logger = get_logger(__name__)

ASSET_KEYS = ("asset", "generatedAsset")
ASSET_TYPE_KEYS = ("selectedAssetType", "assetType")
ASSET_TYPE_ALIASES = {"PR Asset": "Press Release"}

# A next question this long carrying one of these markers is asset text
ASSET_LIKE_MIN_LENGTH = 500
ASSET_MARKERS = ("**LinkedIn Post:**", "**Twitter", "FOR IMMEDIATE RELEASE")


class ExtractedAsset(BaseModel):
    """Asset text ready for the transcript, with its resolved type."""

    content: str
    asset_type: str


def unwrap_asset(content: str) -> str:
    """Return the inner ``asset`` of a JSON wrapper, or the text unchanged."""
    stripped = content.strip()
    if not stripped.startswith("{"):
        return content
    try:
        wrapper = json.loads(stripped)
    except ValueError:
        logger.warning("asset_wrapper_unparseable", content_length=len(content))
        return content
    if isinstance(wrapper, dict) and isinstance(wrapper.get("asset"), str) and wrapper["asset"]:
        return wrapper["asset"]
    return content


class AssetExtractor:
    """Finds, types and strips asset content in model payloads."""

    def __init__(self, config: DialogConfig | None = None) -> None:
        self._config = config or DialogConfig()

    def is_collection_step(self, step: DialogStep) -> bool:
        return any(marker in step.name for marker in self._config.collection_step_markers)

    def is_generation_step(self, step: DialogStep) -> bool:
        return step.name in self._config.generation_step_names and not self.is_collection_step(step)

    def find_asset(self, payload: Mapping[str, Any], include_next_question: bool) -> str | None:
        """Locate asset text in a payload.

        Looks at ``collectedInformation.asset``, ``asset``,
        ``collectedInformation.generatedAsset`` and ``generatedAsset`` in that
        order, then optionally at ``nextQuestion``.
        """
        container = payload.get(COLLECTED_KEY)
        if not isinstance(container, Mapping):
            container = {}

        for key in ASSET_KEYS:
            for source in (container, payload):
                value = source.get(key)
                if isinstance(value, str) and value.strip():
                    return unwrap_asset(value)

        if include_next_question:
            question = payload.get("nextQuestion")
            if isinstance(question, str) and question.strip():
                return unwrap_asset(question)
        return None

    def resolve_asset_type(
        self,
        turn_facts: Mapping[str, Any],
        payload: Mapping[str, Any],
        previous_facts: Mapping[str, Any],
    ) -> str:
        asset_type = None
        for source in (turn_facts, payload, previous_facts):
            for key in ASSET_TYPE_KEYS:
                value = source.get(key)
                if isinstance(value, str) and value:
                    asset_type = value
                    break
            if asset_type:
                break
        asset_type = asset_type or self._config.default_asset_type
        return ASSET_TYPE_ALIASES.get(asset_type, asset_type)

    def extract(
        self,
        step: DialogStep,
        payload: Mapping[str, Any],
        turn_facts: Mapping[str, Any],
        previous_facts: Mapping[str, Any],
    ) -> ExtractedAsset | None:
        """Return the asset of a completed generation turn, if any.

        Only generation steps surface assets; asset fields returned by any
        other step are ignored.
        """
        if not self.is_generation_step(step):
            return None
        content = self.find_asset(payload, include_next_question=True)
        if content is None:
            logger.warning(
                "asset_not_found",
                step_name=step.name,
                response_keys=list(payload.keys()),
            )
            return None
        return ExtractedAsset(
            content=content,
            asset_type=self.resolve_asset_type(turn_facts, payload, previous_facts),
        )

    def has_premature_asset(self, payload: Mapping[str, Any]) -> bool:
        if self.find_asset(payload, include_next_question=False) is not None:
            return True
        return _is_asset_like(payload.get("nextQuestion"))

    def strip_premature_asset(self, step: DialogStep, payload: dict[str, Any]) -> dict[str, Any]:
        """Remove asset content a collection step returned.

        Returns a new payload; the input is not modified. An asset-like
        next question is replaced with a collection follow-up and the turn
        is marked incomplete.
        """
        if not self.is_collection_step(step) or not self.has_premature_asset(payload):
            return payload

        logger.error(
            "collection_step_generated_asset",
            step_id=str(step.id),
            step_name=step.name,
        )
        cleaned = {k: v for k, v in payload.items() if k not in ASSET_KEYS}
        container = cleaned.get(COLLECTED_KEY)
        if isinstance(container, Mapping):
            cleaned[COLLECTED_KEY] = {k: v for k, v in container.items() if k not in ASSET_KEYS}

        question = cleaned.get("nextQuestion")
        if isinstance(question, str) and len(question) > ASSET_LIKE_MIN_LENGTH:
            cleaned["nextQuestion"] = self._config.collection_followup_question
            for flag in COMPLETION_FLAGS:
                if flag in cleaned:
                    cleaned[flag] = False
        return cleaned


def _is_asset_like(question: Any) -> bool:
    return (
        isinstance(question, str)
        and len(question) > ASSET_LIKE_MIN_LENGTH
        and any(marker in question for marker in ASSET_MARKERS)
    )
