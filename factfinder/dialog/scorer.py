"""Weighted completion scoring over a field schema."""

import math
from typing import Any

from factfinder.config.models.dialog import CompletionWeights
from factfinder.dialog.matcher import FieldMatcher
from factfinder.dialog.models import (
    CompletionReport,
    FieldGroup,
    FieldSchema,
    GroupCompletion,
)


class CompletionScorer:
    """Scores how much of a schema a flattened fact view covers.

    Each tier contributes ``weight * complete / total``. Tiers with no
    declared fields contribute nothing and their weight is not moved to the
    others, so a schema with only essential fields tops out at the essential
    weight.
    """

    def __init__(
        self,
        matcher: FieldMatcher | None = None,
        weights: CompletionWeights | None = None,
        readiness_threshold: float = 0.7,
    ) -> None:
        self._matcher = matcher or FieldMatcher()
        self._weights = weights or CompletionWeights()
        self._readiness_threshold = readiness_threshold

    @property
    def readiness_threshold(self) -> float:
        return self._readiness_threshold

    def score(self, schema: FieldSchema, flattened: dict[str, Any]) -> CompletionReport:
        """Match every schema field and compute the weighted fraction.

        Args:
            schema: Fields the step wants
            flattened: Flattened collected facts

        Returns:
            CompletionReport without formatted_status (see the renderer)
        """
        groups = {
            group: GroupCompletion(
                group=group,
                matches=self._matcher.match_all(schema.fields_for(group), flattened),
            )
            for group in FieldGroup
        }

        fraction = 0.0
        for group, completion in groups.items():
            if completion.total > 0:
                weight = getattr(self._weights, group.value)
                fraction += weight * completion.complete / max(1, completion.total)

        fraction = min(fraction, 1.0)
        return CompletionReport(
            essential=groups[FieldGroup.ESSENTIAL],
            important=groups[FieldGroup.IMPORTANT],
            optional=groups[FieldGroup.OPTIONAL],
            fraction=fraction,
            percentage=math.floor(fraction * 100 + 0.5),
            is_ready=fraction >= self._readiness_threshold,
        )
