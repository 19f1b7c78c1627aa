"""Information tracking: flatten, match, score and render in one call."""

from typing import Any

from factfinder.config.models.dialog import DialogConfig
from factfinder.dialog.flatten import flatten_facts
from factfinder.dialog.matcher import FieldMatcher
from factfinder.dialog.models import CompletionReport, FieldSchema
from factfinder.dialog.renderer import TrackingStatusRenderer
from factfinder.dialog.scorer import CompletionScorer


class InformationTracker:
    """Computes the completion report for a set of collected facts.

    The flattened view is rebuilt on every call and never stored.
    """

    def __init__(
        self,
        scorer: CompletionScorer | None = None,
        renderer: TrackingStatusRenderer | None = None,
    ) -> None:
        self._scorer = scorer or CompletionScorer()
        self._renderer = renderer or TrackingStatusRenderer()

    @classmethod
    def from_config(cls, config: DialogConfig) -> "InformationTracker":
        matcher = FieldMatcher(
            sentinel_values=config.sentinel_values,
            sentinel_case_sensitive=config.sentinel_case_sensitive,
        )
        scorer = CompletionScorer(
            matcher=matcher,
            weights=config.weights,
            readiness_threshold=config.readiness_threshold,
        )
        return cls(scorer=scorer, renderer=TrackingStatusRenderer(config.preview_length))

    def track(self, facts: dict[str, Any], schema: FieldSchema) -> CompletionReport:
        report = self._scorer.score(schema, flatten_facts(facts))
        return report.model_copy(update={"formatted_status": self._renderer.render(report)})
