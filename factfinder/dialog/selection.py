"""Extract a workflow choice from a selection-step response."""

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel

from factfinder.dialog.reconciler import nested_str
from factfinder.dialog.repair import MalformedResponse, repair_response
from factfinder.observability.logging import get_logger

logger = get_logger(__name__)


class WorkflowSelection(BaseModel):
    """Workflow picked by the model, or the reply it gave instead."""

    selected_workflow: str | None = None
    conversational_response: str | None = None
    mode: str | None = None

    @property
    def is_match(self) -> bool:
        return bool(self.selected_workflow)


def extract_workflow_selection(payload: Mapping[str, Any]) -> WorkflowSelection:
    """Read the selection from a parsed payload, top-level or nested."""
    return WorkflowSelection(
        selected_workflow=nested_str(payload, "selectedWorkflow"),
        conversational_response=nested_str(payload, "conversationalResponse"),
        mode=nested_str(payload, "mode"),
    )


def parse_workflow_selection(raw_text: str) -> WorkflowSelection:
    """Run the repair cascade over raw model text and extract the selection.

    Unparseable text yields an empty selection.
    """
    parsed = repair_response(raw_text)
    if isinstance(parsed, MalformedResponse):
        logger.warning("workflow_selection_unparseable", response_length=len(raw_text))
        return WorkflowSelection()

    selection = extract_workflow_selection(parsed.payload)
    logger.info(
        "workflow_selection_extracted",
        selected_workflow=selection.selected_workflow,
        has_conversational_response=selection.conversational_response is not None,
    )
    return selection
