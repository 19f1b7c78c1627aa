"""Workflow step models.

A step is one unit of a multi-step conversational workflow with its own
field schema and accumulated facts. Its lifecycle is
pending -> in_progress -> complete; a complete step can be reopened only by
a separate revision step that starts from the same facts.
"""

import copy
from datetime import UTC, datetime
from enum import Enum
from typing import Any
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def utc_now() -> datetime:
    return datetime.now(UTC)


class StepType(str, Enum):
    """How a step is driven."""

    JSON_DIALOG = "json_dialog"
    API_CALL = "api_call"
    USER_INPUT = "user_input"
    AI_SUGGESTION = "ai_suggestion"


class StepStatus(str, Enum):
    """Lifecycle state of a step."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETE = "complete"


class StepMetadata(BaseModel):
    """Per-step metadata persisted by the caller.

    Keys use the camelCase names stored by the workflow templates; unknown
    keys are kept.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
        validate_assignment=True,
    )

    goal: str | None = None
    collected_information: dict[str, Any] = Field(default_factory=dict)
    processed_first_message: bool = False
    essential: list[str] = Field(default_factory=list)
    important: list[str] = Field(default_factory=list)
    optional: list[str] = Field(default_factory=list)
    base_instructions: str | None = None
    options: list[str] = Field(default_factory=list)


class DialogStep(BaseModel):
    """A workflow step driven by the dialog engine."""

    model_config = ConfigDict(validate_assignment=True)

    id: UUID = Field(default_factory=uuid4)
    workflow_id: UUID
    name: str
    step_type: StepType = StepType.JSON_DIALOG
    status: StepStatus = StepStatus.PENDING
    prompt: str | None = Field(default=None, description="Static opening question")
    order: int = 0
    metadata: StepMetadata = Field(default_factory=StepMetadata)
    revision_of: UUID | None = Field(
        default=None, description="Step this one revises, if any"
    )
    updated_at: datetime = Field(default_factory=utc_now)

    @property
    def facts(self) -> dict[str, Any]:
        """Facts collected so far for this step."""
        return self.metadata.collected_information

    @property
    def is_revision(self) -> bool:
        return self.revision_of is not None

    def start(self) -> None:
        """Move a pending step to in_progress. No-op once started."""
        if self.status == StepStatus.PENDING:
            self.status = StepStatus.IN_PROGRESS
            self.updated_at = utc_now()

    def apply_turn(self, facts: dict[str, Any], is_complete: bool) -> None:
        """Record a turn's reconciled facts and completion flag."""
        if self.status == StepStatus.COMPLETE:
            raise ValueError(
                f"Step '{self.name}' is complete; open a revision step to change it"
            )
        self.start()
        self.metadata.collected_information = facts
        if is_complete:
            self.status = StepStatus.COMPLETE
        self.updated_at = utc_now()

    def open_revision(self, name: str | None = None) -> "DialogStep":
        """Create a revision step sharing this step's facts.

        Raises:
            ValueError: If this step is not complete
        """
        if self.status != StepStatus.COMPLETE:
            raise ValueError(
                f"Only complete steps can be revised, '{self.name}' is {self.status.value}"
            )

        metadata = self.metadata.model_copy(deep=True)
        metadata.processed_first_message = False
        return DialogStep(
            workflow_id=self.workflow_id,
            name=name or f"{self.name} (Revision)",
            step_type=self.step_type,
            prompt=self.prompt,
            order=self.order,
            metadata=metadata,
            revision_of=self.id,
        )

    def snapshot_facts(self) -> dict[str, Any]:
        """Deep copy of the facts, safe to hand to the engine."""
        return copy.deepcopy(self.facts)
