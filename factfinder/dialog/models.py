"""Dialog engine models.

Contains the field schema, per-field match results, the completion report
and the caller-facing turn result.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class FieldGroup(str, Enum):
    """Weighted tiers of a field schema."""

    ESSENTIAL = "essential"
    IMPORTANT = "important"
    OPTIONAL = "optional"


class FieldSchema(BaseModel):
    """Canonical field names a step wants, in three ordered tiers."""

    model_config = ConfigDict(frozen=True)

    essential: tuple[str, ...] = ()
    important: tuple[str, ...] = ()
    optional: tuple[str, ...] = ()

    def fields_for(self, group: FieldGroup) -> tuple[str, ...]:
        return getattr(self, group.value)

    @property
    def is_empty(self) -> bool:
        return not (self.essential or self.important or self.optional)


class MatchKind(str, Enum):
    """Which matcher rule tied a field to a collected key."""

    DIRECT = "direct"
    SEMANTIC = "semantic"
    UNMATCHED = "unmatched"


class FieldStatus(str, Enum):
    """Human status of a field in the tracking block."""

    PROVIDED = "PROVIDED"
    LIKELY_PROVIDED = "LIKELY PROVIDED"
    UNAVAILABLE = "MARKED UNAVAILABLE"
    MISSING = "MISSING"


class MatchResult(BaseModel):
    """Outcome of matching one canonical field against the flattened facts."""

    field: str
    kind: MatchKind = MatchKind.UNMATCHED
    key: str | None = Field(default=None, description="Flattened key that matched")
    value: Any = None
    sentinel: bool = Field(
        default=False, description="A matching key held a sentinel value"
    )

    @property
    def matched(self) -> bool:
        return self.kind != MatchKind.UNMATCHED

    @property
    def status(self) -> FieldStatus:
        if self.kind == MatchKind.DIRECT:
            return FieldStatus.PROVIDED
        if self.kind == MatchKind.SEMANTIC:
            return FieldStatus.LIKELY_PROVIDED
        if self.sentinel:
            return FieldStatus.UNAVAILABLE
        return FieldStatus.MISSING


class GroupCompletion(BaseModel):
    """Match results for one tier of the schema."""

    group: FieldGroup
    matches: list[MatchResult] = Field(default_factory=list)

    @property
    def complete(self) -> int:
        return sum(1 for m in self.matches if m.matched)

    @property
    def total(self) -> int:
        return len(self.matches)

    @property
    def missing(self) -> list[str]:
        """Unmatched fields, excluding those marked unavailable."""
        return [m.field for m in self.matches if not m.matched and not m.sentinel]


class CompletionReport(BaseModel):
    """How much of a schema the collected facts cover."""

    essential: GroupCompletion
    important: GroupCompletion
    optional: GroupCompletion
    fraction: float = Field(..., ge=0.0, le=1.0)
    percentage: int = Field(..., ge=0, le=100)
    is_ready: bool
    formatted_status: str = ""

    @property
    def groups(self) -> list[GroupCompletion]:
        return [self.essential, self.important, self.optional]

    @property
    def missing_fields(self) -> list[str]:
        return [name for group in self.groups for name in group.missing]


class TurnOutcome(str, Enum):
    """How a turn's result was produced."""

    OK = "ok"
    MALFORMED = "malformed"
    TIMEOUT = "timeout"
    INITIAL_ENTRY = "initial_entry"


class TurnResult(BaseModel):
    """Reconciled, caller-facing outcome of one dialog turn.

    Serializes with the camelCase names the workflow layer expects; see
    to_payload for the dual completion flag.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    is_complete: bool
    collected_information: dict[str, Any] = Field(default_factory=dict)
    next_question: str | None = None
    suggested_next_step: str | None = None
    ready_to_generate: bool | None = None
    completion_percentage: int | None = None
    missing_fields: list[str] | None = None
    mode: str | None = None
    selected_workflow: str | None = None
    conversational_response: str | None = None
    api_response: str = ""
    outcome: TurnOutcome = TurnOutcome.OK

    def to_payload(self) -> dict[str, Any]:
        """Dump with camelCase keys, carrying both completion flag names."""
        payload = self.model_dump(by_alias=True, mode="json")
        payload["isStepComplete"] = self.is_complete
        return payload


class DialogTurn(BaseModel):
    """Everything a caller gets back from one orchestrated turn."""

    result: TurnResult
    instructions: str | None = Field(
        default=None, description="Instruction text sent to the model this turn"
    )
    report: CompletionReport | None = Field(
        default=None,
        description="Completion state of the merged facts; its formatted_status "
        "is the tracking block of the next prompt",
    )
