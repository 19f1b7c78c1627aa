"""Dialog engine configuration models."""

from pydantic import BaseModel, Field, model_validator


class CompletionWeights(BaseModel):
    """Weights applied to each field tier when scoring completion.

    Weights are not renormalized when a tier declares no fields.
    """

    essential: float = Field(default=0.7, ge=0.0, le=1.0)
    important: float = Field(default=0.2, ge=0.0, le=1.0)
    optional: float = Field(default=0.1, ge=0.0, le=1.0)

    @model_validator(mode="after")
    def check_total(self) -> "CompletionWeights":
        total = self.essential + self.important + self.optional
        if total > 1.0 + 1e-9:
            raise ValueError(f"Completion weights must not sum above 1.0, got {total}")
        return self


class DialogConfig(BaseModel):
    """Configuration for the conversational collection engine."""

    weights: CompletionWeights = Field(
        default_factory=CompletionWeights,
        description="Per-tier completion weights",
    )
    readiness_threshold: float = Field(
        default=0.7,
        ge=0.0,
        le=1.0,
        description="Completion fraction at which generation may be suggested",
    )
    preview_length: int = Field(
        default=30,
        gt=0,
        description="Characters of a string value shown in tracking status",
    )
    sentinel_values: list[str] = Field(
        default_factory=lambda: ["unknown", "unavailable"],
        description="Values meaning 'known to be unknown'",
    )
    sentinel_case_sensitive: bool = Field(
        default=True,
        description="Compare sentinel values case-sensitively",
    )
    fallback_question: str = Field(
        default="I'm having trouble understanding. Could you please be more specific?",
        description="Question asked when the model response cannot be used",
    )
    default_step_prompt: str = Field(
        default="Please provide the requested information.",
        description="Opening question for steps without a static prompt",
    )
    default_goal: str = Field(
        default="Determine if user has selected a workflow type",
        description="Goal used when a step declares none",
    )
    progress_notice: str = Field(
        default="Generating your PR asset now. This may take a moment...",
        description="Transcript notice posted when generation starts",
    )
    internal_marker: str = Field(
        default="INTERNAL_SYSTEM_PROMPT",
        description="Marker appended to generation input to prevent re-triggering",
    )
    internal_marker_text: str = Field(
        default="This is the final user input for generating the press release.",
        description="Text following the internal marker",
    )
    generation_step_names: list[str] = Field(
        default_factory=lambda: ["Generate an Asset", "Asset Generation"],
        description="Step names treated as terminal generation steps",
    )
    collection_step_markers: list[str] = Field(
        default_factory=lambda: ["Information Collection", "Collection"],
        description="Name fragments identifying information collection steps",
    )
    collection_followup_question: str = Field(
        default=(
            "I need to collect more information about your announcement. Could you "
            "provide additional details about your company, the announcement, and "
            "any key messaging you'd like to include?"
        ),
        description="Replaces asset text a collection step produced too early",
    )
    default_asset_type: str = Field(default="Press Release")
    restricted_fact_keys: list[str] = Field(
        default_factory=lambda: [
            "searchResults",
            "authorResults",
            "articles",
            "articleData",
            "metabaseResults",
            "databaseResults",
            "newsData",
        ],
        description="Fact keys never sent to the model",
    )
    model_timeout_seconds: float = Field(
        default=60.0,
        gt=0,
        description="Upper bound on the model call before falling back",
    )
    max_history_turns: int = Field(
        default=20,
        ge=0,
        description="Prior turns included in the instruction text",
    )
    thread_cache_ttl_seconds: float = Field(
        default=300.0,
        gt=0,
        description="How long workflow thread lookups are cached",
    )
    background_side_effects: bool = Field(
        default=False,
        description="Schedule transcript writes as tasks instead of awaiting them",
    )
