"""AI provider configuration models."""

from pydantic import BaseModel, Field


class LLMProviderConfig(BaseModel):
    """Configuration for the model that answers dialog turns.

    Model strings use the executor routing format, e.g.
    ``openrouter/anthropic/claude-3-haiku`` or ``mock/test``.
    """

    model: str = Field(
        default="openrouter/anthropic/claude-3-haiku-20240307",
        description="Primary model string",
    )
    fallback_models: list[str] = Field(
        default_factory=list,
        description="Models tried in order when the primary fails",
    )
    max_tokens: int = Field(default=2048, gt=0, description="Default max tokens")
    temperature: float = Field(
        default=0.3,
        ge=0.0,
        le=2.0,
        description="Sampling temperature",
    )
    timeout: float = Field(default=60.0, gt=0, description="Request timeout in seconds")


class ProvidersConfig(BaseModel):
    """Container for provider configuration sections."""

    llm: LLMProviderConfig = Field(default_factory=LLMProviderConfig)
