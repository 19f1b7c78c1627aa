"""Configuration section models."""

from factfinder.config.models.dialog import CompletionWeights, DialogConfig
from factfinder.config.models.observability import LoggingConfig, ObservabilityConfig
from factfinder.config.models.providers import LLMProviderConfig, ProvidersConfig

__all__ = [
    "CompletionWeights",
    "DialogConfig",
    "LLMProviderConfig",
    "LoggingConfig",
    "ObservabilityConfig",
    "ProvidersConfig",
]
