"""LLM providers for dialog turns.

The primary interface is LLMExecutor, which:
- Takes a model string (e.g., "openrouter/anthropic/claude-3-haiku")
- Routes to the appropriate API via Agno model classes
- Supports fallback chains
"""

from factfinder.providers.llm.base import (
    AuthenticationError,
    LLMMessage,
    LLMProvider,
    LLMResponse,
    ModelError,
    ProviderError,
    RateLimitError,
    TokenUsage,
)
from factfinder.providers.llm.executor import (
    LLMExecutor,
    create_executor,
    create_executor_from_config,
)
from factfinder.providers.llm.mock import MockLLMProvider

__all__ = [
    # Data models
    "LLMMessage",
    "LLMResponse",
    "TokenUsage",
    "LLMProvider",
    # Errors
    "ProviderError",
    "AuthenticationError",
    "RateLimitError",
    "ModelError",
    # Executor
    "LLMExecutor",
    "create_executor",
    "create_executor_from_config",
    # Testing
    "MockLLMProvider",
]
