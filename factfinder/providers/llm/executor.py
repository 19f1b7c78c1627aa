"""LLM Executor - executes dialog model calls using Agno.

The executor handles:
- Model selection and API routing based on model string prefix
- Fallback chain on failure (Agno doesn't have this natively)
- Latency metadata on every response

Uses Agno model classes internally:
- OpenRouter for openrouter/* models
- Claude for anthropic/* models
- OpenAIChat for openai/* models
- Groq for groq/* models
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Any

from factfinder.observability.logging import get_logger
from factfinder.providers.llm.base import (
    LLMMessage,
    LLMResponse,
    ProviderError,
    RateLimitError,
    TokenUsage,
)

if TYPE_CHECKING:
    from agno.agent import Agent

    from factfinder.config.models.providers import LLMProviderConfig

logger = get_logger(__name__)


class LLMExecutor:
    """Executes LLM calls using Agno.

    Model string format:
        openrouter/anthropic/claude-3-haiku -> OpenRouter(id="anthropic/claude-3-haiku")
        anthropic/claude-3-haiku -> Claude(id="claude-3-haiku")
        openai/gpt-4o -> OpenAIChat(id="gpt-4o")
        groq/llama-3.1-70b -> Groq(id="llama-3.1-70b")
        mock/test -> Mock response (for testing)

    Example:
        executor = LLMExecutor(
            model="openrouter/anthropic/claude-3-haiku-20240307",
            fallback_models=["anthropic/claude-3-haiku-20240307"],
        )

        response = await executor.generate(
            messages=[LLMMessage(role="user", content="Hello")],
        )
    """

    def __init__(
        self,
        model: str,
        fallback_models: list[str] | None = None,
        timeout: float = 60.0,
        step_name: str | None = None,
    ) -> None:
        """Initialize the executor.

        Args:
            model: Primary model string (e.g., 'openrouter/anthropic/claude-3-haiku')
            fallback_models: Models to try if primary fails
            timeout: Request timeout in seconds
            step_name: Name used in log events
        """
        self._model = model
        self._fallback_models = fallback_models or []
        self._timeout = timeout
        self._step_name = step_name

        # One Agno agent per model string
        self._agents: dict[str, Agent] = {}

    @property
    def model(self) -> str:
        """Primary model for this executor."""
        return self._model

    async def generate(
        self,
        messages: list[LLMMessage],
        *,
        max_tokens: int = 1024,
        temperature: float = 0.7,
        **kwargs: Any,
    ) -> LLMResponse:
        """Generate text from messages.

        Uses the primary model, falls back to fallback_models on failure.

        Raises:
            ProviderError: When every model in the chain failed
        """
        models_to_try = [self._model] + self._fallback_models
        last_error: Exception | None = None

        for model in models_to_try:
            try:
                return await self._generate_with_model(
                    model=model,
                    messages=messages,
                    max_tokens=max_tokens,
                    temperature=temperature,
                    **kwargs,
                )

            except RateLimitError as e:
                logger.warning(
                    "executor_rate_limited",
                    model=model,
                    step=self._step_name,
                    error=str(e),
                )
                last_error = e

            except ProviderError as e:
                logger.warning(
                    "executor_provider_error",
                    model=model,
                    step=self._step_name,
                    error=str(e),
                )
                last_error = e

        raise ProviderError(
            f"All models failed for step {self._step_name}. "
            f"Tried: {models_to_try}. Last error: {last_error}"
        )

    # ========================================================================
    # Internal: Agno-based execution
    # ========================================================================

    def _get_or_create_agent(self, model: str) -> Agent | None:
        """Get cached Agno agent or create new one for model."""
        if model in self._agents:
            return self._agents[model]

        agno_model = self._create_agno_model(model)
        if agno_model is None:
            return None

        from agno.agent import Agent

        agent = Agent(
            model=agno_model,
            num_history_messages=0,  # history is rendered into the instructions
            markdown=False,
        )
        self._agents[model] = agent
        return agent

    def _create_agno_model(self, model: str) -> Any:
        """Create Agno model class from model string. Returns None for mock models."""
        provider_type, api_model = self._parse_model(model)

        if provider_type == "openrouter":
            from agno.models.openrouter import OpenRouter

            return OpenRouter(id=api_model)

        elif provider_type == "anthropic":
            from agno.models.anthropic import Claude

            return Claude(id=api_model)

        elif provider_type == "openai":
            from agno.models.openai import OpenAIChat

            return OpenAIChat(id=api_model)

        elif provider_type == "groq":
            from agno.models.groq import Groq

            return Groq(id=api_model)

        elif provider_type == "mock":
            return None

        from agno.models.openrouter import OpenRouter

        logger.warning(
            "unknown_provider_defaulting_to_openrouter",
            model=model,
            provider_type=provider_type,
        )
        return OpenRouter(id=model)

    def _format_messages_for_agno(self, messages: list[LLMMessage]) -> str:
        """Convert non-system messages to Agno's single string input."""
        user_messages = [m for m in messages if m.role != "system"]

        if len(user_messages) == 1:
            return user_messages[0].content

        parts = []
        for msg in user_messages:
            if msg.role == "user":
                parts.append(f"User: {msg.content}")
            elif msg.role == "assistant":
                parts.append(f"Assistant: {msg.content}")
        return "\n\n".join(parts)

    def _get_system_prompt(self, messages: list[LLMMessage]) -> str | None:
        for msg in messages:
            if msg.role == "system":
                return msg.content
        return None

    async def _generate_with_model(
        self,
        model: str,
        messages: list[LLMMessage],
        max_tokens: int,  # noqa: ARG002
        temperature: float,  # noqa: ARG002
        **kwargs: Any,  # noqa: ARG002
    ) -> LLMResponse:
        """Execute generation with a specific model using Agno.

        max_tokens and temperature are part of the interface; Agno configures
        these at model creation time.
        """
        provider_type, _ = self._parse_model(model)

        agent = None if provider_type == "mock" else self._get_or_create_agent(model)
        if agent is None:
            return self._mock_response(model)

        input_text = self._format_messages_for_agno(messages)
        system_prompt = self._get_system_prompt(messages)
        if system_prompt:
            agent.instructions = [system_prompt]

        start_time = time.perf_counter()

        try:
            run_response = await agent.arun(input_text)
            content = run_response.content if run_response.content else ""
        except Exception as e:
            error_msg = str(e).lower()
            if "rate" in error_msg and "limit" in error_msg:
                raise RateLimitError(f"Rate limited: {e}") from e
            raise ProviderError(f"Agno execution failed: {e}") from e

        latency_ms = (time.perf_counter() - start_time) * 1000

        logger.debug(
            "executor_generate_complete",
            model=model,
            step=self._step_name,
            latency_ms=round(latency_ms, 2),
            content_length=len(content),
        )

        return LLMResponse(
            content=content,
            model=model,
            finish_reason="stop",
            metadata={
                "latency_ms": latency_ms,
                "model_requested": model,
                "provider": provider_type,
            },
        )

    def _mock_response(self, model: str) -> LLMResponse:
        """Generate a canned completion for mock/* models."""
        return LLMResponse(
            content=(
                '{"isComplete": false, "collectedInformation": {}, '
                f'"nextQuestion": "Mock response for {model}"}}'
            ),
            model=model,
            finish_reason="stop",
            usage=TokenUsage(prompt_tokens=10, completion_tokens=5, total_tokens=15),
        )

    def _parse_model(self, model: str) -> tuple[str, str]:
        """Parse model string into (provider_type, api_model).

        Examples:
            "openrouter/anthropic/claude-3-haiku" -> ("openrouter", "anthropic/claude-3-haiku")
            "anthropic/claude-3-haiku" -> ("anthropic", "claude-3-haiku")
            "mock/test" -> ("mock", "test")
        """
        parts = model.split("/")

        if len(parts) >= 3 and parts[0] == "openrouter":
            return "openrouter", "/".join(parts[1:])
        elif len(parts) >= 2:
            return parts[0], "/".join(parts[1:])
        else:
            return "mock", model


def create_executor(
    model: str,
    fallback_models: list[str] | None = None,
    step_name: str | None = None,
    timeout: float = 60.0,
) -> LLMExecutor:
    """Create an LLMExecutor with the given configuration."""
    return LLMExecutor(
        model=model,
        fallback_models=fallback_models,
        step_name=step_name,
        timeout=timeout,
    )


def create_executor_from_config(
    config: LLMProviderConfig,
    step_name: str = "json_dialog",
) -> LLMExecutor:
    """Create an LLMExecutor from the providers.llm configuration section."""
    return LLMExecutor(
        model=config.model,
        fallback_models=config.fallback_models,
        timeout=config.timeout,
        step_name=step_name,
    )
