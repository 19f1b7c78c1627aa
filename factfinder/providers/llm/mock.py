"""Mock LLM provider for testing."""

from typing import Any

from factfinder.providers.llm.base import LLMMessage, LLMProvider, LLMResponse


class MockLLMProvider(LLMProvider):
    """Mock LLM provider for testing.

    Returns configurable responses without making actual API calls.
    Responses are looked up by the content of the last message; queued
    responses are served first, in order.
    """

    def __init__(
        self,
        default_response: str = "Mock response",
        default_model: str = "mock-model",
        responses: dict[str, str] | None = None,
    ):
        """Initialize mock provider.

        Args:
            default_response: Response to return when no match found
            default_model: Model name to report
            responses: Dict mapping last message content to responses
        """
        self._default_response = default_response
        self._default_model = default_model
        self._responses = responses or {}
        self._queue: list[str] = []
        self._call_history: list[dict[str, Any]] = []

    @property
    def provider_name(self) -> str:
        return "mock"

    @property
    def call_history(self) -> list[dict[str, Any]]:
        """Return history of calls for testing assertions."""
        return self._call_history

    def clear_history(self) -> None:
        self._call_history.clear()

    def set_response(self, trigger: str, response: str) -> None:
        """Set a response for a specific message content."""
        self._responses[trigger] = response

    def queue_response(self, response: str) -> None:
        """Queue a response for the next call regardless of content."""
        self._queue.append(response)

    async def generate(
        self,
        messages: list[LLMMessage],
        *,
        model: str | None = None,
        max_tokens: int = 1024,
        temperature: float = 0.7,
        stop_sequences: list[str] | None = None,
        **kwargs: Any,
    ) -> LLMResponse:
        """Generate mock response."""
        self._call_history.append({
            "messages": messages,
            "model": model or self._default_model,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "stop_sequences": stop_sequences,
            "kwargs": kwargs,
        })

        if self._queue:
            content = self._queue.pop(0)
        else:
            content = self._default_response
            if messages and messages[-1].content in self._responses:
                content = self._responses[messages[-1].content]

        prompt_tokens = sum(len(m.content) // 4 for m in messages)
        return LLMResponse(
            content=content,
            model=model or self._default_model,
            finish_reason="stop",
            usage={
                "prompt_tokens": prompt_tokens,
                "completion_tokens": len(content) // 4,
                "total_tokens": prompt_tokens + len(content) // 4,
            },
        )
