"""The model call behind a dialog turn."""

from typing import Protocol

from factfinder.observability.logging import get_logger
from factfinder.providers.llm import LLMExecutor, LLMMessage, LLMProvider
from factfinder.workflow.models import DialogStep

logger = get_logger(__name__)


class DialogModel(Protocol):
    """Anything that turns a step, instructions and user input into raw text."""

    async def generate_step_response(
        self,
        step: DialogStep,
        instructions: str,
        user_input: str,
    ) -> str: ...


class LLMDialogModel:
    """DialogModel backed by an LLMExecutor or an LLMProvider.

    Sends the instructions as the system message and the user input as the
    only user message; history is already part of the instructions.
    """

    def __init__(
        self,
        backend: LLMExecutor | LLMProvider,
        max_tokens: int = 2048,
        temperature: float = 0.3,
    ) -> None:
        self._backend = backend
        self._max_tokens = max_tokens
        self._temperature = temperature

    async def generate_step_response(
        self,
        step: DialogStep,
        instructions: str,
        user_input: str,
    ) -> str:
        messages = [
            LLMMessage(role="system", content=instructions),
            LLMMessage(role="user", content=user_input),
        ]
        response = await self._backend.generate(
            messages,
            max_tokens=self._max_tokens,
            temperature=self._temperature,
        )
        logger.debug(
            "dialog_model_responded",
            step_name=step.name,
            model=response.model,
            response_length=len(response.content),
        )
        return response.content
