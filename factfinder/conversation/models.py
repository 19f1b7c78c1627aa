"""Transcript domain models."""

from datetime import UTC, datetime
from enum import Enum
from typing import Any
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

SYSTEM_AUTHOR_ID = "system"


def utc_now() -> datetime:
    return datetime.now(UTC)


class MessageRole(str, Enum):
    """Who a transcript message is attributed to."""

    USER = "user"
    ASSISTANT = "assistant"


class MessageKind(str, Enum):
    """What a transcript message carries."""

    TEXT = "text"
    PROGRESS = "progress"
    ASSET = "asset"


class TranscriptMessage(BaseModel):
    """A message appended to a conversation thread."""

    message_id: UUID = Field(default_factory=uuid4)
    thread_id: str
    content: str
    role: MessageRole = MessageRole.ASSISTANT
    author_id: str = SYSTEM_AUTHOR_ID
    kind: MessageKind = MessageKind.TEXT
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=utc_now)


class HistoryTurn(BaseModel):
    """A prior turn shown to the model as conversation history."""

    role: MessageRole
    content: str

    @classmethod
    def from_alternating(cls, messages: list[str]) -> list["HistoryTurn"]:
        """Build turns from a flat list that alternates user and assistant."""
        return [
            cls(
                role=MessageRole.USER if i % 2 == 0 else MessageRole.ASSISTANT,
                content=content,
            )
            for i, content in enumerate(messages)
        ]
