"""Conversation transcript: models and stores."""

from factfinder.conversation.models import (
    SYSTEM_AUTHOR_ID,
    HistoryTurn,
    MessageKind,
    MessageRole,
    TranscriptMessage,
)
from factfinder.conversation.store import TranscriptStore

__all__ = [
    "SYSTEM_AUTHOR_ID",
    "HistoryTurn",
    "MessageKind",
    "MessageRole",
    "TranscriptMessage",
    "TranscriptStore",
]
