"""TranscriptStore abstract interface."""

from abc import ABC, abstractmethod
from uuid import UUID

from factfinder.conversation.models import TranscriptMessage


class TranscriptStore(ABC):
    """Abstract interface for the conversation transcript.

    The dialog engine only appends; reading is for callers and tests.
    """

    @abstractmethod
    async def append(self, message: TranscriptMessage) -> UUID:
        """Append a message to its thread, returning the message ID."""
        pass

    @abstractmethod
    async def list_by_thread(
        self,
        thread_id: str,
        *,
        limit: int = 100,
    ) -> list[TranscriptMessage]:
        """List messages of a thread in insertion order."""
        pass
