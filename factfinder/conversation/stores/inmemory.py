"""In-memory implementation of TranscriptStore."""

from uuid import UUID

from factfinder.conversation.models import TranscriptMessage
from factfinder.conversation.store import TranscriptStore


class InMemoryTranscriptStore(TranscriptStore):
    """In-memory implementation of TranscriptStore for testing and development.

    Not suitable for production use.
    """

    def __init__(self) -> None:
        self._threads: dict[str, list[TranscriptMessage]] = {}

    async def append(self, message: TranscriptMessage) -> UUID:
        self._threads.setdefault(message.thread_id, []).append(message)
        return message.message_id

    async def list_by_thread(
        self,
        thread_id: str,
        *,
        limit: int = 100,
    ) -> list[TranscriptMessage]:
        return list(self._threads.get(thread_id, []))[:limit]
