"""Transcript store implementations."""

from factfinder.conversation.stores.inmemory import InMemoryTranscriptStore

__all__ = ["InMemoryTranscriptStore"]
