"""Workflow store implementations."""

from factfinder.workflow.stores.inmemory import InMemoryWorkflowStore

__all__ = ["InMemoryWorkflowStore"]
