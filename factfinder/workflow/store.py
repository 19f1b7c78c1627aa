"""WorkflowStore abstract interface."""

from abc import ABC, abstractmethod
from uuid import UUID

from factfinder.workflow.models import DialogStep, StepMetadata


class WorkflowStore(ABC):
    """Abstract interface for the steps and threads the engine reads.

    Durable storage is owned by the caller; the engine only marks the
    first-message flag and looks up the thread of a workflow.
    """

    @abstractmethod
    async def get_step(self, step_id: UUID) -> DialogStep | None:
        """Get a step by ID."""
        pass

    @abstractmethod
    async def save_step(self, step: DialogStep) -> UUID:
        """Save a step, returning its ID."""
        pass

    @abstractmethod
    async def update_step_metadata(self, step_id: UUID, metadata: StepMetadata) -> bool:
        """Replace a step's metadata. Returns False if the step is unknown."""
        pass

    @abstractmethod
    async def get_thread_id(self, workflow_id: UUID) -> str | None:
        """Get the conversation thread a workflow belongs to."""
        pass
