"""In-memory implementation of WorkflowStore."""

from uuid import UUID

from factfinder.workflow.models import DialogStep, StepMetadata, utc_now
from factfinder.workflow.store import WorkflowStore


class InMemoryWorkflowStore(WorkflowStore):
    """In-memory implementation of WorkflowStore for testing and development.

    Not suitable for production use.
    """

    def __init__(self) -> None:
        self._steps: dict[UUID, DialogStep] = {}
        self._threads: dict[UUID, str] = {}
        self.thread_lookups = 0

    def register_workflow(self, workflow_id: UUID, thread_id: str) -> None:
        self._threads[workflow_id] = thread_id

    async def get_step(self, step_id: UUID) -> DialogStep | None:
        return self._steps.get(step_id)

    async def save_step(self, step: DialogStep) -> UUID:
        step.updated_at = utc_now()
        self._steps[step.id] = step
        return step.id

    async def update_step_metadata(self, step_id: UUID, metadata: StepMetadata) -> bool:
        step = self._steps.get(step_id)
        if step is None:
            return False
        step.metadata = metadata
        step.updated_at = utc_now()
        return True

    async def get_thread_id(self, workflow_id: UUID) -> str | None:
        self.thread_lookups += 1
        return self._threads.get(workflow_id)
