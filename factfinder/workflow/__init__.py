"""Workflow steps: models and stores."""

from factfinder.workflow.models import DialogStep, StepMetadata, StepStatus, StepType
from factfinder.workflow.store import WorkflowStore

__all__ = [
    "DialogStep",
    "StepMetadata",
    "StepStatus",
    "StepType",
    "WorkflowStore",
]
