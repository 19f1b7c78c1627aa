"""Resolve the field schema a step is tracked against."""

from factfinder.config.models.dialog import DialogConfig
from factfinder.dialog.models import FieldSchema
from factfinder.workflow.models import DialogStep

WORKFLOW_SELECTION_STEP = "Workflow Selection"
THREAD_TITLE_STEP = "Thread Title and Summary"

GENERIC_COLLECTION_SCHEMA = FieldSchema(
    essential=("companyName", "announcementType"),
    important=("productName", "keyFeatures"),
    optional=("contactInfo", "quote"),
)


class FieldSchemaResolver:
    """Picks a FieldSchema from the step name and metadata.

    Selection and title steps have fixed single-field schemas. Collection
    steps use their own tiers when they declare essential fields and fall
    back to a generic announcement schema otherwise. Every other step uses
    whatever tiers its metadata declares, possibly none.
    """

    def __init__(
        self,
        collection_markers: list[str] | None = None,
        generic_collection_schema: FieldSchema = GENERIC_COLLECTION_SCHEMA,
    ) -> None:
        self._collection_markers = collection_markers or DialogConfig().collection_step_markers
        self._generic = generic_collection_schema

    def is_collection_step(self, step: DialogStep) -> bool:
        return any(marker in step.name for marker in self._collection_markers)

    def resolve(self, step: DialogStep) -> FieldSchema:
        if step.name == WORKFLOW_SELECTION_STEP:
            return FieldSchema(essential=("selectedWorkflow",))
        if step.name == THREAD_TITLE_STEP:
            return FieldSchema(essential=("threadTitle",))

        declared = FieldSchema(
            essential=tuple(step.metadata.essential),
            important=tuple(step.metadata.important),
            optional=tuple(step.metadata.optional),
        )
        if self.is_collection_step(step) and not declared.essential:
            return self._generic
        return declared
