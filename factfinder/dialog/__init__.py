"""Conversational information collection and completion engine.

Repairs and reconciles model JSON, matches collected facts against a field
schema despite naming drift, scores completion and renders the tracking
block fed into the next prompt.
"""

from factfinder.dialog.assets import AssetExtractor, ExtractedAsset
from factfinder.dialog.exceptions import ContractViolationError, DialogError
from factfinder.dialog.field_schemas import FieldSchemaResolver
from factfinder.dialog.flatten import flatten_facts
from factfinder.dialog.matcher import FieldMatcher
from factfinder.dialog.model_client import DialogModel, LLMDialogModel
from factfinder.dialog.models import (
    CompletionReport,
    DialogTurn,
    FieldGroup,
    FieldSchema,
    FieldStatus,
    GroupCompletion,
    MatchKind,
    MatchResult,
    TurnOutcome,
    TurnResult,
)
from factfinder.dialog.orchestrator import StepDialogOrchestrator
from factfinder.dialog.prompt_builder import DialogPromptBuilder
from factfinder.dialog.reconciler import FieldReconciler
from factfinder.dialog.renderer import TrackingStatusRenderer
from factfinder.dialog.repair import (
    MalformedResponse,
    ParsedResponse,
    RepairResult,
    RepairStage,
    repair_response,
)
from factfinder.dialog.sanitizer import sanitize_for_model
from factfinder.dialog.scorer import CompletionScorer
from factfinder.dialog.selection import (
    WorkflowSelection,
    extract_workflow_selection,
    parse_workflow_selection,
)
from factfinder.dialog.tracker import InformationTracker

__all__ = [
    # Models
    "CompletionReport",
    "DialogTurn",
    "FieldGroup",
    "FieldSchema",
    "FieldStatus",
    "GroupCompletion",
    "MatchKind",
    "MatchResult",
    "TurnOutcome",
    "TurnResult",
    # Errors
    "DialogError",
    "ContractViolationError",
    # Repair
    "RepairStage",
    "ParsedResponse",
    "MalformedResponse",
    "RepairResult",
    "repair_response",
    # Tracking
    "flatten_facts",
    "FieldMatcher",
    "CompletionScorer",
    "TrackingStatusRenderer",
    "InformationTracker",
    "FieldSchemaResolver",
    # Turn processing
    "FieldReconciler",
    "sanitize_for_model",
    "DialogPromptBuilder",
    "AssetExtractor",
    "ExtractedAsset",
    "WorkflowSelection",
    "extract_workflow_selection",
    "parse_workflow_selection",
    "DialogModel",
    "LLMDialogModel",
    "StepDialogOrchestrator",
]
