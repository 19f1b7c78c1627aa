"""Step dialog orchestrator.

Runs one conversational turn for a workflow step: builds the instructions,
calls the model, repairs and reconciles its answer, recomputes completion on
the merged facts and surfaces generated assets to the transcript.
"""

import asyncio
import time
from collections.abc import Awaitable, Callable
from typing import Any
from uuid import UUID

from structlog.contextvars import bound_contextvars

from factfinder.config.models.dialog import DialogConfig
from factfinder.conversation.models import HistoryTurn, MessageKind, TranscriptMessage
from factfinder.conversation.store import TranscriptStore
from factfinder.dialog.assets import AssetExtractor, ExtractedAsset
from factfinder.dialog.exceptions import ContractViolationError
from factfinder.dialog.field_schemas import FieldSchemaResolver
from factfinder.dialog.model_client import DialogModel
from factfinder.dialog.models import (
    CompletionReport,
    DialogTurn,
    FieldSchema,
    TurnOutcome,
    TurnResult,
)
from factfinder.dialog.prompt_builder import DialogPromptBuilder
from factfinder.dialog.reconciler import FieldReconciler
from factfinder.dialog.repair import MalformedResponse, repair_response
from factfinder.dialog.tracker import InformationTracker
from factfinder.observability.logging import get_logger
from factfinder.observability.metrics import (
    COMPLETION_PERCENTAGE,
    CONTRACT_VIOLATIONS,
    MODEL_LATENCY,
    SIDE_EFFECT_FAILURES,
    TURNS_PROCESSED,
)
from factfinder.utils.cache import ExpiringCache
from factfinder.workflow.models import DialogStep
from factfinder.workflow.store import WorkflowStore

logger = get_logger(__name__)


class StepDialogOrchestrator:
    """Drives the collect-and-complete loop of a single step.

    Callers serialize turns per step and persist the returned facts. The
    orchestrator itself only writes the first-message marker through the
    workflow store and best-effort notices to the transcript store.
    """

    def __init__(
        self,
        model: DialogModel,
        transcript_store: TranscriptStore,
        workflow_store: WorkflowStore,
        config: DialogConfig | None = None,
        schema_resolver: FieldSchemaResolver | None = None,
        prompt_builder: DialogPromptBuilder | None = None,
        tracker: InformationTracker | None = None,
        reconciler: FieldReconciler | None = None,
        asset_extractor: AssetExtractor | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            model: Produces raw response text for a turn
            transcript_store: Receives progress notices and asset messages
            workflow_store: Step metadata writes and thread lookups
            config: Dialog configuration
            schema_resolver: Field schema used when the caller passes none
            prompt_builder: Instruction text builder
            tracker: Completion tracker
            reconciler: Response reconciler
            asset_extractor: Asset detection for generation steps
            clock: Monotonic clock for the thread cache
        """
        self._model = model
        self._transcripts = transcript_store
        self._workflows = workflow_store
        self._config = config or DialogConfig()
        self._schema_resolver = schema_resolver or FieldSchemaResolver(
            self._config.collection_step_markers
        )
        self._prompt_builder = prompt_builder or DialogPromptBuilder(
            self._config, self._schema_resolver
        )
        self._tracker = tracker or InformationTracker.from_config(self._config)
        self._reconciler = reconciler or FieldReconciler()
        self._assets = asset_extractor or AssetExtractor(self._config)
        self._thread_cache: ExpiringCache[UUID, str] = ExpiringCache(
            self._config.thread_cache_ttl_seconds, clock=clock
        )
        self._pending: set[asyncio.Task[None]] = set()

    async def process_message(
        self,
        step: DialogStep,
        user_input: str,
        history: list[HistoryTurn] | None = None,
        field_schema: FieldSchema | None = None,
        thread_id: str | None = None,
    ) -> DialogTurn:
        """Process one user message for a step.

        Args:
            step: Step being driven; its metadata holds the facts so far
            user_input: Current user input, possibly empty
            history: Prior turns, oldest first
            field_schema: Schema to track; resolved from the step when omitted
            thread_id: Transcript thread; looked up from the workflow when omitted

        Returns:
            DialogTurn with the reconciled result, the instructions sent and
            the completion report of the merged facts

        Raises:
            ContractViolationError: The model response had no completion flag
            ProviderError: The model call failed
        """
        with bound_contextvars(step_id=str(step.id), step_name=step.name):
            return await self._process(step, user_input, history, field_schema, thread_id)

    async def drain(self) -> None:
        """Wait for background side effects scheduled so far."""
        if self._pending:
            await asyncio.gather(*list(self._pending))

    def is_generation_step(self, step: DialogStep) -> bool:
        return step.name in self._config.generation_step_names

    async def _process(
        self,
        step: DialogStep,
        user_input: str,
        history: list[HistoryTurn] | None,
        field_schema: FieldSchema | None,
        thread_id: str | None,
    ) -> DialogTurn:
        logger.info(
            "dialog_turn_started",
            history_length=len(history or []),
            input_length=len(user_input),
        )
        previous_facts = step.snapshot_facts()

        if self.is_generation_step(step) and self._config.internal_marker not in user_input:
            user_input = (
                f"{user_input}\n\n{self._config.internal_marker}: "
                f"{self._config.internal_marker_text}"
            )
            await self._post_message(
                step, thread_id, self._config.progress_notice, MessageKind.PROGRESS
            )

        schema = field_schema or self._schema_resolver.resolve(step)
        prior_report = self._tracker.track(previous_facts, schema)

        if not step.metadata.processed_first_message and not user_input.strip():
            return await self._initial_entry(step, previous_facts, prior_report)

        instructions = self._prompt_builder.build(
            step, previous_facts, user_input, prior_report, history
        )

        try:
            raw_text = await self._call_model(step, instructions, user_input)
        except TimeoutError:
            logger.warning(
                "dialog_model_timeout",
                timeout_seconds=self._config.model_timeout_seconds,
            )
            return self._fallback(
                step, previous_facts, prior_report, instructions, TurnOutcome.TIMEOUT
            )

        parsed = repair_response(raw_text)
        if isinstance(parsed, MalformedResponse):
            return self._fallback(
                step, previous_facts, prior_report, instructions, TurnOutcome.MALFORMED, raw_text
            )

        payload = self._assets.strip_premature_asset(step, parsed.payload)
        try:
            result = self._reconciler.reconcile(payload, previous_facts, raw_text)
        except ContractViolationError as e:
            CONTRACT_VIOLATIONS.labels(step_type=step.step_type.value).inc()
            logger.error(
                "dialog_contract_violation",
                error=e.message,
                response_keys=e.response_keys,
            )
            raise

        if result.is_complete:
            asset = self._assets.extract(
                step, payload, result.collected_information, previous_facts
            )
            if asset is not None:
                await self._surface_asset(step, thread_id, asset)
                result.collected_information["asset"] = asset.content
                result.collected_information["assetType"] = asset.asset_type

        report = self._tracker.track(result.collected_information, schema)
        result = result.model_copy(
            update={
                "completion_percentage": report.percentage,
                "missing_fields": report.missing_fields,
                "ready_to_generate": bool(result.ready_to_generate) or report.is_ready,
            }
        )

        TURNS_PROCESSED.labels(step_type=step.step_type.value, outcome=result.outcome.value).inc()
        COMPLETION_PERCENTAGE.labels(step_type=step.step_type.value).observe(report.percentage)
        logger.info(
            "dialog_turn_processed",
            is_complete=result.is_complete,
            completion_percentage=report.percentage,
            ready_to_generate=result.ready_to_generate,
            missing_fields=report.missing_fields,
        )
        return DialogTurn(result=result, instructions=instructions, report=report)

    async def _initial_entry(
        self,
        step: DialogStep,
        previous_facts: dict[str, Any],
        report: CompletionReport,
    ) -> DialogTurn:
        """Answer the first, empty message with the step's static prompt."""
        logger.info("dialog_initial_entry")
        metadata = step.metadata.model_copy(update={"processed_first_message": True})
        step.metadata = metadata
        if not await self._workflows.update_step_metadata(step.id, metadata):
            logger.warning("step_metadata_not_persisted", reason="step_not_found")

        result = TurnResult(
            is_complete=False,
            collected_information=previous_facts,
            next_question=step.prompt or self._config.default_step_prompt,
            ready_to_generate=False,
            completion_percentage=report.percentage,
            missing_fields=report.missing_fields,
            outcome=TurnOutcome.INITIAL_ENTRY,
        )
        TURNS_PROCESSED.labels(step_type=step.step_type.value, outcome=result.outcome.value).inc()
        return DialogTurn(result=result, report=report)

    async def _call_model(self, step: DialogStep, instructions: str, user_input: str) -> str:
        start = time.perf_counter()
        try:
            return await asyncio.wait_for(
                self._model.generate_step_response(step, instructions, user_input),
                timeout=self._config.model_timeout_seconds,
            )
        except TimeoutError:
            raise
        except Exception as e:
            logger.error("dialog_model_call_failed", error=str(e))
            raise
        finally:
            MODEL_LATENCY.labels(step_type=step.step_type.value).observe(
                time.perf_counter() - start
            )

    def _fallback(
        self,
        step: DialogStep,
        previous_facts: dict[str, Any],
        report: CompletionReport,
        instructions: str,
        outcome: TurnOutcome,
        raw_text: str = "",
    ) -> DialogTurn:
        """Keep the facts and ask a generic clarification."""
        result = TurnResult(
            is_complete=False,
            collected_information=previous_facts,
            next_question=self._config.fallback_question,
            ready_to_generate=False,
            completion_percentage=report.percentage,
            missing_fields=report.missing_fields,
            api_response=raw_text,
            outcome=outcome,
        )
        TURNS_PROCESSED.labels(step_type=step.step_type.value, outcome=outcome.value).inc()
        logger.warning("dialog_turn_fallback", outcome=outcome.value)
        return DialogTurn(result=result, instructions=instructions, report=report)

    # ========================================================================
    # Transcript side effects
    # ========================================================================

    async def _resolve_thread(self, step: DialogStep, thread_id: str | None) -> str | None:
        if thread_id:
            return thread_id

        cached = self._thread_cache.get(step.workflow_id)
        if cached is not None:
            return cached

        try:
            resolved = await self._workflows.get_thread_id(step.workflow_id)
        except Exception as e:
            logger.error("thread_lookup_failed", workflow_id=str(step.workflow_id), error=str(e))
            return None

        if resolved:
            self._thread_cache.set(step.workflow_id, resolved)
        return resolved

    async def _surface_asset(
        self,
        step: DialogStep,
        thread_id: str | None,
        asset: ExtractedAsset,
    ) -> None:
        logger.info(
            "dialog_asset_generated",
            asset_type=asset.asset_type,
            asset_length=len(asset.content),
        )
        await self._post_message(
            step,
            thread_id,
            asset.content,
            MessageKind.ASSET,
            metadata={
                "assetType": asset.asset_type,
                "stepId": str(step.id),
                "stepName": step.name,
                "isRevision": step.is_revision,
                "showCreateButton": True,
            },
        )

    async def _post_message(
        self,
        step: DialogStep,
        thread_id: str | None,
        content: str,
        kind: MessageKind,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        """Append a system message to the step's thread, best-effort."""

        async def write() -> None:
            resolved = await self._resolve_thread(step, thread_id)
            if resolved is None:
                logger.warning("transcript_write_skipped", kind=kind.value, reason="no_thread")
                return
            await self._transcripts.append(
                TranscriptMessage(
                    thread_id=resolved,
                    content=content,
                    kind=kind,
                    metadata=metadata or {},
                )
            )
            logger.info("transcript_message_added", kind=kind.value, thread_id=resolved)

        if self._config.background_side_effects:
            task = asyncio.create_task(self._run_side_effect(kind, write))
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)
        else:
            await self._run_side_effect(kind, write)

    async def _run_side_effect(
        self,
        kind: MessageKind,
        effect: Callable[[], Awaitable[None]],
    ) -> None:
        try:
            await effect()
        except Exception as e:
            SIDE_EFFECT_FAILURES.labels(kind=kind.value).inc()
            logger.error("transcript_write_failed", kind=kind.value, error=str(e))
