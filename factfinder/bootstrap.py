"""Bootstrap module for quick factfinder setup.

Builds a ready StepDialogOrchestrator from configuration, primarily for
notebooks and quick testing. Handles:
- Loading configuration from TOML files and FACTFINDER_* variables
- Configuring structlog
- Creating in-memory workflow and transcript stores
- Creating the LLM executor behind the dialog model

Example usage:

    from factfinder.bootstrap import bootstrap

    orchestrator, ctx = bootstrap(model="mock/dev")
    step = await ctx.new_step("Information Collection", essential=["companyName"])

    turn = await orchestrator.process_message(step, "We are Acme Corp")
"""

from dataclasses import dataclass
from uuid import UUID, uuid4

from factfinder.config import Settings, get_settings
from factfinder.conversation.stores.inmemory import InMemoryTranscriptStore
from factfinder.dialog.model_client import LLMDialogModel
from factfinder.dialog.orchestrator import StepDialogOrchestrator
from factfinder.observability.logging import get_logger, setup_logging
from factfinder.providers.llm import LLMExecutor, create_executor_from_config
from factfinder.workflow.models import DialogStep, StepMetadata
from factfinder.workflow.stores.inmemory import InMemoryWorkflowStore

logger = get_logger(__name__)


@dataclass
class BootstrapContext:
    """IDs and stores behind a bootstrapped orchestrator."""

    workflow_id: UUID
    thread_id: str
    workflow_store: InMemoryWorkflowStore
    transcript_store: InMemoryTranscriptStore
    executor: LLMExecutor
    settings: Settings

    async def new_step(
        self,
        name: str,
        prompt: str | None = None,
        essential: list[str] | None = None,
        important: list[str] | None = None,
        optional: list[str] | None = None,
    ) -> DialogStep:
        """Create and store a step in the bootstrapped workflow."""
        step = DialogStep(
            workflow_id=self.workflow_id,
            name=name,
            prompt=prompt,
            metadata=StepMetadata(
                essential=essential or [],
                important=important or [],
                optional=optional or [],
            ),
        )
        await self.workflow_store.save_step(step)
        return step


def bootstrap(
    model: str | None = None,
    log_level: str | None = None,
    workflow_id: UUID | None = None,
    thread_id: str | None = None,
) -> tuple[StepDialogOrchestrator, BootstrapContext]:
    """Bootstrap a fully-configured StepDialogOrchestrator.

    Args:
        model: Override providers.llm.model (e.g. "mock/dev")
        log_level: Override the configured log level
        workflow_id: Workflow the context creates steps in (default: random UUID)
        thread_id: Transcript thread of the workflow (default: random UUID)

    Returns:
        Tuple of (StepDialogOrchestrator, BootstrapContext)

    Environment variables used:
        FACTFINDER_ENV: Selects config/{env}.toml
        OPENROUTER_API_KEY: Required for OpenRouter models
    """
    settings = get_settings()
    logging_config = settings.observability.logging
    setup_logging(
        level=log_level or logging_config.level,
        format=logging_config.format,
        redact_pii=logging_config.redact_pii,
    )

    llm_config = settings.providers.llm
    if model:
        llm_config = llm_config.model_copy(update={"model": model})
    executor = create_executor_from_config(llm_config)

    workflow_store = InMemoryWorkflowStore()
    transcript_store = InMemoryTranscriptStore()
    _workflow_id = workflow_id or uuid4()
    _thread_id = thread_id or str(uuid4())
    workflow_store.register_workflow(_workflow_id, _thread_id)

    orchestrator = StepDialogOrchestrator(
        model=LLMDialogModel(
            executor,
            max_tokens=llm_config.max_tokens,
            temperature=llm_config.temperature,
        ),
        transcript_store=transcript_store,
        workflow_store=workflow_store,
        config=settings.dialog,
    )

    logger.info(
        "orchestrator_bootstrapped",
        model=llm_config.model,
        workflow_id=str(_workflow_id),
        app_name=settings.app_name,
    )

    ctx = BootstrapContext(
        workflow_id=_workflow_id,
        thread_id=_thread_id,
        workflow_store=workflow_store,
        transcript_store=transcript_store,
        executor=executor,
        settings=settings,
    )
    return orchestrator, ctx
