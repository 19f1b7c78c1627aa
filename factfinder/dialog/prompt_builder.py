"""Instruction text for dialog steps.

Renders the Jinja2 templates in ``prompts/``: one variant each for workflow
selection, thread titles, collection steps that bring their own base
instructions, and the default tracking prompt.
"""

import json
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, select_autoescape

from factfinder.config.models.dialog import DialogConfig
from factfinder.conversation.models import HistoryTurn, MessageRole
from factfinder.dialog.field_schemas import (
    THREAD_TITLE_STEP,
    WORKFLOW_SELECTION_STEP,
    FieldSchemaResolver,
)
from factfinder.dialog.models import CompletionReport
from factfinder.dialog.sanitizer import sanitize_for_model
from factfinder.workflow.models import DialogStep

_TEMPLATES_DIR = Path(__file__).parent / "prompts"


class DialogPromptBuilder:
    """Build the instruction text sent to the model for one turn."""

    def __init__(
        self,
        config: DialogConfig | None = None,
        schema_resolver: FieldSchemaResolver | None = None,
        templates_dir: Path = _TEMPLATES_DIR,
    ) -> None:
        """Initialize the prompt builder.

        Args:
            config: Dialog configuration (goal default, history window,
                restricted keys, readiness threshold)
            schema_resolver: Used to recognise collection steps
            templates_dir: Directory holding the .jinja2 templates
        """
        self._config = config or DialogConfig()
        self._schema_resolver = schema_resolver or FieldSchemaResolver(
            self._config.collection_step_markers
        )
        self._env = Environment(
            loader=FileSystemLoader(str(templates_dir)),
            autoescape=select_autoescape(["html", "xml"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )

    def template_for(self, step: DialogStep) -> str:
        """Name of the template used for a step."""
        if step.name == WORKFLOW_SELECTION_STEP:
            return "workflow_selection.jinja2"
        if step.name == THREAD_TITLE_STEP:
            return "thread_title.jinja2"
        if self._schema_resolver.is_collection_step(step) and step.metadata.base_instructions:
            return "collection.jinja2"
        return "tracking.jinja2"

    def build(
        self,
        step: DialogStep,
        facts: dict[str, Any],
        user_input: str,
        report: CompletionReport,
        history: list[HistoryTurn] | None = None,
    ) -> str:
        """Render the instructions for a turn.

        Args:
            step: Step being processed
            facts: Facts collected before this turn
            user_input: Current user input
            report: Completion report of the facts before this turn
            history: Prior turns, oldest first

        Returns:
            Instruction text
        """
        sanitized = sanitize_for_model(facts, self._config.restricted_fact_keys)
        context = {
            "goal": step.metadata.goal or self._config.default_goal,
            "user_input": user_input,
            "history": self._history_lines(history),
            "readiness_percent": round(self._config.readiness_threshold * 100),
            "options": step.metadata.options,
            "base_instructions": step.metadata.base_instructions or "",
            "context_json": _to_json(sanitized) if sanitized else "",
            "facts_json": _to_json(sanitized),
            "tracking_status": report.formatted_status,
            "completion_percentage": report.percentage,
        }
        template = self._env.get_template(self.template_for(step))
        return template.render(**context).strip()

    def _history_lines(self, history: list[HistoryTurn] | None) -> list[dict[str, str]]:
        if not history or self._config.max_history_turns == 0:
            return []
        window = history[-self._config.max_history_turns :]
        return [
            {
                "speaker": "User" if turn.role == MessageRole.USER else "Assistant",
                "content": turn.content,
            }
            for turn in window
        ]


def _to_json(value: Any) -> str:
    return json.dumps(value, indent=2, ensure_ascii=False, default=str)
