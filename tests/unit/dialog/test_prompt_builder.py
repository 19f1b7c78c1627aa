"""Unit tests for dialog instruction building."""

from collections.abc import Callable

import pytest

from factfinder.config.models.dialog import DialogConfig
from factfinder.conversation.models import HistoryTurn
from factfinder.dialog.models import CompletionReport, FieldSchema
from factfinder.dialog.prompt_builder import DialogPromptBuilder
from factfinder.dialog.tracker import InformationTracker
from factfinder.workflow.models import DialogStep


def _report(facts: dict, schema: FieldSchema | None = None) -> CompletionReport:
    return InformationTracker().track(facts, schema or FieldSchema(essential=("companyName",)))


@pytest.fixture
def builder() -> DialogPromptBuilder:
    return DialogPromptBuilder()


class TestTemplateSelection:
    """Tests for picking the prompt variant."""

    def test_variants(
        self, builder: DialogPromptBuilder, make_step: Callable[..., DialogStep]
    ) -> None:
        assert builder.template_for(make_step("Workflow Selection")) == "workflow_selection.jinja2"
        assert builder.template_for(make_step("Thread Title and Summary")) == "thread_title.jinja2"
        assert (
            builder.template_for(make_step("Information Collection", base_instructions="Ask."))
            == "collection.jinja2"
        )
        assert builder.template_for(make_step("Information Collection")) == "tracking.jinja2"
        assert builder.template_for(make_step("Asset Review")) == "tracking.jinja2"


class TestBuild:
    """Tests for DialogPromptBuilder.build."""

    def test_tracking_prompt(
        self, builder: DialogPromptBuilder, make_step: Callable[..., DialogStep]
    ) -> None:
        """The default prompt carries goal, facts, tracking block and input."""
        facts = {"companyName": "Acme"}
        step = make_step("Information Collection", goal="Collect launch details", facts=facts)

        prompt = builder.build(step, facts, "We launch Rocket", _report(facts))

        assert prompt.startswith("GOAL: Collect launch details")
        assert "PRIORITY INSTRUCTIONS:" in prompt
        assert '"companyName": "Acme"' in prompt
        assert "INFORMATION TRACKING STATUS:" in prompt
        assert "- companyName: PROVIDED ✓ (Acme)" in prompt
        assert 'CURRENT USER INPUT:\n"We launch Rocket"' in prompt
        assert '"completionPercentage": 70' in prompt

    def test_default_goal(
        self, builder: DialogPromptBuilder, make_step: Callable[..., DialogStep]
    ) -> None:
        prompt = builder.build(make_step("Asset Review"), {}, "hi", _report({}))

        assert prompt.startswith(f"GOAL: {DialogConfig().default_goal}")

    def test_readiness_percent_from_config(self, make_step: Callable[..., DialogStep]) -> None:
        builder = DialogPromptBuilder(DialogConfig(readiness_threshold=0.6))

        prompt = builder.build(make_step("Asset Review"), {}, "hi", _report({}))

        assert "After collecting 60% or more of essential information" in prompt

    def test_restricted_facts_not_sent(
        self, builder: DialogPromptBuilder, make_step: Callable[..., DialogStep]
    ) -> None:
        facts = {"companyName": "Acme", "searchResults": {"secret": "article body"}}

        prompt = builder.build(make_step("Asset Review"), facts, "hi", _report(facts))

        assert "article body" not in prompt
        assert "searchResults" not in prompt

    def test_history_rendered(
        self, builder: DialogPromptBuilder, make_step: Callable[..., DialogStep]
    ) -> None:
        history = HistoryTurn.from_alternating(["I run Acme", "What are you announcing?"])

        prompt = builder.build(make_step("Asset Review"), {}, "A rocket", _report({}), history)

        assert "CONVERSATION HISTORY (for context only):" in prompt
        assert "User: I run Acme\nAssistant: What are you announcing?" in prompt
        assert "avoid asking for information that has already been provided" in prompt

    def test_history_window(self, make_step: Callable[..., DialogStep]) -> None:
        """Only the most recent turns are included."""
        builder = DialogPromptBuilder(DialogConfig(max_history_turns=1))
        history = HistoryTurn.from_alternating(["first message", "second message"])

        prompt = builder.build(make_step("Asset Review"), {}, "now", _report({}), history)

        assert "first message" not in prompt
        assert "Assistant: second message" in prompt

    def test_no_history_section_without_history(
        self, builder: DialogPromptBuilder, make_step: Callable[..., DialogStep]
    ) -> None:
        prompt = builder.build(make_step("Asset Review"), {}, "hi", _report({}))

        assert "CONVERSATION HISTORY" not in prompt

    def test_workflow_selection_lists_options(
        self, builder: DialogPromptBuilder, make_step: Callable[..., DialogStep]
    ) -> None:
        step = make_step("Workflow Selection", options=["Press Release", "Media List Generator"])

        prompt = builder.build(step, {}, "I need a PR", _report({}))

        assert 'AVAILABLE WORKFLOWS:\n- "Press Release"\n- "Media List Generator"' in prompt
        assert '"mode": "workflow_selection"' in prompt
        assert '"mode": "conversational"' in prompt

    def test_thread_title_prompt(
        self, builder: DialogPromptBuilder, make_step: Callable[..., DialogStep]
    ) -> None:
        prompt = builder.build(make_step("Thread Title and Summary"), {}, "Q3 launch", _report({}))

        assert '"threadTitle": "EXACT TITLE FROM USER"' in prompt
        assert '"Q3 launch"' in prompt

    def test_collection_prompt_with_context(
        self, builder: DialogPromptBuilder, make_step: Callable[..., DialogStep]
    ) -> None:
        """Base instructions get the sanitized prior context and collect-only rules."""
        facts = {"selectedWorkflow": "Press Release", "articles": ["body"]}
        step = make_step("Information Collection", base_instructions="Collect PR details.")

        prompt = builder.build(step, facts, "hello", _report(facts))

        assert prompt.startswith("Collect PR details.")
        assert "CONTEXT FROM PREVIOUS STEPS (SANITIZED):" in prompt
        assert '"selectedWorkflow": "Press Release"' in prompt
        assert '"articles"' not in prompt
        assert "DO NOT generate any assets" in prompt

    def test_collection_prompt_without_context(
        self, builder: DialogPromptBuilder, make_step: Callable[..., DialogStep]
    ) -> None:
        step = make_step("Information Collection", base_instructions="Collect PR details.")

        prompt = builder.build(step, {}, "hello", _report({}))

        assert prompt == "Collect PR details."
