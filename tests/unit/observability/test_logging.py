"""Tests for structured logging."""

import json
from collections.abc import Generator
from io import StringIO

import pytest
import structlog

from factfinder.observability.logging import (
    PIIRedactor,
    get_logger,
    setup_logging,
)


@pytest.fixture(autouse=True)
def reset_structlog() -> Generator[None, None, None]:
    yield
    structlog.contextvars.clear_contextvars()
    structlog.reset_defaults()


class TestSetupLogging:
    """Tests for setup_logging function."""

    def test_json_format_with_redaction(self) -> None:
        setup_logging(level="INFO", format="json", redact_pii=True)

        processors = structlog.get_config()["processors"]

        assert any(isinstance(p, PIIRedactor) for p in processors)
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)

    def test_console_format_without_redaction(self) -> None:
        setup_logging(level="DEBUG", format="console", redact_pii=False)

        processors = structlog.get_config()["processors"]

        assert not any(isinstance(p, PIIRedactor) for p in processors)
        assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)

    def test_logger_usable_after_setup(self) -> None:
        setup_logging(level="WARNING", format="json")

        get_logger("factfinder.test").info("dropped_below_level")


class TestContextBinding:
    """Tests for context binding via structlog.contextvars."""

    def test_bound_context_in_json_output(self) -> None:
        """Step identifiers bound for a turn appear on every event."""
        output = StringIO()
        structlog.configure(
            processors=[
                structlog.contextvars.merge_contextvars,
                structlog.processors.add_log_level,
                PIIRedactor(),
                structlog.processors.JSONRenderer(),
            ],
            wrapper_class=structlog.make_filtering_bound_logger(0),
            context_class=dict,
            logger_factory=structlog.PrintLoggerFactory(output),
            cache_logger_on_first_use=False,
        )

        with structlog.contextvars.bound_contextvars(step_name="Information Collection"):
            structlog.get_logger("test").info(
                "dialog_turn_processed", contactInfo="jane@acme.com", completion_percentage=70
            )

        parsed = json.loads(output.getvalue().strip())
        assert parsed["event"] == "dialog_turn_processed"
        assert parsed["step_name"] == "Information Collection"
        assert parsed["contactInfo"] == "[REDACTED]"
        assert parsed["completion_percentage"] == 70


class TestPIIRedactor:
    """Tests for PII redaction."""

    @pytest.fixture
    def redactor(self) -> PIIRedactor:
        return PIIRedactor()

    def test_redacts_sensitive_keys(self, redactor: PIIRedactor) -> None:
        event_dict = {"api_key": "sk-123", "contact_info": "Jane", "step_name": "Collection"}

        result = redactor(None, None, event_dict)  # type: ignore

        assert result["api_key"] == "[REDACTED]"
        assert result["contact_info"] == "[REDACTED]"
        assert result["step_name"] == "Collection"

    def test_key_match_is_case_insensitive(self, redactor: PIIRedactor) -> None:
        result = redactor(None, None, {"contactEmail": "x"})  # type: ignore

        assert result["contactEmail"] == "[REDACTED]"

    def test_redacts_patterns_in_values(self, redactor: PIIRedactor) -> None:
        """Emails and phone numbers typed into answers are masked."""
        event_dict = {"user_input": "Reach me at jane@acme.com or +1-555-123-4567"}

        result = redactor(None, None, event_dict)  # type: ignore

        assert result["user_input"] == "Reach me at [EMAIL] or [PHONE]"

    def test_nested_structures(self, redactor: PIIRedactor) -> None:
        event_dict = {
            "facts": {"companyName": "Acme", "quotes": ["mail jane@acme.com"]},
            "missing_fields": ["quote"],
        }

        result = redactor(None, None, event_dict)  # type: ignore

        assert result["facts"] == {"companyName": "Acme", "quotes": ["mail [EMAIL]"]}
        assert result["missing_fields"] == ["quote"]

    def test_preserves_non_pii_data(self, redactor: PIIRedactor) -> None:
        event_dict = {"event": "dialog_turn_processed", "completion_percentage": 55}

        assert redactor(None, None, event_dict) == event_dict  # type: ignore
