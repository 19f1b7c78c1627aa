"""Unit tests for Settings class and get_settings function."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from factfinder.config import get_settings, reload_settings
from factfinder.config.models.dialog import CompletionWeights, DialogConfig
from factfinder.config.settings import Settings


@pytest.fixture
def config_env(
    test_config_dir: Path, monkeypatch: pytest.MonkeyPatch
) -> Path:
    """Point the loader at an empty temporary config directory."""
    monkeypatch.setenv("FACTFINDER_CONFIG_DIR", str(test_config_dir))
    monkeypatch.setenv("FACTFINDER_ENV", "nonexistent")
    return test_config_dir


class TestSettings:
    """Tests for Settings defaults."""

    def test_default_values(self) -> None:
        settings = Settings()

        assert settings.app_name == "factfinder"
        assert settings.debug is False
        assert settings.log_level == "INFO"

    def test_dialog_defaults(self) -> None:
        dialog = Settings().dialog

        assert dialog.readiness_threshold == 0.7
        assert dialog.weights == CompletionWeights(essential=0.7, important=0.2, optional=0.1)
        assert dialog.sentinel_values == ["unknown", "unavailable"]
        assert dialog.preview_length == 30
        assert dialog.background_side_effects is False
        assert "Asset Generation" in dialog.generation_step_names

    def test_provider_and_observability_defaults(self) -> None:
        settings = Settings()

        assert settings.providers.llm.model.startswith("openrouter/")
        assert settings.providers.llm.fallback_models == []
        assert settings.observability.logging.format == "json"
        assert settings.observability.logging.redact_pii is True


class TestDialogConfigValidation:
    """Tests for dialog configuration constraints."""

    def test_weights_above_one_rejected(self) -> None:
        with pytest.raises(ValidationError, match="must not sum above 1.0"):
            CompletionWeights(essential=0.8, important=0.2, optional=0.1)

    def test_threshold_bounds(self) -> None:
        with pytest.raises(ValidationError):
            DialogConfig(readiness_threshold=1.5)

    def test_timeout_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            DialogConfig(model_timeout_seconds=0)


class TestGetSettings:
    """Tests for get_settings function."""

    def test_reads_toml(self, config_env: Path) -> None:
        (config_env / "default.toml").write_text(
            "app_name = 'test'\n[dialog]\nreadiness_threshold = 0.6\n"
        )

        settings = get_settings()

        assert settings.app_name == "test"
        assert settings.dialog.readiness_threshold == 0.6
        assert settings.dialog.preview_length == 30

    def test_settings_cached(self, config_env: Path) -> None:
        (config_env / "default.toml").write_text("app_name = 'cached'")

        assert get_settings() is get_settings()

    def test_reload_settings(self, config_env: Path) -> None:
        """reload_settings picks up changed files."""
        default_toml = config_env / "default.toml"
        default_toml.write_text("app_name = 'original'")
        assert get_settings().app_name == "original"

        default_toml.write_text("app_name = 'updated'")

        assert reload_settings().app_name == "updated"


class TestEnvironmentVariableOverrides:
    """Tests for FACTFINDER_* overrides."""

    def test_top_level_override(self, config_env: Path, env_override) -> None:
        (config_env / "default.toml").write_text("debug = false")

        with env_override({"FACTFINDER_DEBUG": "true"}):
            settings = get_settings()

        assert settings.debug is True

    def test_nested_override_wins_over_toml(self, config_env: Path, env_override) -> None:
        (config_env / "default.toml").write_text("[dialog]\nreadiness_threshold = 0.6\n")

        with env_override({"FACTFINDER_DIALOG__READINESS_THRESHOLD": "0.9"}):
            settings = get_settings()

        assert settings.dialog.readiness_threshold == 0.9

    def test_repo_config_loads(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """The shipped config directory produces valid settings."""
        config_dir = Path(__file__).resolve().parents[3] / "config"
        monkeypatch.setenv("FACTFINDER_CONFIG_DIR", str(config_dir))
        monkeypatch.setenv("FACTFINDER_ENV", "development")

        settings = get_settings()

        assert settings.app_name == "factfinder"
        assert settings.dialog.weights.essential == 0.7
