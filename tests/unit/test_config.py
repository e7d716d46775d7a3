"""
Unit tests for configuration.

Tests ConfigManager dot-notation access, validators, YAML loading and
metrics, plus the environment-driven Config class.
"""

import pytest

from refactor_rpg.core.config.config import Config, Environment
from refactor_rpg.core.config.errors import (
    ConfigInitializationError,
    ConfigValidationError,
)
from refactor_rpg.core.config.manager import ConfigManager


@pytest.fixture
def reload_config(monkeypatch):
    """Reload Config from a patched environment; restore it afterwards."""
    Config.reload()
    yield Config
    monkeypatch.undo()
    Config.reload()


@pytest.mark.unit
class TestConfigManagerAccess:
    """Test reads and writes."""

    def test_builtin_defaults(self, config_manager):
        assert config_manager.get("progression.xp_curve.base") == 100
        assert config_manager.get("progression.xp_curve.exponent") == 1.5
        assert config_manager.get("detection.dedup_window_ms") == 500
        assert config_manager.get("history.recent_limit") == 50
        assert config_manager.get("notifications.level_up") is True

    def test_missing_key_returns_default(self, config_manager):
        assert config_manager.get("nope.missing", "fallback") == "fallback"
        assert config_manager.get("progression.xp_curve.base.deeper") is None

    def test_sections_returned_as_copies(self, config_manager):
        curve = config_manager.get("progression.xp_curve")
        curve["base"] = 1

        assert config_manager.get("progression.xp_curve.base") == 100

    def test_set_creates_nested_sections(self, config_manager):
        config_manager.set("ui.panel.width", 320)

        assert config_manager.get("ui.panel.width") == 320
        assert "ui" in config_manager.get_all_keys()

    def test_set_through_leaf_rejected(self, config_manager):
        with pytest.raises(ConfigValidationError):
            config_manager.set("detection.dedup_window_ms.inner", 5)

    def test_constructor_defaults_merge(self):
        manager = ConfigManager(defaults={"progression": {"xp_curve": {"base": 50}}})

        assert manager.get("progression.xp_curve.base") == 50
        assert manager.get("progression.xp_curve.exponent") == 1.5


@pytest.mark.unit
class TestConfigManagerValidation:
    """Test validator hooks."""

    @pytest.mark.parametrize(
        "key, value",
        [
            ("progression.xp_curve.base", 0),
            ("progression.xp_curve.exponent", -1.5),
            ("detection.dedup_window_ms", 0),
            ("detection.dedup_window_ms", 2.5),
            ("history.recent_limit", True),
            ("notifications.xp_gain", "yes"),
        ],
    )
    def test_default_validators_reject(self, config_manager, key, value):
        # Arrange
        before = config_manager.get(key)

        # Act
        with pytest.raises(ConfigValidationError) as exc_info:
            config_manager.set(key, value)

        # Assert
        assert exc_info.value.key == key
        assert config_manager.get(key) == before

    def test_custom_validator_can_transform(self, config_manager):
        config_manager.register_validator("ui.theme", lambda value: str(value).lower())

        config_manager.set("ui.theme", "DARK")

        assert config_manager.get("ui.theme") == "dark"


@pytest.mark.unit
class TestConfigManagerYaml:
    """Test YAML directory loading."""

    def test_yaml_files_merged(self, tmp_path):
        # Arrange
        (tmp_path / "gameplay.yaml").write_text(
            "progression:\n  xp_curve:\n    base: 80\n", encoding="utf-8"
        )
        nested = tmp_path / "detection"
        nested.mkdir()
        (nested / "dedup.yml").write_text("detection:\n  dedup_window_ms: 750\n", encoding="utf-8")

        # Act
        manager = ConfigManager.from_directory(tmp_path)

        # Assert
        assert manager.get("progression.xp_curve.base") == 80
        assert manager.get("progression.xp_curve.exponent") == 1.5
        assert manager.get("detection.dedup_window_ms") == 750
        assert manager.get_metrics()["yaml_files_loaded"] == 2

    def test_broken_yaml_skipped(self, tmp_path):
        (tmp_path / "broken.yaml").write_text("progression: [unclosed\n", encoding="utf-8")
        (tmp_path / "list.yaml").write_text("- just\n- a list\n", encoding="utf-8")

        manager = ConfigManager.from_directory(tmp_path)

        assert manager.get("progression.xp_curve.base") == 100
        assert manager.get_metrics()["errors"] == 1

    def test_missing_directory(self, tmp_path):
        manager = ConfigManager.from_directory(tmp_path / "absent")

        assert manager.get("detection.dedup_window_ms") == 500

        with pytest.raises(ConfigInitializationError):
            ConfigManager.from_directory(tmp_path / "absent", strict=True)

    def test_metrics_hit_rate(self, config_manager):
        config_manager.get("detection.dedup_window_ms")
        config_manager.get("detection.missing")

        metrics = config_manager.get_metrics()

        assert metrics["gets"] == 2
        assert metrics["hits"] == 1
        assert metrics["misses"] == 1
        assert metrics["hit_rate"] == 50.0


@pytest.mark.unit
class TestEnvironmentConfig:
    """Test the environment-driven Config class."""

    def test_environment_parsing(self):
        assert Environment.from_string("PRODUCTION") is Environment.PRODUCTION
        assert Environment.from_string("staging") is Environment.DEVELOPMENT

    def test_dedup_window_from_env(self, monkeypatch, reload_config):
        monkeypatch.setenv("DEDUP_WINDOW_MS", "250")
        Config.reload()

        assert Config.DEDUP_WINDOW_MS == 250
        assert Config.is_set_from_env("DEDUP_WINDOW_MS")

    @pytest.mark.parametrize("raw", ["soon", "0", "999999"])
    def test_invalid_dedup_window_falls_back(self, monkeypatch, reload_config, raw):
        monkeypatch.setenv("DEDUP_WINDOW_MS", raw)
        Config.reload()

        assert Config.DEDUP_WINDOW_MS == 500
        assert not Config.is_set_from_env("DEDUP_WINDOW_MS")
        assert "DEDUP_WINDOW_MS" in Config.get_metrics().validation_errors

    def test_boolean_parsing(self, monkeypatch, reload_config):
        monkeypatch.setenv("LOG_COLORS", "off")
        monkeypatch.setenv("LOG_JSON", "yes")
        Config.reload()

        assert Config.LOG_COLORS is False
        assert Config.LOG_JSON is True

    def test_invalid_log_level_replaced(self, monkeypatch, reload_config):
        monkeypatch.setenv("LOG_LEVEL", "chatty")
        Config.reload()

        assert Config.LOG_LEVEL == "INFO"

    def test_testing_environment_active(self):
        assert Config.is_testing()
        assert Config.get_config_summary()["environment"] == "testing"
