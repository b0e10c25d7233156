"""
Unit tests for configuration system.

Tests:
- Config singleton and defaults
- Path configuration
- Config validation
- Logging setup
"""

import logging

from src.config import Config, config, configure_logging


class TestConfig:
    """Test suite for Config class."""

    def test_config_singleton(self):
        """Test that Config implements singleton pattern."""
        assert Config() is Config()
        assert Config() is config

    def test_defaults(self):
        """Test that config initializes with expected tunables."""
        assert config.difficulty.trend_window == 5
        assert config.difficulty.trend_min_history == 10
        assert config.difficulty.trend_promote_accuracy == 0.9
        assert config.difficulty.trend_demote_accuracy == 0.5
        assert config.style.confidence_event_saturation == 20
        assert config.style.multimodal_threshold == 0.4
        assert config.style.profile_cache_size == 1024

    def test_paths_configured(self):
        """Test that all required paths are configured."""
        assert config.paths.profiles_dir.parent == config.paths.data_dir
        assert config.paths.sessions_dir.parent == config.paths.data_dir
        assert (config.paths.schemas_dir / "behavior_profile.schema.json").exists()
        assert (config.paths.schemas_dir / "difficulty_session.schema.json").exists()

    def test_default_config_is_valid(self):
        assert config.validate() == []

    def test_validation_detects_short_history(self):
        """Test that the history cap must cover the trend rule's minimum."""
        config.difficulty.history_limit = 5
        errors = config.validate()
        assert any("history_limit" in err for err in errors)

    def test_validation_detects_inverted_trend_thresholds(self):
        config.difficulty.trend_promote_accuracy = 0.4
        errors = config.validate()
        assert any("trend accuracies" in err for err in errors)

    def test_validation_detects_bad_recompute_interval(self):
        config.style.recompute_every = 0
        errors = config.validate()
        assert any("recompute_every" in err for err in errors)

    def test_validation_detects_empty_profile_cache(self):
        config.style.profile_cache_size = 0
        errors = config.validate()
        assert any("profile_cache_size" in err for err in errors)

    def test_validation_detects_unknown_log_level(self):
        original = config.logging.log_level
        config.logging.log_level = "CHATTY"
        try:
            assert any("log_level" in err for err in config.validate())
        finally:
            config.logging.log_level = original


class TestLogging:
    """Test logging setup."""

    def test_configure_logging_is_idempotent(self):
        configure_logging("DEBUG")
        handlers = list(logging.getLogger().handlers)
        configure_logging("DEBUG")
        assert logging.getLogger().handlers == handlers
