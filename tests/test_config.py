"""
Test suite for configuration and logging setup.
"""

import pytest
import structlog
from pydantic import ValidationError

from bundler.config import DEFAULT_RELAY_URL, RelayConfig, get_config, set_config
from bundler.log import setup_logging

from conftest import TEST_PRIVATE_KEY


# ============================================================================
# Test RelayConfig
# ============================================================================

class TestRelayConfig:
    """Tests for settings loading and validation."""

    def test_defaults(self, monkeypatch):
        """Test default settings without environment overrides."""
        for name in ("BUNDLER_RELAY_URL", "BUNDLER_SIGNING_KEY", "BUNDLER_SIMULATION_URL"):
            monkeypatch.delenv(name, raising=False)

        config = RelayConfig(_env_file=None)

        assert config.relay_url == DEFAULT_RELAY_URL
        assert config.signing_key is None
        assert config.simulation_endpoint == ""
        assert config.batch_max_workers == 1

    def test_environment_prefix(self, monkeypatch):
        """Test that BUNDLER_ environment variables are read."""
        monkeypatch.setenv("BUNDLER_SIGNING_KEY", TEST_PRIVATE_KEY)
        monkeypatch.setenv("BUNDLER_RELAY_NAME", "builder")
        monkeypatch.setenv("BUNDLER_SIMULATION_URL", "https://sim.example")
        monkeypatch.setenv("BUNDLER_REQUEST_TIMEOUT_SECONDS", "2.5")

        config = RelayConfig(_env_file=None)

        assert config.signing_key.get_secret_value() == TEST_PRIVATE_KEY
        assert config.relay_name == "builder"
        assert config.simulation_endpoint == "https://sim.example"
        assert config.request_timeout_seconds == 2.5

    def test_signing_key_is_masked(self, test_config):
        """Test that the key is not exposed in the config's repr."""
        assert TEST_PRIVATE_KEY not in repr(test_config)

    @pytest.mark.parametrize("field, value", [
        ("request_timeout_seconds", 0),
        ("max_connections", 0),
        ("batch_max_workers", 0),
    ])
    def test_validation(self, field, value):
        """Test that out-of-range values are rejected."""
        with pytest.raises(ValidationError):
            RelayConfig(_env_file=None, **{field: value})


class TestGlobalConfig:
    """Tests for the global configuration instance."""

    def test_set_and_get(self, test_config):
        """Test that set_config replaces the global instance."""
        other = test_config.model_copy(update={"relay_name": "other"})

        set_config(other)

        assert get_config() is other

    def test_lazy_default(self, monkeypatch):
        """Test that a config is created on first use."""
        monkeypatch.delenv("BUNDLER_RELAY_NAME", raising=False)
        set_config(None)

        config = get_config()

        assert isinstance(config, RelayConfig)
        assert get_config() is config


# ============================================================================
# Test Logging Setup
# ============================================================================

class TestSetupLogging:
    """Smoke tests for structlog configuration."""

    @pytest.fixture(autouse=True)
    def reset_structlog(self):
        yield
        structlog.reset_defaults()

    def test_console_logging(self):
        """Test configuring console output at the configured level."""
        setup_logging()

        assert structlog.is_configured()
        structlog.get_logger("test").info("console_event", key="value")

    def test_json_logging(self):
        """Test configuring JSON output with an explicit level."""
        setup_logging(level="warning", json_format=True)

        assert structlog.is_configured()
        structlog.get_logger("test").warning("json_event", key="value")
