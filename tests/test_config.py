"""Tests for AccessControlConfig."""

from __future__ import annotations

import os
from unittest.mock import patch

import pytest
from accesscore import AccessControlConfig, ConfigurationError, LogLevel, load_config_from_env


class TestAccessControlConfig:
    """Tests for AccessControlConfig model."""

    def test_create_default_config(self) -> None:
        """Test creating a config with defaults."""
        config = AccessControlConfig()
        assert config.enabled is False
        assert config.log_level == LogLevel.INFO
        assert config.log_json is False
        assert config.service_name is None
        assert config.store_timeout_seconds is None

    def test_create_custom_config(self) -> None:
        """Test creating a config with custom values."""
        config = AccessControlConfig(
            enabled=True,
            log_level=LogLevel.DEBUG,
            service_name="test-service",
            store_timeout_seconds=2.5,
        )
        assert config.enabled is True
        assert config.log_level == LogLevel.DEBUG
        assert config.service_name == "test-service"
        assert config.store_timeout_seconds == 2.5

    def test_log_level_from_string(self) -> None:
        """Test creating config with log level as string."""
        config = AccessControlConfig(log_level="debug")
        assert config.log_level == LogLevel.DEBUG

    def test_log_level_invalid(self) -> None:
        """Test creating config with invalid log level."""
        with pytest.raises(ValueError, match="Invalid log level"):
            AccessControlConfig(log_level="INVALID")

    def test_store_timeout_must_be_positive(self) -> None:
        for value in (0, -1.0):
            with pytest.raises(ValueError, match="greater than zero"):
                AccessControlConfig(store_timeout_seconds=value)

    def test_extra_fields_forbidden(self) -> None:
        with pytest.raises(ValueError):
            AccessControlConfig(unknown_field="value")  # type: ignore[call-arg]


class TestLoadConfigFromEnv:
    """Tests for load_config_from_env."""

    def test_defaults(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            config = load_config_from_env()
        assert config.enabled is False
        assert config.log_level == LogLevel.INFO
        assert config.store_timeout_seconds is None

    def test_from_env(self) -> None:
        env = {
            "ACCESSCONTROL_ENABLED": "true",
            "ACCESSCONTROL_STORE_TIMEOUT": "1.5",
            "LOG_LEVEL": "WARNING",
            "LOG_JSON": "yes",
            "SERVICE_NAME": "api",
        }
        with patch.dict(os.environ, env, clear=True):
            config = load_config_from_env()
        assert config.enabled is True
        assert config.store_timeout_seconds == 1.5
        assert config.log_level == LogLevel.WARNING
        assert config.log_json is True
        assert config.service_name == "api"

    def test_enabled_false_values(self) -> None:
        for value in ("false", "0", "no", ""):
            with patch.dict(os.environ, {"ACCESSCONTROL_ENABLED": value}, clear=True):
                assert load_config_from_env().enabled is False

    def test_store_timeout_not_a_number(self) -> None:
        with patch.dict(os.environ, {"ACCESSCONTROL_STORE_TIMEOUT": "soon"}, clear=True):
            with pytest.raises(ConfigurationError) as exc_info:
                load_config_from_env()
        assert exc_info.value.code == "CONFIGURATION_ERROR"
        assert exc_info.value.details == {"variable": "ACCESSCONTROL_STORE_TIMEOUT"}
        assert isinstance(exc_info.value.__cause__, ValueError)
