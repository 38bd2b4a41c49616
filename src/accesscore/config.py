"""Configuration contract for the authorization core.

Pydantic-validated settings shared by every service embedding accesscore.
Direct os.environ/os.getenv usage is limited to :func:`load_config_from_env`;
all other code receives an :class:`AccessControlConfig` instance.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from .exceptions import ConfigurationError


class LogLevel(str, Enum):
    """Standard log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class AccessControlConfig(BaseModel):
    """Configuration for :class:`~accesscore.service.AccessControlService`.

    When ``enabled`` is False, fixed role declaration and registration are
    no-ops. Callers are expected to bypass evaluation entirely in that case.
    """

    enabled: bool = Field(
        default=False,
        description="Enable role based access control. Disabled = registration is a no-op.",
    )

    # Logging
    log_level: LogLevel = Field(
        default=LogLevel.INFO,
        description="Logging level for the service",
    )
    log_json: bool = Field(
        default=False,
        description="Use JSON log format (default: plain text)",
    )

    service_name: Optional[str] = Field(
        default=None,
        description="Service name used as logger name for observability",
    )

    # Permission store
    store_timeout_seconds: Optional[float] = Field(
        default=None,
        description="Upper bound for a permission store round-trip. None = no timeout.",
    )

    @field_validator("store_timeout_seconds")
    @classmethod
    def validate_store_timeout(cls, v: Optional[float]) -> Optional[float]:
        """Timeout must be strictly positive when set."""
        if v is not None and v <= 0:
            raise ValueError("Store timeout must be greater than zero")
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: str | LogLevel) -> LogLevel:
        """Convert string to LogLevel enum."""
        if isinstance(v, LogLevel):
            return v
        if isinstance(v, str):
            try:
                return LogLevel[v.upper()]
            except KeyError:
                raise ValueError(f"Invalid log level: {v}. Must be one of {[e.value for e in LogLevel]}")
        raise ValueError(f"Log level must be string or LogLevel enum, got {type(v)}")

    model_config = {
        "use_enum_values": True,
        "extra": "forbid",
    }


_TRUTHY = ("true", "1", "yes", "on")


def load_config_from_env() -> AccessControlConfig:
    """Load configuration from environment variables.

    This is the ONLY place where os.getenv is allowed for accesscore settings.

    Environment variables:
    - ACCESSCONTROL_ENABLED: Enable access control (true/false, default: false)
    - ACCESSCONTROL_STORE_TIMEOUT: Store round-trip timeout in seconds
    - LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    - LOG_JSON: Use JSON log format (true/false, default: false)
    - SERVICE_NAME: Service name for logging

    Returns:
        AccessControlConfig instance with values from environment or defaults.

    Raises:
        ConfigurationError: ACCESSCONTROL_STORE_TIMEOUT is not a number.
    """
    import os

    timeout_raw = os.getenv("ACCESSCONTROL_STORE_TIMEOUT", "").strip()
    try:
        store_timeout = float(timeout_raw) if timeout_raw else None
    except ValueError as e:
        raise ConfigurationError(
            f"ACCESSCONTROL_STORE_TIMEOUT must be a number of seconds, got {timeout_raw!r}",
            variable="ACCESSCONTROL_STORE_TIMEOUT",
        ) from e

    return AccessControlConfig(
        enabled=os.getenv("ACCESSCONTROL_ENABLED", "false").lower() in _TRUTHY,
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        log_json=os.getenv("LOG_JSON", "false").lower() in _TRUTHY,
        service_name=os.getenv("SERVICE_NAME"),
        store_timeout_seconds=store_timeout,
    )


__all__ = [
    "AccessControlConfig",
    "LogLevel",
    "load_config_from_env",
]
