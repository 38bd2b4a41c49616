"""Centralized logging utilities for accesscore.

This module provides:
- Logging configuration from AccessControlConfig
- Safe preview utility for logged values
- Structured logging with principal context (org_id, user_id)
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

from .config import AccessControlConfig, LogLevel
from .models import Principal

_RESERVED_ATTRS = frozenset(
    {
        "name", "msg", "args", "created", "filename", "funcName",
        "levelname", "levelno", "lineno", "module", "msecs",
        "message", "pathname", "process", "processName", "relativeCreated",
        "thread", "threadName", "exc_info", "exc_text", "stack_info",
        "taskName", "org_id", "user_id",
    }
)


def safe_preview(value: Any, limit: int = 240) -> str:
    """Create a single-line, length-bounded preview of a value for logging.

    Args:
        value: The value to preview (any type)
        limit: Maximum length of the preview (default: 240)

    Returns:
        A truncated string representation
    """
    if value is None:
        return ""

    if isinstance(value, str):
        s = value
    elif isinstance(value, (dict, list, tuple, set, frozenset)):
        if isinstance(value, (set, frozenset)):
            value = sorted(value, key=str)
        try:
            s = json.dumps(value, default=str, ensure_ascii=False)
        except (TypeError, ValueError):
            s = str(value)
    else:
        s = str(value)

    s = " ".join(s.split())

    if len(s) > limit:
        return s[: limit - 1] + "…"

    return s


class AccessControlFormatter(logging.Formatter):
    """Formatter that includes principal context, as JSON or plain text."""

    def __init__(
        self,
        include_principal: bool = True,
        json_format: bool = True,
        *args: Any,
        **kwargs: Any,
    ):
        super().__init__(*args, **kwargs)
        self.include_principal = include_principal
        self.json_format = json_format

    def format(self, record: logging.LogRecord) -> str:
        org_id = getattr(record, "org_id", None)
        user_id = getattr(record, "user_id", None)

        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if self.include_principal:
            if org_id is not None:
                log_data["org_id"] = org_id
            if user_id is not None:
                log_data["user_id"] = user_id

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS:
                log_data[key] = safe_preview(value)

        if self.json_format:
            return json.dumps(log_data, default=str, ensure_ascii=False)

        parts = [
            f"[{log_data['timestamp']}]",
            f"{log_data['level']}",
            f"{log_data['logger']}",
        ]
        if "org_id" in log_data:
            parts.append(f"org_id={log_data['org_id']}")
        if "user_id" in log_data:
            parts.append(f"user_id={log_data['user_id']}")
        parts.append(f": {log_data['message']}")
        return " ".join(parts)


class PrincipalLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that adds org_id and user_id to log records.

    Usage:
        logger = get_principal_logger(__name__, principal)
        logger.info("Evaluating access")
    """

    def __init__(
        self,
        logger: logging.Logger,
        principal: Optional[Principal] = None,
    ):
        super().__init__(logger, {})
        self.principal = principal

    def process(self, msg: str, kwargs: Any) -> tuple[str, Any]:
        principal = kwargs.pop("principal", None) or self.principal
        extra = dict(kwargs.get("extra") or {})
        if principal is not None:
            extra.setdefault("org_id", principal.org_id)
            extra.setdefault("user_id", principal.user_id)
        kwargs["extra"] = extra
        return msg, kwargs


def setup_logging(
    config: Optional[AccessControlConfig] = None,
    json_format: Optional[bool] = None,
) -> None:
    """Configure the root logger from configuration.

    Args:
        config: AccessControlConfig (if None, loads from environment)
        json_format: Override ``config.log_json``
    """
    if config is None:
        from .config import load_config_from_env
        config = load_config_from_env()

    level_map = {
        LogLevel.DEBUG: logging.DEBUG,
        LogLevel.INFO: logging.INFO,
        LogLevel.WARNING: logging.WARNING,
        LogLevel.ERROR: logging.ERROR,
        LogLevel.CRITICAL: logging.CRITICAL,
    }
    log_level = level_map.get(config.log_level, logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Remove existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(
        AccessControlFormatter(
            include_principal=True,
            json_format=config.log_json if json_format is None else json_format,
        )
    )
    root_logger.addHandler(console_handler)

    if config.service_name:
        logging.getLogger(config.service_name).setLevel(log_level)


def get_principal_logger(name: str, principal: Optional[Principal] = None) -> PrincipalLoggerAdapter:
    """Get a logger adapter bound to a principal.

    Example:
        logger = get_principal_logger(__name__, principal)
        logger.debug("Resolved %d permissions", len(permissions))
    """
    return PrincipalLoggerAdapter(logging.getLogger(name), principal=principal)


__all__ = [
    "AccessControlFormatter",
    "PrincipalLoggerAdapter",
    "get_principal_logger",
    "safe_preview",
    "setup_logging",
]
