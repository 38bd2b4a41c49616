"""Unified exception hierarchy for accesscore.

All errors raised by the authorization core inherit from AccessControlError.
This module provides:
- Base exception hierarchy with stable error codes
- ErrorRegistry for protocol mapping
- gRPC status mapping for services exposing the core over gRPC

Usage:
    from accesscore.exceptions import (
        AccessControlError,
        ResolutionError,
        StoreError,
        ValidationError,
    )

A denied request is never an error: evaluation returns ``False``.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, TypeVar, cast

__all__ = [
    # Base hierarchy
    "AccessControlError",
    "ConfigurationError",
    "ValidationError",
    "FixedRolePrefixMissingError",
    "InvalidBuiltInRoleError",
    "ResolutionError",
    "StoreError",
    "UnsupportedOperationError",
    # Registry
    "ErrorRegistry",
    "error_registry",
    "register_error",
    # gRPC helpers
    "get_grpc_status_code",
]

logger = logging.getLogger(__name__)


# ---- Exception Hierarchy ----------------------------------------------------


class AccessControlError(Exception):
    """Base exception for the authorization core.

    Attributes:
        code: Stable error code string for protocol mapping (e.g. "STORE_ERROR").
        message: Human-readable error description.
        details: Additional context as keyword arguments.
    """

    code: str = "INTERNAL_ERROR"
    message: str = "An internal error occurred"

    def __init__(self, message: str | None = None, code: str | None = None, **kwargs: Any) -> None:
        self.message = message or self.message
        self.code = code or self.code
        self.details = kwargs
        super().__init__(self.message)


class ConfigurationError(AccessControlError):
    """Invalid or missing configuration."""

    code: str = "CONFIGURATION_ERROR"


class ValidationError(AccessControlError):
    """A fixed role declaration was rejected."""

    code: str = "VALIDATION_ERROR"
    message: str = "Invalid fixed role declaration"


class FixedRolePrefixMissingError(ValidationError):
    """Fixed role name does not carry the reserved prefix."""

    code: str = "FIXED_ROLE_PREFIX_MISSING"
    message: str = "Fixed role name is missing the reserved prefix"


class InvalidBuiltInRoleError(ValidationError):
    """Grant target is not a recognised built-in role."""

    code: str = "INVALID_BUILTIN_ROLE"
    message: str = "Grant target is not a built-in role"


class ResolutionError(AccessControlError):
    """A scope keyword could not be resolved for the principal."""

    code: str = "RESOLUTION_ERROR"
    message: str = "Scope keyword could not be resolved"


class StoreError(AccessControlError):
    """The permission store failed to answer."""

    code: str = "STORE_ERROR"
    message: str = "Permission store call failed"


class UnsupportedOperationError(AccessControlError):
    """Operation is not provided by this implementation."""

    code: str = "UNSUPPORTED_OPERATION"
    message: str = "Unsupported operation"


# ---- Error Registry for Protocol Mapping ------------------------------------

_E = TypeVar("_E", bound=type[AccessControlError])


class ErrorRegistry:
    """Registry for mapping internal errors to external protocol codes."""

    def __init__(self) -> None:
        self._errors: dict[str, type[AccessControlError]] = {}

    def register(self, code: str, error_cls: type[AccessControlError]) -> None:
        self._errors[code] = error_cls

    def get(self, code: str) -> type[AccessControlError] | None:
        return self._errors.get(code)

    def all(self) -> dict[str, type[AccessControlError]]:
        return dict(self._errors)


error_registry = ErrorRegistry()


def register_error(code: str) -> Callable[[_E], _E]:
    """Decorator to register a custom error type.

    Usage:
        @register_error("MY_CUSTOM_ERROR")
        class MyCustomError(AccessControlError):
            code = "MY_CUSTOM_ERROR"
    """

    def decorator(cls: _E) -> _E:
        error_registry.register(code, cls)
        return cls

    return cast(Callable[[_E], _E], decorator)


# Register base errors
error_registry.register("INTERNAL_ERROR", AccessControlError)
error_registry.register("CONFIGURATION_ERROR", ConfigurationError)
error_registry.register("VALIDATION_ERROR", ValidationError)
error_registry.register("FIXED_ROLE_PREFIX_MISSING", FixedRolePrefixMissingError)
error_registry.register("INVALID_BUILTIN_ROLE", InvalidBuiltInRoleError)
error_registry.register("RESOLUTION_ERROR", ResolutionError)
error_registry.register("STORE_ERROR", StoreError)
error_registry.register("UNSUPPORTED_OPERATION", UnsupportedOperationError)


# ---- gRPC Status Mapping ----------------------------------------------------


def get_grpc_status_code(error: AccessControlError) -> Any:
    """Map AccessControlError to gRPC status code.

    Returns grpc.StatusCode value for the given error type.
    Import grpc locally to avoid hard dependency at module level.
    """
    import grpc

    error_to_status = {
        "CONFIGURATION_ERROR": grpc.StatusCode.FAILED_PRECONDITION,
        "VALIDATION_ERROR": grpc.StatusCode.INVALID_ARGUMENT,
        "FIXED_ROLE_PREFIX_MISSING": grpc.StatusCode.INVALID_ARGUMENT,
        "INVALID_BUILTIN_ROLE": grpc.StatusCode.INVALID_ARGUMENT,
        "RESOLUTION_ERROR": grpc.StatusCode.FAILED_PRECONDITION,
        "STORE_ERROR": grpc.StatusCode.UNAVAILABLE,
        "UNSUPPORTED_OPERATION": grpc.StatusCode.UNIMPLEMENTED,
    }
    status = error_to_status.get(error.code)
    if status is None:
        logger.debug("No gRPC status mapped for error code %s", error.code)
        return grpc.StatusCode.INTERNAL
    return status
