"""Shared fixtures for accesscore tests."""

from __future__ import annotations

import pytest
from accesscore import (
    AccessControlConfig,
    AccessControlService,
    BuiltInRoles,
    FixedRoleRegistry,
    InMemoryPermissionStore,
    Principal,
    UsageStats,
)


@pytest.fixture
def registry() -> FixedRoleRegistry:
    return FixedRoleRegistry()


@pytest.fixture
def store() -> InMemoryPermissionStore:
    return InMemoryPermissionStore()


@pytest.fixture
def usage_stats() -> UsageStats:
    return UsageStats()


@pytest.fixture
def service(
    registry: FixedRoleRegistry,
    store: InMemoryPermissionStore,
    usage_stats: UsageStats,
) -> AccessControlService:
    """Enabled service with an isolated registry and store."""
    return AccessControlService(
        AccessControlConfig(enabled=True),
        usage_stats=usage_stats,
        store=store,
        registry=registry,
    )


@pytest.fixture
def viewer() -> Principal:
    return Principal(user_id=2, org_id=3, org_role=BuiltInRoles.VIEWER, login="testUser")
