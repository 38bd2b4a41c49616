"""Access control service: fixed role registration and permission aggregation.

Provides:
- ``AccessControlService`` — declares and registers fixed roles, computes a
  principal's permissions, evaluates evaluators and aggregates per-resource
  metadata from fixed and stored permissions.

Startup sequence::

    service = AccessControlService(config, usage_stats=usage, store=store)
    service.declare_fixed_roles(*feature_registrations)
    service.register_fixed_roles()

Per request::

    allowed = service.evaluate(principal, eval_permission("users:read", "users:id:2"))
    metadata = await service.get_resources_metadata(principal, "dashboards", ["1", "2"])
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Iterable, Optional, Sequence

from .builtin_roles import expand_builtin_roles, validate_builtin_roles
from .config import AccessControlConfig, load_config_from_env
from .evaluator import Evaluator, group_scopes_by_action
from .exceptions import AccessControlError, StoreError, UnsupportedOperationError
from .logging import get_principal_logger, safe_preview
from .metrics import (
    ACCESS_EVALUATION_COUNT,
    ACCESS_EVALUATION_DURATION,
    ACCESS_PERMISSIONS_DURATION,
)
from .models import Metadata, Permission, Principal, Role, RoleRegistration
from .registry import (
    FixedRoleRegistry,
    RegistrationList,
    get_fixed_role_registry,
    validate_fixed_role,
)
from .scope import (
    WILDCARD,
    ScopeResolver,
    resource_all_id_scope,
    resource_all_scope,
    resource_scope,
)
from .store import InMemoryPermissionStore, PermissionStore, UserResourcePermissionsQuery
from .usage import UsageStats

logger = logging.getLogger(__name__)

USAGE_METRIC_ENABLED = "stats.oss.accesscontrol.enabled.count"


class AccessControlService:
    """Role based access control over fixed roles and stored permissions.

    Args:
        config: Configuration (if None, loads from environment).
        usage_stats: Usage reporting collaborator; the service registers its
            enabled metric on it.
        store: Stored permission backend (default: in-memory).
        registry: Fixed role registry (default: process singleton).
        scope_resolver: Keyword resolver (default: built-in keywords).
    """

    def __init__(
        self,
        config: Optional[AccessControlConfig] = None,
        usage_stats: Optional[UsageStats] = None,
        store: Optional[PermissionStore] = None,
        registry: Optional[FixedRoleRegistry] = None,
        scope_resolver: Optional[ScopeResolver] = None,
    ) -> None:
        self.config = config if config is not None else load_config_from_env()
        self.usage_stats = usage_stats
        self.store = store if store is not None else InMemoryPermissionStore()
        self.registry = registry if registry is not None else get_fixed_role_registry()
        self.scope_resolver = scope_resolver or ScopeResolver()
        self.registrations = RegistrationList()

        if usage_stats is not None:
            usage_stats.register_metrics_func(self.get_usage_metrics)

    def is_disabled(self) -> bool:
        return not self.config.enabled

    def get_usage_metrics(self) -> dict[str, Any]:
        return {USAGE_METRIC_ENABLED: 0 if self.is_disabled() else 1}

    # ── Fixed roles ─────────────────────────────────────

    def declare_fixed_roles(self, *registrations: RoleRegistration) -> None:
        """Validate and queue fixed role registrations.

        The whole batch is rejected on the first invalid registration;
        nothing is queued in that case. No-op when access control is disabled.

        Raises:
            FixedRolePrefixMissingError: role name lacks the ``fixed:`` prefix.
            InvalidBuiltInRoleError: a grant targets an unknown built-in role.
        """
        if self.is_disabled():
            return

        for registration in registrations:
            validate_fixed_role(registration.role)
            validate_builtin_roles(registration.grants)

        self.registrations.append(*registrations)

    def register_fixed_roles(self) -> None:
        """Apply every declared registration to the registry.

        Replayable: applying the same declarations again changes nothing.
        No-op when access control is disabled.
        """
        if self.is_disabled():
            return

        count = 0
        for registration in self.registrations:
            self.registry.register(registration.role, registration.grants)
            count += 1
        logger.debug("Registered %d fixed role declaration(s)", count)

    # ── Permissions ─────────────────────────────────────

    def get_user_builtin_roles(self, principal: Principal) -> frozenset[str]:
        return expand_builtin_roles(principal)

    def get_user_roles(self, principal: Principal) -> list[Role]:
        """Custom role assignments are not part of this core."""
        raise UnsupportedOperationError(
            "Role assignments are not supported, use built-in roles",
            user_id=principal.user_id,
        )

    def _get_fixed_permissions(self, builtin_roles: Iterable[str]) -> list[Permission]:
        permissions: list[Permission] = []
        for role in self.registry.roles_for(sorted(builtin_roles)):
            permissions.extend(role.permissions)
        return permissions

    def _resolve_permissions(self, principal: Principal, permissions: Iterable[Permission]) -> list[Permission]:
        return [self.scope_resolver.resolve(principal, permission) for permission in permissions]

    def get_user_permissions(self, principal: Principal) -> list[Permission]:
        """Fixed permissions of the principal's built-in roles, keywords resolved.

        Raises:
            ResolutionError: a scope keyword cannot be resolved for the principal.
        """
        with ACCESS_PERMISSIONS_DURATION.time():
            builtin_roles = self.get_user_builtin_roles(principal)
            return self._resolve_permissions(principal, self._get_fixed_permissions(builtin_roles))

    def evaluate(self, principal: Principal, evaluator: Evaluator) -> bool:
        """Evaluate the principal's permissions against an evaluator.

        A denial is ``False``, never an error.
        """
        ACCESS_EVALUATION_COUNT.inc()
        with ACCESS_EVALUATION_DURATION.time():
            permissions = self.get_user_permissions(principal)
            allowed = evaluator.evaluate(group_scopes_by_action(permissions))

        get_principal_logger(__name__, principal).debug(
            "Evaluated %s: %s",
            evaluator,
            "allowed" if allowed else "denied",
        )
        return allowed

    # ── Resource metadata ───────────────────────────────

    async def _get_stored_permissions(
        self,
        principal: Principal,
        query: UserResourcePermissionsQuery,
        timeout: Optional[float],
    ) -> list[Permission]:
        try:
            call = self.store.get_user_resource_permissions(principal.org_id, principal.user_id, query)
            if timeout is None:
                return await call
            try:
                return await asyncio.wait_for(call, timeout)
            except asyncio.TimeoutError as e:
                logger.warning("Permission store timed out after %ss for resource %s", timeout, query.resource)
                raise StoreError(
                    f"Permission store timed out after {timeout}s",
                    resource=query.resource,
                    user_id=principal.user_id,
                ) from e
        except AccessControlError:
            raise
        except Exception as e:
            logger.warning("Permission store failed for resource %s: %s", query.resource, e)
            raise StoreError(
                f"Permission store failed: {e}",
                resource=query.resource,
                user_id=principal.user_id,
            ) from e

    async def get_resources_metadata(
        self,
        principal: Principal,
        resource: str,
        resource_ids: Sequence[str],
        timeout: Optional[float] = None,
    ) -> dict[str, Metadata]:
        """List, per resource id, the actions the principal may perform.

        Ids without any matching permission are absent from the result.

        Args:
            principal: Signed-in user.
            resource: Resource type, e.g. ``"dashboards"``.
            resource_ids: Ids to report on.
            timeout: Store round-trip bound in seconds
                (default: ``config.store_timeout_seconds``).

        Raises:
            ResolutionError: a fixed permission keyword cannot be resolved.
            StoreError: the permission store failed or timed out.
        """
        builtin_roles = self.get_user_builtin_roles(principal)
        fixed_permissions = self._resolve_permissions(principal, self._get_fixed_permissions(builtin_roles))

        query = UserResourcePermissionsQuery(
            builtin_roles=tuple(sorted(builtin_roles)),
            resource=resource,
            resource_ids=tuple(resource_ids),
        )
        stored_permissions = await self._get_stored_permissions(
            principal,
            query,
            timeout if timeout is not None else self.config.store_timeout_seconds,
        )

        user_permissions = fixed_permissions + stored_permissions
        broad_scopes = {WILDCARD, resource_all_scope(resource), resource_all_id_scope(resource)}

        result: dict[str, Metadata] = {}
        for resource_id in resource_ids:
            matching = broad_scopes | {resource_scope(resource, resource_id)}
            for permission in user_permissions:
                if permission.scope in matching:
                    result.setdefault(resource_id, {})[permission.action] = True

        get_principal_logger(__name__, principal).debug(
            "Metadata for %s %s: %s",
            resource,
            safe_preview(list(resource_ids)),
            safe_preview(result),
        )
        return result


__all__ = ["USAGE_METRIC_ENABLED", "AccessControlService"]
