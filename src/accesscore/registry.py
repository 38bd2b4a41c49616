"""Process-wide registry of fixed roles and their built-in role grants.

Provides:
- ``FIXED_ROLE_PREFIX`` and ``validate_fixed_role()``.
- ``FixedRoleRegistry`` — role name → role, built-in role → granted role names.
- ``RegistrationList`` — queue of declared registrations awaiting registration.
- ``get_fixed_role_registry()`` — process singleton.

Writes are serialised by a lock and publish a new immutable snapshot;
readers use the current snapshot without locking. Grants are cumulative:
nothing in this module removes a grant once recorded.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterable, Iterator, Mapping

from .exceptions import FixedRolePrefixMissingError
from .models import Role, RoleRegistration

logger = logging.getLogger(__name__)

FIXED_ROLE_PREFIX = "fixed:"


def validate_fixed_role(role: Role) -> None:
    """Raise :class:`FixedRolePrefixMissingError` unless the name is reserved."""
    if not role.name.startswith(FIXED_ROLE_PREFIX):
        raise FixedRolePrefixMissingError(
            f"Fixed role '{role.name}' must start with '{FIXED_ROLE_PREFIX}'",
            role=role.name,
        )


@dataclass(frozen=True)
class _Snapshot:
    roles: Mapping[str, Role] = field(default_factory=lambda: MappingProxyType({}))
    grants: Mapping[str, tuple[str, ...]] = field(default_factory=lambda: MappingProxyType({}))


class FixedRoleRegistry:
    """Fixed roles and their grants to built-in roles.

    A registration only replaces a stored role when its version is strictly
    greater. Grants are processed regardless of the version outcome.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._snapshot = _Snapshot()

    def register(self, role: Role, grants: Iterable[str] = ()) -> None:
        """Save the role (version-gated) and grant it to built-in roles."""
        with self._lock:
            current = self._snapshot
            roles = dict(current.roles)
            all_grants = dict(current.grants)

            stored = roles.get(role.name)
            if stored is not None and stored.version >= role.version:
                logger.debug(
                    "Role %s already stored with version %d >= %d, skipping body",
                    role.name,
                    stored.version,
                    role.version,
                )
            else:
                roles[role.name] = role

            for builtin_role in grants:
                assigned = all_grants.get(builtin_role, ())
                if role.name in assigned:
                    logger.debug("Role %s already granted to %s", role.name, builtin_role)
                    continue
                all_grants[builtin_role] = assigned + (role.name,)

            self._snapshot = _Snapshot(
                roles=MappingProxyType(roles),
                grants=MappingProxyType(all_grants),
            )

    # ── Reads ───────────────────────────────────────────

    def get_role(self, name: str) -> Role | None:
        return self._snapshot.roles.get(name)

    def roles(self) -> Mapping[str, Role]:
        """Read-only view of registered roles."""
        return self._snapshot.roles

    def grants(self) -> Mapping[str, tuple[str, ...]]:
        """Read-only view of built-in role → granted role names."""
        return self._snapshot.grants

    def role_names_for(self, builtin_role: str) -> tuple[str, ...]:
        return self._snapshot.grants.get(builtin_role, ())

    def roles_for(self, builtin_roles: Iterable[str]) -> list[Role]:
        """Roles granted to any of the built-in roles, deduplicated.

        Grant names without a registered role are skipped.
        """
        snapshot = self._snapshot
        seen: set[str] = set()
        result: list[Role] = []
        for builtin_role in builtin_roles:
            for name in snapshot.grants.get(builtin_role, ()):
                if name in seen:
                    continue
                seen.add(name)
                role = snapshot.roles.get(name)
                if role is not None:
                    result.append(role)
        return result

    def __len__(self) -> int:
        return len(self._snapshot.roles)

    def __repr__(self) -> str:
        return f"FixedRoleRegistry(roles={len(self)}, builtin_roles={sorted(self._snapshot.grants)!r})"


class RegistrationList:
    """Thread-safe append-only list of role registrations."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._registrations: list[RoleRegistration] = []

    def append(self, *registrations: RoleRegistration) -> None:
        with self._lock:
            self._registrations.extend(registrations)

    def __iter__(self) -> Iterator[RoleRegistration]:
        with self._lock:
            items = list(self._registrations)
        return iter(items)

    def __len__(self) -> int:
        return len(self._registrations)


# ── Singleton factory ────────────────────────────────────────────

_registry: FixedRoleRegistry | None = None
_registry_lock = threading.Lock()


def get_fixed_role_registry() -> FixedRoleRegistry:
    """Get or create the process-wide FixedRoleRegistry."""
    global _registry
    with _registry_lock:
        if _registry is None:
            _registry = FixedRoleRegistry()
        return _registry


def reset_fixed_role_registry() -> None:
    """Reset the singleton (for testing)."""
    global _registry
    with _registry_lock:
        _registry = None


__all__ = [
    "FIXED_ROLE_PREFIX",
    "FixedRoleRegistry",
    "RegistrationList",
    "get_fixed_role_registry",
    "reset_fixed_role_registry",
    "validate_fixed_role",
]
