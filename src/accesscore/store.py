"""Permission store collaborator.

Stored permissions are per-resource grants persisted outside the process
(to a user, a team or a built-in role). The core only reads them, through
:meth:`PermissionStore.get_user_resource_permissions`; the setters exist for
callers and tests arranging stored grants.

``InMemoryPermissionStore`` is a reference implementation backed by dicts.
"""

from __future__ import annotations

import itertools
import logging
import threading
from abc import ABC, abstractmethod
from enum import Enum
from typing import Iterable

from pydantic import BaseModel

from .models import Permission
from .scope import resource_scope

logger = logging.getLogger(__name__)


class AssigneeKind(str, Enum):
    USER = "user"
    TEAM = "team"
    BUILTIN_ROLE = "builtin_role"


class UserResourcePermissionsQuery(BaseModel):
    """Context for looking up a user's stored permissions on a resource.

    Empty ``resource_ids`` means every id of the resource.
    """

    model_config = {"frozen": True}

    builtin_roles: tuple[str, ...] = ()
    resource: str
    resource_ids: tuple[str, ...] = ()


class SetResourcePermissionsCommand(BaseModel):
    """Replace the actions an assignee holds on one resource."""

    model_config = {"frozen": True}

    actions: tuple[str, ...] = ()
    resource: str = ""
    resource_id: str = ""


class ResourcePermission(BaseModel):
    """A stored permission row."""

    model_config = {"frozen": True}

    id: int
    org_id: int
    assignee_kind: AssigneeKind
    assignee: str
    action: str
    scope: str
    resource: str
    resource_id: str

    def to_permission(self) -> Permission:
        return Permission(action=self.action, scope=self.scope)


class PermissionStore(ABC):
    """External persistence of per-resource permissions."""

    @abstractmethod
    async def get_user_resource_permissions(
        self,
        org_id: int,
        user_id: int,
        query: UserResourcePermissionsQuery,
    ) -> list[Permission]:
        """Permissions held directly, through teams, or through built-in roles."""
        raise NotImplementedError

    @abstractmethod
    async def set_user_resource_permissions(
        self, org_id: int, user_id: int, cmd: SetResourcePermissionsCommand
    ) -> list[ResourcePermission]:
        raise NotImplementedError

    @abstractmethod
    async def set_team_resource_permissions(
        self, org_id: int, team_id: int, cmd: SetResourcePermissionsCommand
    ) -> list[ResourcePermission]:
        raise NotImplementedError

    @abstractmethod
    async def set_builtin_resource_permissions(
        self, org_id: int, builtin_role: str, cmd: SetResourcePermissionsCommand
    ) -> list[ResourcePermission]:
        raise NotImplementedError


# (org_id, kind, assignee, resource, resource_id)
_RowKey = tuple[int, AssigneeKind, str, str, str]


class InMemoryPermissionStore(PermissionStore):
    """Dict-backed PermissionStore with team membership.

    Thread-safe. Setting permissions for an existing
    (assignee, resource, resource_id) replaces the previous action set;
    an empty command is a no-op.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._rows: dict[_RowKey, tuple[ResourcePermission, ...]] = {}
        self._team_members: dict[tuple[int, int], set[int]] = {}
        self._ids = itertools.count(1)

    def add_team_member(self, org_id: int, team_id: int, user_id: int) -> None:
        with self._lock:
            self._team_members.setdefault((org_id, team_id), set()).add(user_id)

    def user_teams(self, org_id: int, user_id: int) -> set[int]:
        with self._lock:
            return {
                team_id
                for (team_org, team_id), members in self._team_members.items()
                if team_org == org_id and user_id in members
            }

    async def get_user_resource_permissions(
        self,
        org_id: int,
        user_id: int,
        query: UserResourcePermissionsQuery,
    ) -> list[Permission]:
        assignees = {(AssigneeKind.USER, str(user_id))}
        assignees.update((AssigneeKind.TEAM, str(team_id)) for team_id in self.user_teams(org_id, user_id))
        assignees.update((AssigneeKind.BUILTIN_ROLE, role) for role in query.builtin_roles)
        wanted_ids = set(query.resource_ids)

        with self._lock:
            rows = list(self._rows.items())

        permissions: list[Permission] = []
        for (row_org, kind, assignee, resource, resource_id), stored in rows:
            if row_org != org_id or resource != query.resource:
                continue
            if (kind, assignee) not in assignees:
                continue
            if wanted_ids and resource_id not in wanted_ids:
                continue
            permissions.extend(row.to_permission() for row in stored)
        return permissions

    def _set(
        self,
        org_id: int,
        kind: AssigneeKind,
        assignee: str,
        cmd: SetResourcePermissionsCommand,
    ) -> list[ResourcePermission]:
        if not cmd.resource:
            return []
        key: _RowKey = (org_id, kind, assignee, cmd.resource, cmd.resource_id)
        with self._lock:
            rows = tuple(self._build_rows(org_id, kind, assignee, cmd, cmd.actions))
            if rows:
                self._rows[key] = rows
            else:
                self._rows.pop(key, None)
        logger.debug(
            "Stored %d permission(s) for %s %s on %s",
            len(rows),
            kind.value,
            assignee,
            resource_scope(cmd.resource, cmd.resource_id),
        )
        return list(rows)

    def _build_rows(
        self,
        org_id: int,
        kind: AssigneeKind,
        assignee: str,
        cmd: SetResourcePermissionsCommand,
        actions: Iterable[str],
    ) -> Iterable[ResourcePermission]:
        scope = resource_scope(cmd.resource, cmd.resource_id)
        for action in dict.fromkeys(actions):
            yield ResourcePermission(
                id=next(self._ids),
                org_id=org_id,
                assignee_kind=kind,
                assignee=assignee,
                action=action,
                scope=scope,
                resource=cmd.resource,
                resource_id=cmd.resource_id,
            )

    async def set_user_resource_permissions(
        self, org_id: int, user_id: int, cmd: SetResourcePermissionsCommand
    ) -> list[ResourcePermission]:
        return self._set(org_id, AssigneeKind.USER, str(user_id), cmd)

    async def set_team_resource_permissions(
        self, org_id: int, team_id: int, cmd: SetResourcePermissionsCommand
    ) -> list[ResourcePermission]:
        return self._set(org_id, AssigneeKind.TEAM, str(team_id), cmd)

    async def set_builtin_resource_permissions(
        self, org_id: int, builtin_role: str, cmd: SetResourcePermissionsCommand
    ) -> list[ResourcePermission]:
        return self._set(org_id, AssigneeKind.BUILTIN_ROLE, builtin_role, cmd)


__all__ = [
    "AssigneeKind",
    "InMemoryPermissionStore",
    "PermissionStore",
    "ResourcePermission",
    "SetResourcePermissionsCommand",
    "UserResourcePermissionsQuery",
]
