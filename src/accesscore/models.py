"""Core data models for the authorization core.

Pydantic models, frozen so that permissions attached to a registered role
can be shared across requests without being mutated.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

# Per-resource metadata: action -> True
Metadata = dict[str, bool]


class Permission(BaseModel):
    """An action allowed on a scope.

    Scope formats: exact (``users:id:2``), prefix wildcard (``users:*``),
    universal wildcard (``*``) or keyword template (``users:self``).
    """

    model_config = {"frozen": True}

    action: str
    scope: str = ""


class Role(BaseModel):
    """Versioned bundle of permissions."""

    model_config = {"frozen": True}

    uid: str = ""
    name: str
    version: int = Field(default=0, ge=0)
    display_name: str = ""
    description: str = ""
    org_id: int = 0  # 0 = global
    permissions: tuple[Permission, ...] = ()


class RoleRegistration(BaseModel):
    """A feature module's declaration of a fixed role and its grants."""

    model_config = {"frozen": True}

    role: Role
    grants: tuple[str, ...] = ()


class Principal(BaseModel):
    """Signed-in user being evaluated.

    Supplied by the caller per request; never stored by the core.
    """

    model_config = {"frozen": True}

    user_id: int
    org_id: int
    org_role: str
    is_super_admin: bool = False
    team_id: Optional[int] = None
    login: str = ""


__all__ = [
    "Metadata",
    "Permission",
    "Principal",
    "Role",
    "RoleRegistration",
]
