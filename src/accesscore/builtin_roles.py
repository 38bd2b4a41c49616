"""Built-in organizational roles and their hierarchy.

Provides:
- ``BuiltInRoles`` — organizational tiers plus the super-admin sentinel.
- ``ROLE_INHERITANCE`` — role → directly implied roles.
- ``expand_builtin_roles()`` — resolve a principal's effective built-in roles.
- ``validate_builtin_roles()`` — check grant targets.
"""

from __future__ import annotations

from typing import Iterable

from .exceptions import InvalidBuiltInRoleError
from .models import Principal


class BuiltInRoles:
    """Built-in roles used as grant targets for fixed roles.

    ``SUPER_ADMIN`` is not an org role: it is added for principals carrying
    the super-admin flag, on top of their org role.
    """

    VIEWER = "Viewer"
    EDITOR = "Editor"
    ADMIN = "Admin"
    SUPER_ADMIN = "Super Admin"

    ALL = frozenset({"Viewer", "Editor", "Admin", "Super Admin"})


# ── Role Inheritance ────────────────────────────────────
# Higher role implies all lower roles.

ROLE_INHERITANCE: dict[str, tuple[str, ...]] = {
    BuiltInRoles.ADMIN: (BuiltInRoles.EDITOR,),
    BuiltInRoles.EDITOR: (BuiltInRoles.VIEWER,),
    BuiltInRoles.VIEWER: (),
}


def role_children(role: str) -> frozenset[str]:
    """Return every role implied by ``role``, excluding itself.

    Example::

        >>> sorted(role_children("Admin"))
        ['Editor', 'Viewer']
    """
    implied: set[str] = set()
    queue = list(ROLE_INHERITANCE.get(role, ()))

    while queue:
        child = queue.pop()
        if child in implied:
            continue
        implied.add(child)
        queue.extend(ROLE_INHERITANCE.get(child, ()))

    implied.discard(role)
    return frozenset(implied)


def expand_builtin_roles(principal: Principal) -> frozenset[str]:
    """Compute the built-in roles a principal holds.

    Declared org role, every role it implies, and the super-admin sentinel
    when the principal carries the super-admin flag. Unknown org roles
    expand to themselves only.
    """
    roles = {principal.org_role}
    roles.update(role_children(principal.org_role))
    if principal.is_super_admin:
        roles.add(BuiltInRoles.SUPER_ADMIN)
    return frozenset(roles)


def validate_builtin_roles(roles: Iterable[str]) -> None:
    """Raise :class:`InvalidBuiltInRoleError` for the first unknown role."""
    for role in roles:
        if role not in BuiltInRoles.ALL:
            raise InvalidBuiltInRoleError(
                f"'{role}' is not a built-in role, expected one of {sorted(BuiltInRoles.ALL)}",
                role=role,
            )


__all__ = [
    "BuiltInRoles",
    "ROLE_INHERITANCE",
    "expand_builtin_roles",
    "role_children",
    "validate_builtin_roles",
]
