"""Scope builders, wildcard matching and keyword resolution.

Scope format: colon-delimited segments, e.g. ``dashboards:id:7``.

Provides:
- ``scope()`` and the ``resource_*_scope()`` builders.
- ``scope_matches()`` — hierarchical wildcard rule.
- ``ScopeKeyword`` — recognised placeholders such as ``users:self``.
- ``ScopeResolver`` — rewrites keyword scopes for a given principal.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Mapping

from .exceptions import ResolutionError
from .models import Permission, Principal

logger = logging.getLogger(__name__)

SCOPE_SEPARATOR = ":"
WILDCARD = "*"


# ── Builders ────────────────────────────────────────────


def scope(*parts: str) -> str:
    """Join parts into a scope.

    Example::

        scope("dashboards", "id", "*")  # "dashboards:id:*"
    """
    return SCOPE_SEPARATOR.join(parts)


def resource_scope(resource: str, resource_id: str) -> str:
    """Concrete scope of one resource: ``<resource>:id:<id>``."""
    return scope(resource, "id", resource_id)


def resource_all_scope(resource: str) -> str:
    """Scope covering every resource of a type: ``<resource>:*``."""
    return scope(resource, WILDCARD)


def resource_all_id_scope(resource: str) -> str:
    """Scope covering every resource of a type by id: ``<resource>:id:*``."""
    return scope(resource, "id", WILDCARD)


# ── Matching ────────────────────────────────────────────


def is_prefix_wildcard(granted: str) -> bool:
    """True for scopes like ``dashboards:*`` (wildcard replaces full segments)."""
    return granted.endswith(SCOPE_SEPARATOR + WILDCARD)


def scope_matches(granted: str, required: str) -> bool:
    """Check if a granted scope covers a required scope.

    Matches when:
    1. scopes are equal
    2. granted is the universal wildcard ``*``
    3. granted is ``<prefix>:*`` and required starts with ``<prefix>:``
       followed by at least one more character

    A ``*`` that does not replace whole trailing segments is a literal:
    ``dashboards*`` only matches ``dashboards*``.

    Example::

        scope_matches("resources:*", "resources:5")        # True
        scope_matches("resources:*", "resources-other:5")  # False
    """
    if granted == required or granted == WILDCARD:
        return True
    if not is_prefix_wildcard(granted):
        return False
    prefix = granted[:-1]
    return len(required) > len(prefix) and required.startswith(prefix)


# ── Keyword Resolution ──────────────────────────────────


class ScopeKeyword(str, Enum):
    """Scope placeholders bound to the requesting principal."""

    USERS_SELF = "users:self"
    ORGS_CURRENT = "orgs:current"
    TEAMS_SELF = "teams:self"


KeywordStrategy = Callable[[Principal], str]


def _resolve_users_self(principal: Principal) -> str:
    return resource_scope("users", str(principal.user_id))


def _resolve_orgs_current(principal: Principal) -> str:
    return resource_scope("orgs", str(principal.org_id))


def _resolve_teams_self(principal: Principal) -> str:
    if principal.team_id is None:
        raise ResolutionError(
            f"Cannot resolve '{ScopeKeyword.TEAMS_SELF.value}': principal has no team",
            keyword=ScopeKeyword.TEAMS_SELF.value,
            user_id=principal.user_id,
        )
    return resource_scope("teams", str(principal.team_id))


DEFAULT_KEYWORD_STRATEGIES: dict[str, KeywordStrategy] = {
    ScopeKeyword.USERS_SELF.value: _resolve_users_self,
    ScopeKeyword.ORGS_CURRENT.value: _resolve_orgs_current,
    ScopeKeyword.TEAMS_SELF.value: _resolve_teams_self,
}


class ScopeResolver:
    """Rewrites keyword scopes into concrete scopes for a principal.

    A keyword matches the whole scope or its leading segments:
    ``users:self`` and ``users:self:preferences`` both resolve, the latter
    to ``users:id:<user_id>:preferences``.

    Resolution never mutates the input permission; a new
    :class:`Permission` is returned when a keyword was rewritten.
    """

    def __init__(self, strategies: dict[str, KeywordStrategy] | None = None) -> None:
        self._strategies: dict[str, KeywordStrategy] = dict(
            DEFAULT_KEYWORD_STRATEGIES if strategies is None else strategies
        )

    @property
    def keywords(self) -> frozenset[str]:
        return frozenset(self._strategies)

    def register(self, keyword: str | ScopeKeyword, strategy: KeywordStrategy) -> None:
        """Add or replace the strategy for a keyword."""
        key = keyword.value if isinstance(keyword, ScopeKeyword) else keyword
        self._strategies = {**self._strategies, key: strategy}

    @staticmethod
    def _match_keyword(strategies: Mapping[str, KeywordStrategy], value: str) -> str | None:
        for keyword in strategies:
            if value == keyword or value.startswith(keyword + SCOPE_SEPARATOR):
                return keyword
        return None

    def resolve(self, principal: Principal, permission: Permission) -> Permission:
        """Resolve the permission's scope keyword, if any.

        Raises:
            ResolutionError: principal lacks the attribute the keyword needs.
        """
        strategies = self._strategies
        keyword = self._match_keyword(strategies, permission.scope)
        if keyword is None:
            return permission

        resolved = strategies[keyword](principal) + permission.scope[len(keyword):]
        logger.debug(
            "Resolved scope %s to %s for user %s",
            permission.scope,
            resolved,
            principal.user_id,
        )
        return Permission(action=permission.action, scope=resolved)


__all__ = [
    "DEFAULT_KEYWORD_STRATEGIES",
    "SCOPE_SEPARATOR",
    "WILDCARD",
    "KeywordStrategy",
    "ScopeKeyword",
    "ScopeResolver",
    "is_prefix_wildcard",
    "resource_all_id_scope",
    "resource_all_scope",
    "resource_scope",
    "scope",
    "scope_matches",
]
