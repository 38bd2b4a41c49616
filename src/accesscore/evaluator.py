"""Boolean evaluators over a principal's grouped permissions.

An evaluator is a tree of:
- ``PermissionEvaluator`` — leaf requiring an action on zero or more scopes.
- ``AllEvaluator`` — every child must pass.
- ``AnyEvaluator`` — at least one child must pass.

Each node is an immutable value with ``evaluate(index) -> bool`` where
``index`` maps action → granted scopes (see :func:`group_scopes_by_action`).

Example::

    evaluator = eval_any(
        eval_permission("users:read", "users:id:2"),
        eval_all(
            eval_permission("teams:read", "teams:*"),
            eval_permission("users:read"),
        ),
    )
    evaluator.evaluate(group_scopes_by_action(permissions))
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import AbstractSet, Iterable, Mapping, Union

from .models import Permission
from .scope import scope_matches

# action -> granted scopes
PermissionIndex = Mapping[str, AbstractSet[str]]


def group_scopes_by_action(permissions: Iterable[Permission]) -> dict[str, set[str]]:
    """Group permission scopes by action."""
    index: dict[str, set[str]] = {}
    for permission in permissions:
        index.setdefault(permission.action, set()).add(permission.scope)
    return index


@dataclass(frozen=True)
class PermissionEvaluator:
    """Leaf: action granted on every required scope.

    With no scopes, only the action is required.
    """

    action: str
    scopes: tuple[str, ...] = ()

    def evaluate(self, index: PermissionIndex) -> bool:
        granted = index.get(self.action)
        if granted is None:
            return False
        for required in self.scopes:
            if not any(scope_matches(candidate, required) for candidate in granted):
                return False
        return True

    def __str__(self) -> str:
        if not self.scopes:
            return f"action:{self.action}"
        return f"action:{self.action} scopes:{','.join(self.scopes)}"


@dataclass(frozen=True)
class AllEvaluator:
    """Every child evaluator must pass. No children → True."""

    children: tuple["Evaluator", ...] = ()

    def evaluate(self, index: PermissionIndex) -> bool:
        return all(child.evaluate(index) for child in self.children)

    def __str__(self) -> str:
        return "all(" + " ".join(str(child) for child in self.children) + ")"


@dataclass(frozen=True)
class AnyEvaluator:
    """At least one child evaluator must pass. No children → False."""

    children: tuple["Evaluator", ...] = ()

    def evaluate(self, index: PermissionIndex) -> bool:
        return any(child.evaluate(index) for child in self.children)

    def __str__(self) -> str:
        return "any(" + " ".join(str(child) for child in self.children) + ")"


Evaluator = Union[PermissionEvaluator, AllEvaluator, AnyEvaluator]


# ── Builders ────────────────────────────────────────────


def eval_permission(action: str, *scopes: str) -> PermissionEvaluator:
    return PermissionEvaluator(action=action, scopes=tuple(scopes))


def eval_all(*evaluators: Evaluator) -> AllEvaluator:
    return AllEvaluator(children=tuple(evaluators))


def eval_any(*evaluators: Evaluator) -> AnyEvaluator:
    return AnyEvaluator(children=tuple(evaluators))


__all__ = [
    "AllEvaluator",
    "AnyEvaluator",
    "Evaluator",
    "PermissionEvaluator",
    "PermissionIndex",
    "eval_all",
    "eval_any",
    "eval_permission",
    "group_scopes_by_action",
]
