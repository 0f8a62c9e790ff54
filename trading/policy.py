"""
Role and branch authorization.

One table maps an action name to the roles allowed to perform it and to how
the acting user's branch must relate to the target resource. Views declare
which action they perform; services call ``ensure_allowed`` once the target
record has been loaded.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from rest_framework import exceptions, permissions

from .models import DIRECTOR, MANAGER, ROLES

ANY_ROLE = frozenset(ROLES)


@dataclass(frozen=True)
class Actor:
    """The authenticated caller, passed explicitly into every service call."""
    user_id: int
    role: str
    branch: str
    name: str = ""

    @classmethod
    def from_user(cls, user) -> "Actor":
        return cls(user_id=user.pk, role=user.role, branch=user.branch, name=user.name)

    @property
    def is_director(self) -> bool:
        return self.role == DIRECTOR


@dataclass(frozen=True)
class Rule:
    roles: frozenset
    branch_bound: bool = False
    directors_exempt: bool = False
    message: str = "Not authorized to perform this action"


POLICY: dict[str, Rule] = {
    "produce.read": Rule(ANY_ROLE, branch_bound=True, directors_exempt=True,
                         message="Not authorized to access produce from other branches"),
    "produce.create": Rule(frozenset({MANAGER, DIRECTOR}), branch_bound=True, directors_exempt=True,
                           message="Not authorized to add produce for other branches"),
    "produce.restock": Rule(frozenset({MANAGER, DIRECTOR}), branch_bound=True,
                            message="Not authorized to update produce from other branches"),
    "produce.reprice": Rule(frozenset({MANAGER, DIRECTOR}), branch_bound=True,
                            message="Not authorized to update produce from other branches"),
    "produce.delete": Rule(frozenset({DIRECTOR}), branch_bound=True,
                           message="Not authorized to delete produce from other branches"),
    "produce.low_stock": Rule(frozenset({MANAGER, DIRECTOR})),
    "sale.create": Rule(ANY_ROLE, branch_bound=True,
                        message="Not authorized to sell produce from other branches"),
    "sale.read": Rule(ANY_ROLE),
    "sale.summary": Rule(frozenset({DIRECTOR})),
    "credit.create": Rule(ANY_ROLE, branch_bound=True,
                          message="Not authorized to sell produce from other branches"),
    "credit.read": Rule(ANY_ROLE),
    "credit.pay": Rule(ANY_ROLE, branch_bound=True,
                       message="Not authorized to update credit sales from other branches"),
    "report.dashboard": Rule(frozenset({DIRECTOR})),
    "report.branch": Rule(frozenset({MANAGER})),
    "report.sales": Rule(ANY_ROLE),
    "user.list": Rule(frozenset({DIRECTOR})),
}


def _rule(action: str) -> Rule:
    try:
        return POLICY[action]
    except KeyError:
        raise ValueError(f"unknown policy action: {action}") from None


def role_allows(actor: Actor, action: str) -> bool:
    return actor.role in _rule(action).roles


def is_allowed(actor: Actor, action: str, resource=None) -> bool:
    rule = _rule(action)
    if actor.role not in rule.roles:
        return False
    if resource is None or not rule.branch_bound:
        return True
    if rule.directors_exempt and actor.is_director:
        return True
    return getattr(resource, "branch", None) == actor.branch


def ensure_allowed(actor: Actor, action: str, resource=None) -> None:
    if not is_allowed(actor, action, resource):
        raise exceptions.PermissionDenied(_rule(action).message)


def branch_scope(actor: Actor, requested: Optional[str] = None) -> Optional[str]:
    """Branch to filter reads by; ``None`` means every branch."""
    if actor.is_director:
        return requested or None
    return actor.branch


class PolicyPermission(permissions.BasePermission):
    """
    Role-level gate for DRF views.

    Viewsets set ``policy_actions = {"list": "produce.read", ...}``; function
    views are wrapped with ``policy_permission("report.dashboard")``.
    """
    message = "Not authorized to perform this action"
    action_name: Optional[str] = None

    def _action_for(self, view) -> Optional[str]:
        if self.action_name:
            return self.action_name
        mapping = getattr(view, "policy_actions", {}) or {}
        return mapping.get(getattr(view, "action", None))

    def has_permission(self, request, view):
        user = request.user
        if not (user and user.is_authenticated):
            return False
        action = self._action_for(view)
        if action is None:
            return True
        if not role_allows(Actor.from_user(user), action):
            self.message = f"User role {user.role} is not authorized to access this route"
            return False
        return True


def policy_permission(action: str) -> type:
    return type(
        f"PolicyPermission_{action.replace('.', '_')}",
        (PolicyPermission,),
        {"action_name": action},
    )
