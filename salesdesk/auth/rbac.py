"""RBAC permission matrix and checker.

Roles inherit cumulatively: guest = salesperson < evaluator < admin.
Permissions are (action, resource_type) tuples in a set for O(1) lookup.
"""

import uuid

from salesdesk.models.enums import UserRole
from salesdesk.schemas.auth import CurrentUser


# ── Actions ───────────────────────────────────────────────────────────────


class Action:
    VIEW = "view"
    CREATE = "create"
    EDIT = "edit"
    DELETE = "delete"
    RUN_ANALYSIS = "run_analysis"
    SUGGEST = "suggest"
    MANAGE = "manage"


# ── Resource Types ────────────────────────────────────────────────────────


class Resource:
    MEETING = "meeting"
    EVALUATION = "evaluation"
    ANALYSIS = "analysis"
    FAILED_CASE = "failed_case"
    STATISTICS = "statistics"
    USER = "user"
    ACCOUNT = "account"


# ── Per-role permission sets ──────────────────────────────────────────────

# Any authenticated caller
_BASE_PERMS: set[tuple[str, str]] = {
    (Action.VIEW, Resource.MEETING),
    (Action.CREATE, Resource.MEETING),
    (Action.EDIT, Resource.MEETING),
    (Action.SUGGEST, Resource.MEETING),
    (Action.VIEW, Resource.EVALUATION),
    (Action.VIEW, Resource.ANALYSIS),
    (Action.RUN_ANALYSIS, Resource.ANALYSIS),
    (Action.VIEW, Resource.FAILED_CASE),
    (Action.CREATE, Resource.FAILED_CASE),
    (Action.VIEW, Resource.STATISTICS),
    (Action.VIEW, Resource.ACCOUNT),
    (Action.EDIT, Resource.ACCOUNT),
}

_EVALUATOR_EXTRA: set[tuple[str, str]] = {
    (Action.CREATE, Resource.EVALUATION),
    (Action.SUGGEST, Resource.EVALUATION),
}

_ADMIN_EXTRA: set[tuple[str, str]] = {
    (Action.DELETE, Resource.MEETING),
    (Action.MANAGE, Resource.USER),
}

# ── Cumulative permission matrix ──────────────────────────────────────────

PERMISSION_MATRIX: dict[UserRole, set[tuple[str, str]]] = {
    UserRole.GUEST: _BASE_PERMS,
    UserRole.SALESPERSON: _BASE_PERMS,
    UserRole.EVALUATOR: _BASE_PERMS | _EVALUATOR_EXTRA,
    UserRole.ADMIN: _BASE_PERMS | _EVALUATOR_EXTRA | _ADMIN_EXTRA,
}

# Roles that only see meetings they own
RESTRICTED_ROLES: frozenset[UserRole] = frozenset({UserRole.SALESPERSON, UserRole.GUEST})


# ── Public API ────────────────────────────────────────────────────────────


def check_permission(role: UserRole, action: str, resource_type: str) -> bool:
    """Check if a role has permission for an action on a resource type."""
    perms = PERMISSION_MATRIX.get(role)
    if perms is None:
        return False
    return (action, resource_type) in perms


def get_permissions_for_role(role: UserRole) -> dict[str, list[str]]:
    """Return permissions grouped by resource type (for API responses)."""
    perms = PERMISSION_MATRIX.get(role, set())
    result: dict[str, list[str]] = {}
    for action, resource in sorted(perms):
        result.setdefault(resource, []).append(action)
    return result


def meeting_scope(user: CurrentUser) -> uuid.UUID | None:
    """Owner id to filter meetings by, or None when the caller sees everything."""
    if user.role in RESTRICTED_ROLES:
        return user.user_id
    return None
