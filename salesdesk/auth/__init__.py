"""Auth package: session dependencies and RBAC."""

from salesdesk.auth.dependencies import get_current_user, require_permission
from salesdesk.auth.rbac import check_permission, get_permissions_for_role, meeting_scope

__all__ = [
    "check_permission",
    "get_current_user",
    "get_permissions_for_role",
    "meeting_scope",
    "require_permission",
]
