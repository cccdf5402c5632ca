"""
Role-based permission checks.
"""
from typing import Any, Dict

from ..config import APPROVER_ROLES, ROLES
from ..errors import NotAuthorizedError
from ..logging_config import create_logger

logger = create_logger("services.policy_service")

ADMIN_ONLY = ("admin",)

# (module, action) -> roles allowed
PERMISSIONS = {
    ("Timesheets", "create"): ROLES,
    ("Timesheets", "view_others"): APPROVER_ROLES,
    ("Timesheets", "act_for_others"): ADMIN_ONLY,
    ("Expenses", "create"): ROLES,
    ("Expenses", "view_others"): APPROVER_ROLES,
    ("Approvals", "view"): APPROVER_ROLES,
    ("Approvals", "approve_reject"): APPROVER_ROLES,
    ("Approvals", "view_all"): ADMIN_ONLY,
    ("Reports", "view"): APPROVER_ROLES,
    ("Reports", "export"): APPROVER_ROLES,
    ("Employees", "view"): APPROVER_ROLES,
    ("Employees", "modify"): ADMIN_ONLY,
    ("Clients", "view"): ROLES,
    ("Clients", "modify"): ADMIN_ONLY,
    ("Projects", "view"): ROLES,
    ("Projects", "modify"): ADMIN_ONLY,
    ("Notifications", "view"): ROLES,
}


class PolicyService:
    """Authorization checks against the caller's role"""

    def can_do(self, user_context: Dict[str, Any], module: str, action: str) -> bool:
        role = str((user_context or {}).get("role") or "").strip().lower()
        allowed = role in PERMISSIONS.get((module, action), ())
        if not allowed:
            logger.debug(f"can_do denied: role={role!r} module={module} action={action}")
        return allowed

    def require(self, user_context: Dict[str, Any], module: str, action: str) -> None:
        if not self.can_do(user_context, module, action):
            raise NotAuthorizedError(f"Not authorized to {action.replace('_', ' ')} {module.lower()}")
