"""
In-app notification records and their templates.
"""
import uuid
from typing import Any, Dict, List, Optional

from botocore.exceptions import ClientError

from ..logging_config import create_logger
from ..models import NotificationModel
from ..utils import now_iso, to_dynamo

logger = create_logger("services.notification_service")

CRITICAL, HIGH, MEDIUM, LOW, INFO = "critical", "high", "medium", "low", "info"

TIMESHEET_SUBMITTED = "timesheet_submitted"
TIMESHEET_APPROVED = "timesheet_approved"
TIMESHEET_REJECTED = "timesheet_rejected"
EXPENSE_SUBMITTED = "expense_submitted"
EXPENSE_APPROVED = "expense_approved"
EXPENSE_REJECTED = "expense_rejected"
TIMESHEET_OVERDUE = "timesheet_overdue"
MANAGER_PENDING_REMINDER = "manager_pending_reminder"

TEMPLATES = {
    TIMESHEET_SUBMITTED: {
        "title": "Timesheet Submitted",
        "message": "A new timesheet has been submitted for your approval",
        "priority": HIGH,
    },
    TIMESHEET_APPROVED: {
        "title": "Timesheet Approved",
        "message": "Your timesheet has been approved",
        "priority": MEDIUM,
    },
    TIMESHEET_REJECTED: {
        "title": "Timesheet Rejected",
        "message": "Your timesheet has been rejected. Please review and resubmit.",
        "priority": HIGH,
    },
    EXPENSE_SUBMITTED: {
        "title": "Expense Submitted",
        "message": "A new expense has been submitted for your approval",
        "priority": HIGH,
    },
    EXPENSE_APPROVED: {
        "title": "Expense Approved",
        "message": "Your expense has been approved",
        "priority": MEDIUM,
    },
    EXPENSE_REJECTED: {
        "title": "Expense Rejected",
        "message": "Your expense has been rejected. Please review and resubmit.",
        "priority": HIGH,
    },
    TIMESHEET_OVERDUE: {
        "title": "Timesheet Overdue",
        "message": "Your timesheet is overdue and needs immediate attention",
        "priority": CRITICAL,
    },
    MANAGER_PENDING_REMINDER: {
        "title": "Pending Approvals",
        "message": "You have pending items that require your approval",
        "priority": HIGH,
    },
}

# lifecycle kind + decision -> notification type
DECISION_TYPES = {
    ("timesheet", "approved"): TIMESHEET_APPROVED,
    ("timesheet", "rejected"): TIMESHEET_REJECTED,
    ("expense", "approved"): EXPENSE_APPROVED,
    ("expense", "rejected"): EXPENSE_REJECTED,
}
SUBMITTED_TYPES = {"timesheet": TIMESHEET_SUBMITTED, "expense": EXPENSE_SUBMITTED}


class NotificationService:
    """Creates and reads notification records"""

    def __init__(self, notification_model: Optional[NotificationModel] = None):
        self.notification_model = notification_model or NotificationModel()

    def notify(self, user_id: Optional[str], notification_type: str, related_id: Optional[str] = None,
               related_type: Optional[str] = None, metadata: Optional[Dict[str, Any]] = None) -> Optional[str]:
        """
        Store a notification for ``user_id``.

        Returns the notification id, or None when there is no recipient or the
        write failed; a failed notification never fails the caller's operation.
        """
        if not user_id:
            return None
        template = TEMPLATES[notification_type]
        notification_id = str(uuid.uuid4())
        item = {
            "userID": user_id,
            "notificationID": notification_id,
            "type": notification_type,
            "title": template["title"],
            "message": template["message"],
            "priority": template["priority"],
            "relatedID": related_id,
            "relatedType": related_type,
            "metadata": metadata or {},
            "isRead": False,
            "createdAt": now_iso(),
        }
        try:
            self.notification_model.put(to_dynamo(item))
        except ClientError as e:
            logger.warning(f"Failed to store {notification_type} notification for {user_id}: {e}")
            return None
        logger.info(f"Notification {notification_type} -> {user_id} ({related_type}:{related_id})")
        return notification_id

    def list_for_user(self, user_id: str, unread_only: bool = False) -> Dict[str, Any]:
        items = self.notification_model.list_for_user(user_id, unread_only=unread_only)
        unread = [n for n in items if not n.get("isRead")]
        by_priority: Dict[str, int] = {}
        for n in unread:
            by_priority[n.get("priority", INFO)] = by_priority.get(n.get("priority", INFO), 0) + 1
        return {
            "notifications": items,
            "stats": {"total": len(items), "unread": len(unread), "byPriority": by_priority},
        }

    def mark_read(self, user_id: str, notification_ids: List[str]) -> int:
        return self.notification_model.mark_read(user_id, notification_ids, now_iso())
