"""
Data access layer for in-app notifications.
"""
from typing import Any, Dict, Iterable, List

from boto3.dynamodb.conditions import Attr, Key
from botocore.exceptions import ClientError

from ..logging_config import create_logger
from .base_model import DynamoModel, is_conditional_failure
from .database import NOTIFICATIONS_TBL

logger = create_logger("models.notification_model")


class NotificationModel(DynamoModel):
    """Notifications keyed by (userID, notificationID)"""

    key_name = "userID"
    default_table = NOTIFICATIONS_TBL

    def list_for_user(self, user_id: str, unread_only: bool = False) -> List[Dict[str, Any]]:
        kwargs = {"KeyConditionExpression": Key("userID").eq(user_id), "ScanIndexForward": False}
        if unread_only:
            kwargs["FilterExpression"] = Attr("isRead").eq(False)
        return self._query_all(**kwargs)

    def mark_read(self, user_id: str, notification_ids: Iterable[str], read_at: str) -> int:
        updated = 0
        for notification_id in notification_ids:
            try:
                self.table.update_item(
                    Key={"userID": user_id, "notificationID": notification_id},
                    UpdateExpression="SET isRead = :r, readAt = :a",
                    ConditionExpression=Attr("notificationID").exists(),
                    ExpressionAttributeValues={":r": True, ":a": read_at},
                )
                updated += 1
            except ClientError as e:
                if is_conditional_failure(e):
                    logger.warning(f"Notification {notification_id} not found for user {user_id}")
                    continue
                raise
        return updated
