# Request handlers for in-app notifications
from typing import Optional

from ..errors import ValidationError, WorkforceError
from ..services import NotificationService, PolicyService
from ..utils import build_response
from .common import as_bool, error_response, normalize_ids, query_params


def handle_list_notifications(event, user_context, service: Optional[NotificationService] = None):
    try:
        PolicyService().require(user_context, "Notifications", "view")
        result = (service or NotificationService()).list_for_user(
            user_context["user_id"], unread_only=as_bool(query_params(event).get("unread"))
        )
        return build_response(event, data=result)
    except WorkforceError as e:
        return error_response(event, e)


def handle_mark_read(event, body, user_context, service: Optional[NotificationService] = None):
    try:
        ids = normalize_ids(body.get("notificationIDs"))
        if not ids:
            raise ValidationError("notificationIDs must be a non-empty list", fields={"notificationIDs": "required"})
        updated = (service or NotificationService()).mark_read(user_context["user_id"], ids)
        return build_response(event, data={"message": f"Marked {updated} notification(s) read", "updated": updated})
    except WorkforceError as e:
        return error_response(event, e)
