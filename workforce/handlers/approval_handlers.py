# Request handlers for approval operations
from typing import Optional

from ..config import MAX_BATCH_IDS
from ..errors import ValidationError, WorkforceError
from ..lifecycle import APPROVED, KINDS, REJECTED, normalize_status
from ..logging_config import create_logger
from ..services import ApprovalService
from ..utils import build_response
from .common import error_response, normalize_ids

logger = create_logger("handlers.approval_handlers")


def handle_pending_queue(event, user_context, service: Optional[ApprovalService] = None):
    try:
        result = (service or ApprovalService()).pending_queue(user_context)
        return build_response(event, data=result)
    except WorkforceError as e:
        return error_response(event, e)


def handle_decide(event, body, user_context, service: Optional[ApprovalService] = None):
    """
    Approve or reject a batch of timesheets or expenses.

    Body: {"kind": "timesheet"|"expense", "ids": [...], "status": "approved"|"rejected", "comments": "..."}

    Status mapping: 200 when everything succeeded, 207 on partial success,
    403 when every failure was a blocked self-approval, otherwise 400.
    """
    logger.info(f"Approval decision by user {user_context['user_id']}")
    try:
        kind = str(body.get("kind") or "").strip().lower()
        if kind not in KINDS:
            raise ValidationError("kind must be 'timesheet' or 'expense'", fields={"kind": "invalid"})

        status = normalize_status(body.get("status"))
        if status not in (APPROVED, REJECTED):
            raise ValidationError("status must be 'approved' or 'rejected'", fields={"status": "invalid"})

        raw_ids = body.get("ids")
        ids = normalize_ids(raw_ids)
        if not ids:
            raise ValidationError("ids must be a non-empty list", fields={"ids": "required"})
        if len(ids) > MAX_BATCH_IDS:
            return build_response(
                event,
                error=f"Too many IDs: {len(ids)} > {MAX_BATCH_IDS}. Submit in smaller batches.",
                status=413,
            )

        comments = str(body.get("comments") or "").strip()
        if status == REJECTED and not comments:
            raise ValidationError("A comment is required when rejecting", fields={"comments": "required"})

        result = (service or ApprovalService()).decide(user_context, kind, ids, status, comments)
    except WorkforceError as e:
        return error_response(event, e)

    total = len(ids)
    succeeded = len(result["succeeded"])
    failed = len(result["failed"])
    self_blocked = len(result["self_approval_blocked"])
    statistics = {
        "total": total,
        "succeeded": succeeded,
        "failed": failed,
        "selfApprovalBlocked": self_blocked,
        "deduplicated": isinstance(raw_ids, list) and len(ids) != len(raw_ids),
    }

    if succeeded == 0:
        if self_blocked > 0 and failed == self_blocked:
            response_data = {
                "error": "Cannot approve your own requests",
                "message": f"Blocked {self_blocked} self-approval attempts",
                "results": result,
                "statistics": statistics,
            }
            status_code = 403
        else:
            response_data = {
                "error": "Failed to process any approval requests",
                "results": result,
                "statistics": statistics,
            }
            status_code = 400
    else:
        response_data = {
            "message": f"Successfully processed {succeeded} of {total} approval requests",
            "results": result,
            "statistics": statistics,
        }
        status_code = 207 if failed else 200

    if self_blocked > 0:
        response_data["warnings"] = [
            f"Blocked {self_blocked} self-approval attempts - users cannot approve their own requests"
        ]
    return build_response(event, data=response_data, status=status_code)
