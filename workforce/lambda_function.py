# Main Lambda entrypoint - routes requests to appropriate handlers
import json
import time
import traceback
from typing import Any, Dict, List, Optional, Tuple

from . import __version__
from .handlers.approval_handlers import handle_decide, handle_pending_queue
from .handlers.directory_handlers import handle_clients, handle_employees, handle_projects
from .handlers.expense_handlers import (
    handle_create_expense,
    handle_delete_expense,
    handle_get_expense,
    handle_list_expenses,
    handle_update_expense,
)
from .handlers.notification_handlers import handle_list_notifications, handle_mark_read
from .handlers.report_handlers import handle_client_report, handle_export
from .handlers.timesheet_handlers import (
    handle_calculate,
    handle_delete_timesheet,
    handle_get_timesheet,
    handle_list_timesheets,
    handle_save_timesheet,
    handle_update_timesheet,
)
from .logging_config import create_logger
from .services import ReminderService
from .utils import get_cors_headers

logger = create_logger("workforce_lambda")

ROOTS = ("timesheets", "expenses", "approvals", "reports", "employees", "clients", "projects", "notifications")

SUPPORTED = {
    "timesheets": ["GET", "POST", "PUT", "DELETE"],
    "expenses": ["GET", "POST", "PUT", "DELETE"],
    "approvals": ["GET", "POST"],
    "reports": ["GET", "POST"],
    "employees": ["GET", "POST", "PUT", "DELETE"],
    "clients": ["GET", "POST", "PUT", "DELETE"],
    "projects": ["GET", "POST", "PUT", "DELETE"],
    "notifications": ["GET", "PUT"],
}


def split_route(request_path: str) -> Tuple[Optional[str], List[str]]:
    """
    Find the resource root in the path and return it with the remaining
    segments; any stage or base-path prefix before the root is ignored.
    """
    segments = [s for s in (request_path or "").split("/") if s]
    for i, segment in enumerate(segments):
        if segment in ROOTS:
            return segment, segments[i + 1:]
    return None, []


def _dispatch(event: Dict[str, Any], method: str, root: str, rest: List[str],
              body: Dict[str, Any], user_context: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    sub = rest[0] if rest else None

    if root == "timesheets":
        if sub == "calculate" and method == "POST":
            return handle_calculate(event, body, user_context)
        if sub is None:
            if method == "GET":
                return handle_list_timesheets(event, user_context)
            if method == "POST":
                return handle_save_timesheet(event, body, user_context)
        else:
            if method == "GET":
                return handle_get_timesheet(event, user_context)
            if method == "PUT":
                return handle_update_timesheet(event, body, user_context)
            if method == "DELETE":
                return handle_delete_timesheet(event, user_context)

    elif root == "expenses":
        if sub is None:
            if method == "GET":
                return handle_list_expenses(event, user_context)
            if method == "POST":
                return handle_create_expense(event, body, user_context)
        else:
            if method == "GET":
                return handle_get_expense(event, user_context)
            if method == "PUT":
                return handle_update_expense(event, body, user_context)
            if method == "DELETE":
                return handle_delete_expense(event, user_context)

    elif root == "approvals":
        if method == "GET":
            return handle_pending_queue(event, user_context)
        if method == "POST":
            return handle_decide(event, body, user_context)

    elif root == "reports":
        if sub == "clients" and method == "GET":
            return handle_client_report(event, user_context)
        if sub == "export" and method == "POST":
            return handle_export(event, body, user_context)

    elif root == "employees":
        return handle_employees(event, method, body, user_context)

    elif root == "clients":
        return handle_clients(event, method, body, user_context)

    elif root == "projects":
        return handle_projects(event, method, body, user_context)

    elif root == "notifications":
        if method == "GET":
            return handle_list_notifications(event, user_context)
        if method == "PUT":
            return handle_mark_read(event, body, user_context)

    return None


def lambda_handler(request_event, context):
    """
    Main Lambda entrypoint for the workforce API.
    Routes requests to handlers based on the resource root and HTTP method.
    """
    cors_headers = get_cors_headers(request_event)

    def cors_response(status_code, payload):
        return {
            "statusCode": status_code,
            "headers": cors_headers,
            "body": json.dumps(payload, default=str),
        }

    http_method = (request_event.get("httpMethod") or "").upper()
    request_path = request_event.get("path") or request_event.get("resource") or ""

    logger.info(f"Workforce Lambda Handler - Method: {http_method}, Path: {request_path}")

    if http_method == "OPTIONS":
        return cors_response(200, {
            "message": "CORS preflight successful",
            "supportedMethods": ["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        })

    # Extract authorizer context
    try:
        authorizer_context = request_event["requestContext"]["authorizer"]
        user_context = {
            "user_id": authorizer_context["user_id"],
            "role": str(authorizer_context["role"]).lower(),
            "email": authorizer_context.get("email"),
        }
        logger.info(f"Request by user: {user_context['user_id']} ({user_context.get('email') or 'Unknown'}), role: {user_context['role']}")
    except (KeyError, TypeError) as e:
        logger.error(f"Authorization context extraction failed: {e!r}")
        return cors_response(401, {"error": "Unauthorized"})

    # Parse request body
    try:
        raw_body = request_event.get("body") or "{}"
        request_body = json.loads(raw_body) if raw_body.strip() else {}
    except json.JSONDecodeError as e:
        logger.error(f"JSON decode error: {e}")
        return cors_response(400, {"error": f"Invalid JSON in request body: {e}"})
    if not isinstance(request_body, dict):
        return cors_response(400, {"error": "Request body must be a JSON object"})

    root, rest = split_route(request_path)
    if root is None:
        return cors_response(404, {"error": f"Unknown route: {request_path}"})

    # route ids in the path win over a missing pathParameters map
    if rest and rest[0] not in ("calculate", "clients", "export"):
        params = dict(request_event.get("pathParameters") or {})
        params.setdefault("id", rest[0])
        request_event = {**request_event, "pathParameters": params}

    try:
        handler_result = _dispatch(request_event, http_method, root, rest, request_body, user_context)
        if handler_result is None:
            return cors_response(405, {
                "error": f"Method Not Allowed: {http_method} {request_path}",
                "supportedMethods": SUPPORTED[root] + ["OPTIONS"],
            })

        handler_result.setdefault("headers", {}).update(cors_headers)
        logger.info(f"{http_method} {request_path} completed with status {handler_result.get('statusCode', 200)}")
        return handler_result

    except Exception as e:
        error_id = f"wf-{int(time.time())}"
        logger.error(f"Unhandled error [{error_id}]: {e}")
        logger.error(f"Stack trace: {traceback.format_exc()}")
        return cors_response(500, {
            "error": "Internal server error occurred while processing your request",
            "errorId": error_id,
            "method": http_method,
            "path": request_path,
        })


def scheduled_handler(event, context):
    """
    EventBridge entrypoint for the reminder sweep.

    An optional {"weekEnding": "YYYY-MM-DD"} in the event overrides the
    default of the last completed week.
    """
    week_ending = (event or {}).get("weekEnding")
    logger.info(f"Reminder sweep triggered (weekEnding={week_ending or 'default'})")
    try:
        return ReminderService().run(week_ending)
    except Exception:
        logger.error(f"Reminder sweep failed: {traceback.format_exc()}")
        raise


def health_check_handler(event, context):
    """Health check endpoint for monitoring"""
    cors_headers = get_cors_headers(event)
    return {
        "statusCode": 200,
        "headers": cors_headers,
        "body": json.dumps({
            "status": "healthy",
            "service": "workforce-api",
            "version": __version__,
        }, default=str),
    }


logger.info("Workforce Lambda Handler initialized")
