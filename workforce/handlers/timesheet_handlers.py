# Request handlers for timesheet operations
from typing import Any, Dict, Optional

from ..errors import ValidationError, WorkforceError
from ..logging_config import create_logger
from ..services import TimesheetService
from ..utils import build_response
from .common import error_response, page_limit, path_id, query_params

logger = create_logger("handlers.timesheet_handlers")


def _required_id(event: Dict[str, Any]) -> str:
    timesheet_id = path_id(event)
    if not timesheet_id:
        raise ValidationError("timesheet id is required", fields={"id": "required"})
    return timesheet_id


def handle_calculate(event, body, user_context, service: Optional[TimesheetService] = None):
    """Preview totals and overtime for a week of rows without saving anything."""
    try:
        result = (service or TimesheetService()).calculate(user_context, body)
        return build_response(event, data=result)
    except WorkforceError as e:
        return error_response(event, e)


def handle_save_timesheet(event, body, user_context, service: Optional[TimesheetService] = None):
    logger.info(f"Save timesheet by {user_context['user_id']} week={body.get('weekEnding')} submit={bool(body.get('submit'))}")
    try:
        result = (service or TimesheetService()).save_timesheet(user_context, body)
        return build_response(event, data={"message": "Timesheet saved", "timesheet": result})
    except WorkforceError as e:
        return error_response(event, e)


def handle_get_timesheet(event, user_context, service: Optional[TimesheetService] = None):
    try:
        result = (service or TimesheetService()).get_timesheet(user_context, _required_id(event))
        return build_response(event, data={"timesheet": result})
    except WorkforceError as e:
        return error_response(event, e)


def handle_list_timesheets(event, user_context, service: Optional[TimesheetService] = None):
    params = query_params(event)
    try:
        result = (service or TimesheetService()).list_timesheets(
            user_context,
            employee_id=params.get("employeeID"),
            status=params.get("status"),
            limit=page_limit(params),
            next_token=params.get("nextToken"),
            week_ending=params.get("weekEnding"),
        )
        return build_response(event, data=result)
    except WorkforceError as e:
        return error_response(event, e)


def handle_update_timesheet(event, body, user_context, service: Optional[TimesheetService] = None):
    try:
        timesheet_id = _required_id(event)
        logger.info(f"Update timesheet {timesheet_id} by {user_context['user_id']} submit={bool(body.get('submit'))}")
        result = (service or TimesheetService()).update_timesheet(user_context, timesheet_id, body)
        return build_response(event, data={"message": "Timesheet updated", "timesheet": result})
    except WorkforceError as e:
        return error_response(event, e)


def handle_delete_timesheet(event, user_context, service: Optional[TimesheetService] = None):
    try:
        timesheet_id = _required_id(event)
        (service or TimesheetService()).delete_timesheet(user_context, timesheet_id)
        return build_response(event, data={"message": "Timesheet deleted", "timesheetID": timesheet_id})
    except WorkforceError as e:
        return error_response(event, e)
