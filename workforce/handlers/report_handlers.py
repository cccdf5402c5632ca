# Request handlers for client reports and exports
from typing import Optional

from ..errors import WorkforceError
from ..services import ReportService
from ..utils import build_response
from .common import error_response, query_params


def handle_client_report(event, user_context, service: Optional[ReportService] = None):
    params = query_params(event)
    try:
        result = (service or ReportService()).client_report(
            user_context, (params.get("kind") or "timesheet").lower(), params.get("from"), params.get("to")
        )
        return build_response(event, data=result)
    except WorkforceError as e:
        return error_response(event, e)


def handle_export(event, body, user_context, service: Optional[ReportService] = None):
    try:
        result = (service or ReportService()).export_csv(
            user_context, str(body.get("kind") or "timesheet").lower(), body.get("from"), body.get("to")
        )
        return build_response(event, data=result, status=201)
    except WorkforceError as e:
        return error_response(event, e)
