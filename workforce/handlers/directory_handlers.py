# Request handlers for employee, client and project records
from typing import Any, Dict, Optional

from ..errors import ValidationError, WorkforceError
from ..services import DirectoryService
from ..utils import build_response
from .common import as_bool, error_response, path_id, query_params


def _required_id(event: Dict[str, Any], what: str) -> str:
    record_id = path_id(event)
    if not record_id:
        raise ValidationError(f"{what} id is required", fields={"id": "required"})
    return record_id


def handle_employees(event, method: str, body, user_context, service: Optional[DirectoryService] = None):
    service = service or DirectoryService()
    try:
        employee_id = path_id(event)
        if method == "GET":
            if employee_id:
                return build_response(event, data={"employee": service.get_employee(user_context, employee_id)})
            items = service.list_employees(user_context, include_inactive=as_bool(query_params(event).get("includeInactive")))
            return build_response(event, data={"items": items})
        if method == "POST":
            employee = service.create_employee(user_context, body)
            return build_response(event, data={"message": "Employee created", "employee": employee}, status=201)
        if method == "PUT":
            employee = service.update_employee(user_context, _required_id(event, "employee"), body)
            return build_response(event, data={"message": "Employee updated", "employee": employee})
        if method == "DELETE":
            employee = service.deactivate_employee(user_context, _required_id(event, "employee"))
            return build_response(event, data={"message": "Employee deactivated", "employee": employee})
    except WorkforceError as e:
        return error_response(event, e)
    return build_response(event, error=f"Method Not Allowed: {method}", status=405)


def handle_clients(event, method: str, body, user_context, service: Optional[DirectoryService] = None):
    service = service or DirectoryService()
    try:
        client_id = path_id(event)
        if method == "GET":
            if client_id:
                return build_response(event, data={"client": service.get_client(user_context, client_id)})
            items = service.list_clients(user_context, include_inactive=as_bool(query_params(event).get("includeInactive")))
            return build_response(event, data={"items": items})
        if method == "POST":
            client = service.create_client(user_context, body)
            return build_response(event, data={"message": "Client created", "client": client}, status=201)
        if method == "PUT":
            client = service.update_client(user_context, _required_id(event, "client"), body)
            return build_response(event, data={"message": "Client updated", "client": client})
        if method == "DELETE":
            client_id = _required_id(event, "client")
            service.delete_client(user_context, client_id)
            return build_response(event, data={"message": "Client deleted", "clientID": client_id})
    except WorkforceError as e:
        return error_response(event, e)
    return build_response(event, error=f"Method Not Allowed: {method}", status=405)


def handle_projects(event, method: str, body, user_context, service: Optional[DirectoryService] = None):
    service = service or DirectoryService()
    try:
        project_id = path_id(event)
        if method == "GET":
            if project_id:
                return build_response(event, data={"project": service.get_project(user_context, project_id)})
            params = query_params(event)
            items = service.list_projects(user_context, include_inactive=as_bool(params.get("includeInactive")),
                                          client_id=params.get("clientID"))
            return build_response(event, data={"items": items})
        if method == "POST":
            project = service.create_project(user_context, body)
            return build_response(event, data={"message": "Project created", "project": project}, status=201)
        if method == "PUT":
            project = service.update_project(user_context, _required_id(event, "project"), body)
            return build_response(event, data={"message": "Project updated", "project": project})
        if method == "DELETE":
            project = service.deactivate_project(user_context, _required_id(event, "project"))
            return build_response(event, data={"message": "Project deactivated", "project": project})
    except WorkforceError as e:
        return error_response(event, e)
    return build_response(event, error=f"Method Not Allowed: {method}", status=405)
