"""
Employee and client directory: CRUD with admin-only writes.
"""
import uuid
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterable, List, Optional

from ..config import ROLES
from ..errors import NotAuthorizedError, NotFoundError, ValidationError
from ..logging_config import create_logger
from ..models import ClientModel, EmployeeModel, ProjectModel
from ..utils import now_iso, to_dynamo
from .policy_service import PolicyService

logger = create_logger("services.directory_service")

EMPLOYEE_TEXT_FIELDS = ("firstName", "lastName", "email", "department", "clientID", "managerID")


def require_active_projects(project_model: ProjectModel, project_ids: Iterable[str]) -> None:
    """Raise ValidationError unless every id names an existing, active project."""
    wanted = {p for p in project_ids if p}
    if not wanted:
        return
    found = project_model.get_many(wanted)
    errors = {}
    for project_id in sorted(wanted):
        project = found.get(project_id)
        if project is None:
            errors[f"projectID:{project_id}"] = "not found"
        elif project.get("isActive", True) is False:
            errors[f"projectID:{project_id}"] = "inactive"
    if errors:
        raise ValidationError("Unknown or inactive project", fields=errors)


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes")
    return bool(value)


def clean_employee_fields(payload: Dict[str, Any], partial: bool = False) -> Dict[str, Any]:
    fields: Dict[str, Any] = {}
    errors: Dict[str, str] = {}

    for name in ("firstName", "lastName", "email", "role"):
        if not partial and not str(payload.get(name) or "").strip():
            errors[name] = "required"

    for name in EMPLOYEE_TEXT_FIELDS:
        if name in payload:
            value = str(payload[name] or "").strip()
            if value:
                fields[name] = value

    if payload.get("email") and "@" not in str(payload["email"]):
        errors["email"] = "invalid"

    if payload.get("role") not in (None, ""):
        role = str(payload["role"]).strip().lower()
        if role not in ROLES:
            errors["role"] = f"must be one of {', '.join(ROLES)}"
        fields["role"] = role

    if payload.get("hourlyRate") not in (None, ""):
        try:
            rate = Decimal(str(payload["hourlyRate"]))
            if not rate.is_finite() or rate < 0:
                raise InvalidOperation
            fields["hourlyRate"] = rate
        except (InvalidOperation, ValueError):
            errors["hourlyRate"] = "must be a number >= 0"

    if "state" in payload:
        fields["state"] = str(payload["state"] or "").strip().upper() or None
    for name in ("isExempt", "isActive"):
        if name in payload:
            fields[name] = _as_bool(payload[name])

    if errors:
        raise ValidationError("Validation error", fields=errors)
    return fields


class DirectoryService:
    """Service class for employee and client records"""

    def __init__(self, employee_model: Optional[EmployeeModel] = None,
                 client_model: Optional[ClientModel] = None,
                 policy_service: Optional[PolicyService] = None,
                 project_model: Optional[ProjectModel] = None):
        self.employee_model = employee_model or EmployeeModel()
        self.client_model = client_model or ClientModel()
        self.policy_service = policy_service or PolicyService()
        self.project_model = project_model or ProjectModel()

    # ---------- employees ----------

    def list_employees(self, user: Dict[str, Any], include_inactive: bool = False) -> List[Dict[str, Any]]:
        self.policy_service.require(user, "Employees", "view")
        items = self.employee_model.list_all() if include_inactive else self.employee_model.list_active()
        return sorted(items, key=lambda e: (str(e.get("lastName", "")).casefold(),
                                            str(e.get("firstName", "")).casefold(),
                                            e.get("employeeID", "")))

    def get_employee(self, user: Dict[str, Any], employee_id: str) -> Dict[str, Any]:
        if employee_id != user["user_id"]:
            self.policy_service.require(user, "Employees", "view")
        return self._load_employee(employee_id)

    def create_employee(self, user: Dict[str, Any], payload: Dict[str, Any]) -> Dict[str, Any]:
        self.policy_service.require(user, "Employees", "modify")
        fields = clean_employee_fields(payload)
        self._check_references(fields)

        now = now_iso()
        employee = {
            "employeeID": str(payload.get("employeeID") or uuid.uuid4()),
            "isActive": True,
            "isExempt": False,
            "hourlyRate": Decimal("0"),
            "createdAt": now,
            "updatedAt": now,
            "createdBy": user["user_id"],
            **fields,
        }
        if self.employee_model.get(employee["employeeID"]):
            raise ValidationError("Employee already exists", fields={"employeeID": "already exists"})
        self.employee_model.put(to_dynamo(employee))
        logger.info(f"Created employee {employee['employeeID']} by {user['user_id']}")
        return to_dynamo(employee)

    def update_employee(self, user: Dict[str, Any], employee_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        self.policy_service.require(user, "Employees", "modify")
        existing = self._load_employee(employee_id)
        fields = clean_employee_fields(payload, partial=True)
        if not fields:
            raise ValidationError("No fields to update")
        if fields.get("managerID") == employee_id:
            raise ValidationError("An employee cannot manage themselves", fields={"managerID": "self"})
        self._check_references(fields)

        fields["updatedAt"] = now_iso()
        updated = self.employee_model.update_fields(employee_id, to_dynamo(fields))
        logger.info(f"Updated employee {employee_id}: {sorted(fields)}")
        return updated or {**existing, **fields}

    def deactivate_employee(self, user: Dict[str, Any], employee_id: str) -> Dict[str, Any]:
        """Employees are never hard-deleted; their timesheets keep referencing them."""
        self.policy_service.require(user, "Employees", "modify")
        if employee_id == user["user_id"]:
            raise NotAuthorizedError("You cannot deactivate your own account")
        self._load_employee(employee_id)
        updated = self.employee_model.update_fields(employee_id, {"isActive": False, "updatedAt": now_iso()})
        logger.info(f"Deactivated employee {employee_id}")
        return updated

    # ---------- clients ----------

    def list_clients(self, user: Dict[str, Any], include_inactive: bool = False) -> List[Dict[str, Any]]:
        self.policy_service.require(user, "Clients", "view")
        items = self.client_model.list_all()
        if not include_inactive:
            items = [c for c in items if c.get("isActive", True)]
        return sorted(items, key=lambda c: (str(c.get("name", "")).casefold(), c.get("clientID", "")))

    def get_client(self, user: Dict[str, Any], client_id: str) -> Dict[str, Any]:
        self.policy_service.require(user, "Clients", "view")
        return self._load_client(client_id)

    def create_client(self, user: Dict[str, Any], payload: Dict[str, Any]) -> Dict[str, Any]:
        self.policy_service.require(user, "Clients", "modify")
        name = str(payload.get("name") or "").strip()
        if not name:
            raise ValidationError("name is required", fields={"name": "required"})
        if self.client_model.name_exists(name):
            raise ValidationError("Client name already in use", fields={"name": "duplicate"})

        now = now_iso()
        client = {
            "clientID": str(uuid.uuid4()),
            "name": name,
            "isActive": _as_bool(payload.get("isActive", True)),
            "createdAt": now,
            "updatedAt": now,
            "createdBy": user["user_id"],
        }
        self.client_model.put(client)
        logger.info(f"Created client {client['clientID']} ({name}) by {user['user_id']}")
        return client

    def update_client(self, user: Dict[str, Any], client_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        self.policy_service.require(user, "Clients", "modify")
        existing = self._load_client(client_id)
        fields: Dict[str, Any] = {}
        if "name" in payload:
            name = str(payload.get("name") or "").strip()
            if not name:
                raise ValidationError("name cannot be empty", fields={"name": "required"})
            if name != existing.get("name") and self.client_model.name_exists(name, exclude_client_id=client_id):
                raise ValidationError("Client name already in use", fields={"name": "duplicate"})
            fields["name"] = name
        if "isActive" in payload:
            fields["isActive"] = _as_bool(payload["isActive"])
        if not fields:
            raise ValidationError("No fields to update")

        fields["updatedAt"] = now_iso()
        updated = self.client_model.update_fields(client_id, fields)
        logger.info(f"Updated client {client_id}: {sorted(fields)}")
        return updated or {**existing, **fields}

    def delete_client(self, user: Dict[str, Any], client_id: str) -> None:
        self.policy_service.require(user, "Clients", "modify")
        self._load_client(client_id)
        assigned = [e for e in self.employee_model.list_all() if e.get("clientID") == client_id]
        if assigned:
            raise ValidationError(f"Client has {len(assigned)} assigned employee(s); reassign them first",
                                  fields={"clientID": "in use"})
        projects = self.project_model.list_for_client(client_id)
        if projects:
            raise ValidationError(f"Client owns {len(projects)} project(s); move or remove them first",
                                  fields={"clientID": "has projects"})
        self.client_model.delete(client_id)
        logger.info(f"Deleted client {client_id}")

    # ---------- projects ----------

    def list_projects(self, user: Dict[str, Any], include_inactive: bool = False,
                      client_id: Optional[str] = None) -> List[Dict[str, Any]]:
        self.policy_service.require(user, "Projects", "view")
        items = self.project_model.list_for_client(client_id) if client_id else self.project_model.list_all()
        if not include_inactive:
            items = [p for p in items if p.get("isActive", True)]
        return sorted(items, key=lambda p: (str(p.get("name", "")).casefold(), p.get("projectID", "")))

    def get_project(self, user: Dict[str, Any], project_id: str) -> Dict[str, Any]:
        self.policy_service.require(user, "Projects", "view")
        return self._load_project(project_id)

    def create_project(self, user: Dict[str, Any], payload: Dict[str, Any]) -> Dict[str, Any]:
        self.policy_service.require(user, "Projects", "modify")
        fields = self._clean_project_fields(payload)
        for name in ("name", "code"):
            if not fields.get(name):
                raise ValidationError(f"{name} is required", fields={name: "required"})
        if self.project_model.code_exists(fields["code"]):
            raise ValidationError("Project code already in use", fields={"code": "duplicate"})

        now = now_iso()
        project = {
            "projectID": str(payload.get("projectID") or uuid.uuid4()),
            "isActive": True,
            "createdAt": now,
            "updatedAt": now,
            "createdBy": user["user_id"],
            **fields,
        }
        self.project_model.put(project, only_if_new=True)
        logger.info(f"Created project {project['projectID']} ({project['code']}) by {user['user_id']}")
        return project

    def update_project(self, user: Dict[str, Any], project_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        self.policy_service.require(user, "Projects", "modify")
        existing = self._load_project(project_id)
        fields = self._clean_project_fields(payload)
        if not fields:
            raise ValidationError("No fields to update")
        for name in ("name", "code"):
            if name in payload and not fields.get(name):
                raise ValidationError(f"{name} cannot be empty", fields={name: "required"})
        if fields.get("code") and fields["code"] != existing.get("code") \
                and self.project_model.code_exists(fields["code"], exclude_project_id=project_id):
            raise ValidationError("Project code already in use", fields={"code": "duplicate"})

        fields["updatedAt"] = now_iso()
        updated = self.project_model.update_fields(project_id, fields)
        logger.info(f"Updated project {project_id}: {sorted(fields)}")
        return updated or {**existing, **fields}

    def deactivate_project(self, user: Dict[str, Any], project_id: str) -> Dict[str, Any]:
        """Projects stay on record for the time entries that reference them."""
        self.policy_service.require(user, "Projects", "modify")
        self._load_project(project_id)
        updated = self.project_model.update_fields(project_id, {"isActive": False, "updatedAt": now_iso()})
        logger.info(f"Deactivated project {project_id}")
        return updated

    # ---------- helpers ----------

    def _load_employee(self, employee_id: str) -> Dict[str, Any]:
        employee = self.employee_model.get(employee_id)
        if not employee:
            raise NotFoundError(f"Employee {employee_id} not found")
        return employee

    def _load_client(self, client_id: str) -> Dict[str, Any]:
        client = self.client_model.get(client_id)
        if not client:
            raise NotFoundError(f"Client {client_id} not found")
        return client

    def _load_project(self, project_id: str) -> Dict[str, Any]:
        project = self.project_model.get(project_id)
        if not project:
            raise NotFoundError(f"Project {project_id} not found")
        return project

    def _clean_project_fields(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        fields: Dict[str, Any] = {}
        for name in ("name", "code", "description"):
            if name in payload:
                fields[name] = str(payload[name] or "").strip()
        if fields.get("code"):
            fields["code"] = fields["code"].upper()
        if payload.get("clientID"):
            fields["clientID"] = str(payload["clientID"]).strip()
            if not self.client_model.get(fields["clientID"]):
                raise ValidationError("Unknown client", fields={"clientID": "not found"})
        if "isActive" in payload:
            fields["isActive"] = _as_bool(payload["isActive"])
        return fields

    def _check_references(self, fields: Dict[str, Any]) -> None:
        if fields.get("clientID") and not self.client_model.get(fields["clientID"]):
            raise ValidationError("Unknown client", fields={"clientID": "not found"})
        if fields.get("managerID") and not self.employee_model.get(fields["managerID"]):
            raise ValidationError("Unknown manager", fields={"managerID": "not found"})
