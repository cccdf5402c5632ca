# Business logic for expense entry and submission
import uuid
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional

from ..config import DEFAULT_PAGE_SIZE
from ..errors import NotAuthorizedError, NotFoundError, ValidationError
from ..lifecycle import (
    DRAFT,
    EXPENSE,
    OWNER,
    SUBMITTED,
    check_transition,
    ensure_editable,
    ensure_mutable,
    normalize_status,
)
from ..logging_config import create_logger
from ..models import EmployeeModel, ExpenseModel, ProjectModel
from ..utils import decode_token, encode_token, now_iso, to_dynamo
from ..week import parse_date
from .directory_service import require_active_projects
from .notification_service import SUBMITTED_TYPES, NotificationService
from .policy_service import PolicyService

logger = create_logger("services.expense_service")


def parse_amount(value: Any) -> Decimal:
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError("amount must be a number", fields={"amount": "must be a number"})
    if not amount.is_finite() or amount < 0:
        raise ValidationError("amount must be zero or more", fields={"amount": "must be >= 0"})
    return amount


def clean_expense_fields(payload: Dict[str, Any], partial: bool = False) -> Dict[str, Any]:
    """Validate and normalize the editable expense fields."""
    fields: Dict[str, Any] = {}
    errors: Dict[str, str] = {}

    for name in ("expenseDate", "amount", "category"):
        if not partial and payload.get(name) in (None, ""):
            errors[name] = "required"

    if payload.get("expenseDate") not in (None, ""):
        try:
            fields["expenseDate"] = parse_date(payload["expenseDate"]).isoformat()
        except ValidationError:
            errors["expenseDate"] = "must be YYYY-MM-DD"
    if payload.get("amount") not in (None, ""):
        try:
            fields["amount"] = parse_amount(payload["amount"])
        except ValidationError as e:
            errors.update(e.fields)
    for name in ("category", "vendor", "description", "projectID", "receiptUrl"):
        if name in payload and payload[name] is not None:
            fields[name] = str(payload[name]).strip()

    if errors:
        raise ValidationError("Validation error", fields=errors)
    return fields


class ExpenseService:
    """Service class containing business logic for expense operations"""

    def __init__(self, expense_model: Optional[ExpenseModel] = None,
                 employee_model: Optional[EmployeeModel] = None,
                 notification_service: Optional[NotificationService] = None,
                 policy_service: Optional[PolicyService] = None,
                 project_model: Optional[ProjectModel] = None):
        self.expense_model = expense_model or ExpenseModel()
        self.employee_model = employee_model or EmployeeModel()
        self.notification_service = notification_service or NotificationService()
        self.policy_service = policy_service or PolicyService()
        self.project_model = project_model or ProjectModel()

    def create_expense(self, user: Dict[str, Any], payload: Dict[str, Any]) -> Dict[str, Any]:
        self.policy_service.require(user, "Expenses", "create")
        fields = clean_expense_fields(payload)
        require_active_projects(self.project_model, [fields.get("projectID")])
        target = SUBMITTED if payload.get("submit") else DRAFT
        check_transition(EXPENSE, DRAFT, target, OWNER)

        now = now_iso()
        expense = {
            "expenseID": str(uuid.uuid4()),
            "employeeID": user["user_id"],
            "status": target,
            "createdAt": now,
            "updatedAt": now,
            **fields,
        }
        if target == SUBMITTED:
            expense["submittedAt"] = now

        self.expense_model.put(to_dynamo(expense))
        logger.info(f"Created expense {expense['expenseID']} for {user['user_id']} as {target}")
        if target == SUBMITTED:
            self._notify_manager(user["user_id"], expense["expenseID"])
        return expense

    def update_expense(self, user: Dict[str, Any], expense_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Edit a draft/rejected expense and optionally (re)submit it."""
        existing = self._load(expense_id)
        self._require_owner(user, existing)
        ensure_editable(existing)

        current = normalize_status(existing.get("status"))
        if payload.get("submit"):
            target = SUBMITTED
        elif normalize_status(payload.get("status")) == DRAFT:
            target = DRAFT
        else:
            target = current
        check_transition(EXPENSE, current, target, OWNER)

        now = now_iso()
        fields = {**clean_expense_fields(payload, partial=True), "status": target, "updatedAt": now}
        require_active_projects(self.project_model, [fields.get("projectID")])
        if target == SUBMITTED:
            fields["submittedAt"] = now

        updated = self.expense_model.update_fields(expense_id, to_dynamo(fields), expected_status=existing["status"])
        logger.info(f"Updated expense {expense_id}: {current} -> {target}")
        if target == SUBMITTED:
            self._notify_manager(existing["employeeID"], expense_id)
        return updated or {**existing, **fields}

    def get_expense(self, user: Dict[str, Any], expense_id: str) -> Dict[str, Any]:
        expense = self._load(expense_id)
        if expense.get("employeeID") != user["user_id"]:
            self.policy_service.require(user, "Expenses", "view_others")
            if normalize_status(expense.get("status")) == DRAFT:
                raise NotFoundError(f"Expense {expense_id} not found")
        return expense

    def list_expenses(self, user: Dict[str, Any], employee_id: Optional[str] = None,
                      status: Optional[str] = None, limit: int = DEFAULT_PAGE_SIZE,
                      next_token: Optional[str] = None) -> Dict[str, Any]:
        employee_id = employee_id or user["user_id"]
        if employee_id != user["user_id"]:
            self.policy_service.require(user, "Expenses", "view_others")
        items, lek = self.expense_model.list_by_employee(
            employee_id, limit, decode_token(next_token), status=normalize_status(status) or None
        )
        if employee_id != user["user_id"]:
            items = [e for e in items if normalize_status(e.get("status")) != DRAFT]
        return {"items": items, "nextToken": encode_token(lek)}

    def delete_expense(self, user: Dict[str, Any], expense_id: str) -> None:
        expense = self._load(expense_id)
        self._require_owner(user, expense)
        ensure_mutable(expense)
        if normalize_status(expense.get("status")) == SUBMITTED:
            raise ValidationError("Submitted expenses cannot be deleted while awaiting review")
        self.expense_model.delete(expense_id, expected_status=expense["status"])
        logger.info(f"Deleted expense {expense_id}")

    def _load(self, expense_id: str) -> Dict[str, Any]:
        expense = self.expense_model.get(expense_id)
        if not expense:
            raise NotFoundError(f"Expense {expense_id} not found")
        return expense

    @staticmethod
    def _require_owner(user: Dict[str, Any], expense: Dict[str, Any]) -> None:
        if expense.get("employeeID") != user["user_id"]:
            raise NotAuthorizedError("Only the owner can change this expense")

    def _notify_manager(self, employee_id: str, expense_id: str) -> None:
        employee = self.employee_model.get(employee_id) or {}
        self.notification_service.notify(
            employee.get("managerID"), SUBMITTED_TYPES[EXPENSE], related_id=expense_id,
            related_type=EXPENSE, metadata={"employeeID": employee_id},
        )
