# Request handlers for expense operations
from typing import Any, Dict, Optional

from ..errors import ValidationError, WorkforceError
from ..services import ExpenseService
from ..utils import build_response
from .common import error_response, page_limit, path_id, query_params


def _required_id(event: Dict[str, Any]) -> str:
    expense_id = path_id(event)
    if not expense_id:
        raise ValidationError("expense id is required", fields={"id": "required"})
    return expense_id


def handle_create_expense(event, body, user_context, service: Optional[ExpenseService] = None):
    try:
        result = (service or ExpenseService()).create_expense(user_context, body)
        return build_response(event, data={"message": "Expense created", "expense": result}, status=201)
    except WorkforceError as e:
        return error_response(event, e)


def handle_get_expense(event, user_context, service: Optional[ExpenseService] = None):
    try:
        result = (service or ExpenseService()).get_expense(user_context, _required_id(event))
        return build_response(event, data={"expense": result})
    except WorkforceError as e:
        return error_response(event, e)


def handle_list_expenses(event, user_context, service: Optional[ExpenseService] = None):
    params = query_params(event)
    try:
        result = (service or ExpenseService()).list_expenses(
            user_context,
            employee_id=params.get("employeeID"),
            status=params.get("status"),
            limit=page_limit(params),
            next_token=params.get("nextToken"),
        )
        return build_response(event, data=result)
    except WorkforceError as e:
        return error_response(event, e)


def handle_update_expense(event, body, user_context, service: Optional[ExpenseService] = None):
    try:
        result = (service or ExpenseService()).update_expense(user_context, _required_id(event), body)
        return build_response(event, data={"message": "Expense updated", "expense": result})
    except WorkforceError as e:
        return error_response(event, e)


def handle_delete_expense(event, user_context, service: Optional[ExpenseService] = None):
    try:
        expense_id = _required_id(event)
        (service or ExpenseService()).delete_expense(user_context, expense_id)
        return build_response(event, data={"message": "Expense deleted", "expenseID": expense_id})
    except WorkforceError as e:
        return error_response(event, e)
