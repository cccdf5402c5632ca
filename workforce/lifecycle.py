"""
Approval lifecycle shared by timesheets and expenses.

    draft ──submit──> submitted ──approve──> approved (terminal)
      ^                  │
      │               reject
      │                  v
      └──── save ──── rejected ──resubmit──> submitted
"""
from typing import Any, Dict, Optional

from .config import APPROVER_ROLES
from .errors import (
    AttestationRequiredError,
    InvalidTransitionError,
    NotAuthorizedError,
    RecordLockedError,
)

DRAFT = "draft"
SUBMITTED = "submitted"
APPROVED = "approved"
REJECTED = "rejected"
STATUSES = (DRAFT, SUBMITTED, APPROVED, REJECTED)

TIMESHEET = "timesheet"
EXPENSE = "expense"
KINDS = (TIMESHEET, EXPENSE)

OWNER = "owner"
APPROVER = "approver"

# (from, to) -> who may perform it
TRANSITIONS: Dict[tuple, str] = {
    (DRAFT, DRAFT): OWNER,
    (DRAFT, SUBMITTED): OWNER,
    (SUBMITTED, APPROVED): APPROVER,
    (SUBMITTED, REJECTED): APPROVER,
    (REJECTED, REJECTED): OWNER,
    (REJECTED, DRAFT): OWNER,
    (REJECTED, SUBMITTED): OWNER,
}

EDITABLE_STATUSES = (DRAFT, REJECTED)


def normalize_status(value: Any) -> str:
    status = str(value or "").strip().lower()
    # older rows used "pending" for submitted
    if status == "pending":
        return SUBMITTED
    return status


def ensure_mutable(record: Dict[str, Any]) -> None:
    """Raise RecordLockedError if the record is approved."""
    if normalize_status(record.get("status")) == APPROVED:
        raise RecordLockedError("Approved records cannot be changed")


def ensure_editable(record: Dict[str, Any]) -> None:
    """Edits are allowed while a record is a draft or was rejected."""
    ensure_mutable(record)
    status = normalize_status(record.get("status"))
    if status not in EDITABLE_STATUSES:
        raise InvalidTransitionError(f"Cannot edit a record while it is {status}")


def check_transition(kind: str, current: Any, target: Any, actor: str,
                     attestation: Optional[bool] = None, actor_role: Optional[str] = None) -> str:
    """
    Validate a status change and return the normalized target status.

    Args:
        kind: "timesheet" or "expense".
        current: current status of the record.
        target: requested status.
        actor: "owner" or "approver", i.e. the caller's relationship to the record.
        attestation: accuracy attestation; required when a timesheet is submitted.
        actor_role: caller role; approver transitions require manager or admin.
    """
    current = normalize_status(current) or DRAFT
    target = normalize_status(target)

    if kind not in KINDS:
        raise InvalidTransitionError(f"Unknown record kind: {kind!r}")
    if current == APPROVED:
        raise RecordLockedError(f"{kind.capitalize()} is already approved")
    if target not in STATUSES:
        raise InvalidTransitionError(f"Unknown status: {target!r}")

    allowed_actor = TRANSITIONS.get((current, target))
    if allowed_actor is None:
        raise InvalidTransitionError(f"Cannot move {kind} from {current} to {target}")
    if allowed_actor != actor:
        raise NotAuthorizedError(f"Only the {allowed_actor} can move a {kind} from {current} to {target}")
    if allowed_actor == APPROVER and (actor_role or "").lower() not in APPROVER_ROLES:
        raise NotAuthorizedError("Only managers and admins can approve or reject")

    if kind == TIMESHEET and target == SUBMITTED and attestation is not True:
        raise AttestationRequiredError("Please certify that your hours are accurate before submitting",
                                       fields={"attestation": "must be true"})
    return target
