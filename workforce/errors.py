"""
Error taxonomy.

Core functions raise these and never log or swallow them; handlers map them
onto HTTP status codes (see handlers.common.error_status).
"""


class WorkforceError(Exception):
    """Base class for all domain errors."""


class ValidationError(WorkforceError):
    """Input failed validation."""

    def __init__(self, message: str, fields=None):
        super().__init__(message)
        self.fields = fields or {}


class InvalidHoursError(ValidationError):
    """Hours outside [0, 24], negative, or not a number."""


class InvalidEntryDateError(ValidationError):
    """An entry date falls outside the week being normalized."""


class AttestationRequiredError(ValidationError):
    """Timesheet submitted without the accuracy attestation."""


class PolicyResolutionError(WorkforceError):
    """Unknown overtime rule, or a rule applied to the wrong input shape."""


class RecordLockedError(WorkforceError):
    """Mutation attempted on an approved record."""


class InvalidTransitionError(WorkforceError):
    """Status change not allowed from the record's current status."""


class StateConflictError(WorkforceError):
    """Record status changed underneath a conditional update."""


class NotFoundError(WorkforceError):
    """Record does not exist."""


class NotAuthorizedError(WorkforceError):
    """Caller's role or ownership does not permit the action."""
