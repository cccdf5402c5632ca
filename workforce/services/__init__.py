"""
Services package for business logic layer.
"""
from .policy_service import PolicyService
from .notification_service import NotificationService
from .timesheet_service import TimesheetService
from .expense_service import ExpenseService
from .approval_service import ApprovalService
from .report_service import ReportService
from .reminder_service import ReminderService
from .directory_service import DirectoryService

__all__ = [
    'PolicyService',
    'NotificationService',
    'TimesheetService',
    'ExpenseService',
    'ApprovalService',
    'ReportService',
    'ReminderService',
    'DirectoryService'
]
