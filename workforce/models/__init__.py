"""
Models package for data access layer.
"""
from .base_model import DynamoModel
from .timesheet_model import TimesheetModel, TimeEntryModel
from .expense_model import ExpenseModel
from .employee_model import EmployeeModel, full_name
from .client_model import ClientModel
from .project_model import ProjectModel
from .notification_model import NotificationModel

__all__ = [
    'DynamoModel',
    'TimesheetModel',
    'TimeEntryModel',
    'ExpenseModel',
    'EmployeeModel',
    'full_name',
    'ClientModel',
    'ProjectModel',
    'NotificationModel'
]
