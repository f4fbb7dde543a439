"""Application data models exposed for easy imports."""
from swiftexpense import db  # noqa: F401
from .company import Company  # noqa: F401
from .user import APPROVER_ROLES, User, UserRole  # noqa: F401
from .expense import (  # noqa: F401
    EDITABLE_STATUSES,
    TERMINAL_STATUSES,
    Expense,
    ExpenseCategory,
    ExpenseStatus,
)
from .approval import ApprovalStatus, ApprovalStep, ApprovalWorkflow  # noqa: F401
from .notification import Notification, NotificationType  # noqa: F401
from .activity import ActivityAction, ActivityLog  # noqa: F401

__all__ = [
    "db",
    "Company",
    "User",
    "UserRole",
    "APPROVER_ROLES",
    "Expense",
    "ExpenseCategory",
    "ExpenseStatus",
    "EDITABLE_STATUSES",
    "TERMINAL_STATUSES",
    "ApprovalStatus",
    "ApprovalStep",
    "ApprovalWorkflow",
    "Notification",
    "NotificationType",
    "ActivityAction",
    "ActivityLog",
]
