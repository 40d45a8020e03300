"""Application data models exposed for easy imports."""
from tripflow import db  # noqa: F401
from .company import Company, PlanTier  # noqa: F401
from .user import User, UserRole  # noqa: F401
from .department import (
    Department,
    DepartmentMembership,
    Invitation,
    InvitationStatus,
)  # noqa: F401
from .application import (
    Application,
    ApplicationPriority,
    ApplicationStatus,
    ApplicationType,
    ApprovalAction,
    ApprovalLog,
)  # noqa: F401
from .document import Document, DocumentStatus, DocumentType  # noqa: F401
from .notification import (
    Notification,
    NotificationCategory,
    NotificationChannel,
    NotificationSettings,
)  # noqa: F401
from .allowance import AllowanceSettings  # noqa: F401

__all__ = [
    "db",
    "Company",
    "PlanTier",
    "User",
    "UserRole",
    "Department",
    "DepartmentMembership",
    "Invitation",
    "InvitationStatus",
    "Application",
    "ApplicationPriority",
    "ApplicationStatus",
    "ApplicationType",
    "ApprovalAction",
    "ApprovalLog",
    "Document",
    "DocumentStatus",
    "DocumentType",
    "Notification",
    "NotificationCategory",
    "NotificationChannel",
    "NotificationSettings",
    "AllowanceSettings",
]
