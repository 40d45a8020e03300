"""Application (trip/expense request) and approval log models."""
from __future__ import annotations

import enum

from tripflow import db
from tripflow.utils.dates import isoformat, utcnow


class ApplicationType(enum.Enum):
    BUSINESS_TRIP_REQUEST = "business_trip_request"
    EXPENSE_REQUEST = "expense_request"
    BUSINESS_REPORT = "business_report"
    EXPENSE_REPORT = "expense_report"


class ApplicationStatus(enum.Enum):
    DRAFT = "draft"
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    ON_HOLD = "on_hold"
    COMPLETED = "completed"


class ApplicationPriority(enum.Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class ApprovalAction(enum.Enum):
    SUBMITTED = "submitted"
    APPROVED = "approved"
    REJECTED = "rejected"
    ON_HOLD = "on_hold"
    RESUBMITTED = "resubmitted"
    COMPLETED = "completed"


class Application(db.Model):
    __tablename__ = "applications"

    id = db.Column(db.Integer, primary_key=True)
    applicant_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    department_id = db.Column(db.Integer, db.ForeignKey("departments.id"), nullable=False, index=True)
    title = db.Column(db.String(255), nullable=False)
    type = db.Column(db.Enum(ApplicationType, name="application_type"), nullable=False)
    status = db.Column(
        db.Enum(ApplicationStatus, name="application_status"),
        nullable=False,
        default=ApplicationStatus.DRAFT,
        index=True,
    )
    total_amount = db.Column(db.Numeric(12, 2), nullable=True)
    current_approver_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True, index=True)
    submitted_at = db.Column(db.DateTime, nullable=True)
    approved_at = db.Column(db.DateTime, nullable=True)
    completed_at = db.Column(db.DateTime, nullable=True)
    rejection_reason = db.Column(db.Text, nullable=True)
    priority = db.Column(
        db.Enum(ApplicationPriority, name="application_priority"),
        nullable=False,
        default=ApplicationPriority.MEDIUM,
    )
    details = db.Column("metadata", db.JSON, nullable=True)
    version = db.Column(db.Integer, nullable=False, default=1)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False, index=True)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    applicant = db.relationship("User", foreign_keys=[applicant_id], lazy="joined")
    current_approver = db.relationship("User", foreign_keys=[current_approver_id], lazy="joined")
    department = db.relationship("Department", lazy="joined")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "applicant_id": self.applicant_id,
            "applicant_name": self.applicant.full_name if self.applicant else None,
            "department_id": self.department_id,
            "title": self.title,
            "type": self.type.value,
            "status": self.status.value,
            "total_amount": float(self.total_amount) if self.total_amount is not None else None,
            "current_approver_id": self.current_approver_id,
            "submitted_at": isoformat(self.submitted_at),
            "approved_at": isoformat(self.approved_at),
            "completed_at": isoformat(self.completed_at),
            "rejection_reason": self.rejection_reason,
            "priority": self.priority.value,
            "metadata": self.details,
            "version": self.version,
            "created_at": isoformat(self.created_at),
            "updated_at": isoformat(self.updated_at),
        }

    def __repr__(self) -> str:
        return f"<Application id={self.id} status={self.status.value if self.status else None}>"


class ApprovalLog(db.Model):
    """One row per status transition. Rows are never updated or deleted."""

    __tablename__ = "approval_logs"

    id = db.Column(db.Integer, primary_key=True)
    application_id = db.Column(db.Integer, db.ForeignKey("applications.id"), nullable=False, index=True)
    actor_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    action = db.Column(db.Enum(ApprovalAction, name="approval_action"), nullable=False)
    comment = db.Column(db.Text, nullable=True)
    previous_status = db.Column(db.Enum(ApplicationStatus, name="application_status"), nullable=False)
    new_status = db.Column(db.Enum(ApplicationStatus, name="application_status"), nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    actor = db.relationship("User", lazy="joined")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "application_id": self.application_id,
            "actor_id": self.actor_id,
            "action": self.action.value,
            "comment": self.comment,
            "previous_status": self.previous_status.value,
            "new_status": self.new_status.value,
            "created_at": isoformat(self.created_at),
        }

    def __repr__(self) -> str:
        return f"<ApprovalLog application_id={self.application_id} action={self.action.value}>"
