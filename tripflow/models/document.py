"""Report document model."""
from __future__ import annotations

import enum

from tripflow import db
from tripflow.utils.dates import isoformat, utcnow


class DocumentType(enum.Enum):
    BUSINESS_REPORT = "business_report"
    EXPENSE_REPORT = "expense_report"
    ALLOWANCE_DETAIL = "allowance_detail"
    TRAVEL_DETAIL = "travel_detail"
    GPS_LOG = "gps_log"
    MONTHLY_REPORT = "monthly_report"
    ANNUAL_REPORT = "annual_report"


class DocumentStatus(enum.Enum):
    DRAFT = "draft"
    SUBMITTED = "submitted"
    APPROVED = "approved"
    REJECTED = "rejected"


class Document(db.Model):
    __tablename__ = "documents"

    id = db.Column(db.Integer, primary_key=True)
    application_id = db.Column(db.Integer, db.ForeignKey("applications.id"), nullable=True, index=True)
    type = db.Column(db.Enum(DocumentType, name="document_type"), nullable=False)
    title = db.Column(db.String(255), nullable=False)
    created_by_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    status = db.Column(
        db.Enum(DocumentStatus, name="document_status"),
        nullable=False,
        default=DocumentStatus.DRAFT,
    )
    content = db.Column(db.JSON, nullable=True)
    attachment_urls = db.Column(db.JSON, nullable=False, default=list)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    application = db.relationship("Application", lazy="joined")
    created_by = db.relationship("User", lazy="joined")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "application_id": self.application_id,
            "application_title": self.application.title if self.application else None,
            "type": self.type.value,
            "title": self.title,
            "created_by_id": self.created_by_id,
            "status": self.status.value,
            "content": self.content,
            "attachment_urls": list(self.attachment_urls or []),
            "created_at": isoformat(self.created_at),
            "updated_at": isoformat(self.updated_at),
        }

    def __repr__(self) -> str:
        return f"<Document id={self.id} status={self.status.value if self.status else None}>"
