"""Department, membership and invitation models."""
from __future__ import annotations

import enum
import secrets

from tripflow import db
from tripflow.models.user import UserRole
from tripflow.utils.dates import isoformat, utcnow


class Department(db.Model):
    __tablename__ = "departments"

    id = db.Column(db.Integer, primary_key=True)
    company_id = db.Column(db.Integer, db.ForeignKey("companies.id"), nullable=False, index=True)
    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    manager_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    max_members = db.Column(db.Integer, nullable=False, default=100)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_by_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    deactivated_at = db.Column(db.DateTime, nullable=True)

    company = db.relationship("Company", back_populates="departments", lazy="joined")
    manager = db.relationship("User", foreign_keys=[manager_id], lazy="joined")
    memberships = db.relationship("DepartmentMembership", back_populates="department", lazy="selectin")

    @property
    def member_count(self) -> int:
        return sum(1 for membership in self.memberships if membership.is_active)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "company_id": self.company_id,
            "name": self.name,
            "description": self.description,
            "manager_id": self.manager_id,
            "max_members": self.max_members,
            "member_count": self.member_count,
            "is_active": self.is_active,
            "created_by_id": self.created_by_id,
            "created_at": isoformat(self.created_at),
            "deactivated_at": isoformat(self.deactivated_at),
        }

    def __repr__(self) -> str:
        return f"<Department {self.name}>"


class DepartmentMembership(db.Model):
    __tablename__ = "department_memberships"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    department_id = db.Column(db.Integer, db.ForeignKey("departments.id"), nullable=False, index=True)
    joined_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    left_at = db.Column(db.DateTime, nullable=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    user = db.relationship("User", lazy="joined")
    department = db.relationship("Department", back_populates="memberships", lazy="joined")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "department_id": self.department_id,
            "joined_at": isoformat(self.joined_at),
            "left_at": isoformat(self.left_at),
            "is_active": self.is_active,
        }

    def __repr__(self) -> str:
        return f"<DepartmentMembership user_id={self.user_id} department_id={self.department_id}>"


class InvitationStatus(enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"
    EXPIRED = "expired"
    CANCELLED = "cancelled"


class Invitation(db.Model):
    __tablename__ = "invitations"

    id = db.Column(db.Integer, primary_key=True)
    company_id = db.Column(db.Integer, db.ForeignKey("companies.id"), nullable=False, index=True)
    department_id = db.Column(db.Integer, db.ForeignKey("departments.id"), nullable=True)
    email = db.Column(db.String(255), nullable=False, index=True)
    full_name = db.Column(db.String(255), nullable=True)
    position = db.Column(db.String(120), nullable=True)
    role = db.Column(db.Enum(UserRole, name="user_role"), nullable=False, default=UserRole.GENERAL_USER)
    invited_by_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    token = db.Column(db.String(64), unique=True, nullable=False, default=lambda: secrets.token_urlsafe(32))
    status = db.Column(
        db.Enum(InvitationStatus, name="invitation_status"),
        nullable=False,
        default=InvitationStatus.PENDING,
    )
    expires_at = db.Column(db.DateTime, nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    accepted_at = db.Column(db.DateTime, nullable=True)
    declined_at = db.Column(db.DateTime, nullable=True)
    cancelled_at = db.Column(db.DateTime, nullable=True)

    department = db.relationship("Department", lazy="joined")
    invited_by = db.relationship("User", lazy="joined")

    def is_expired(self) -> bool:
        return utcnow() > self.expires_at

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "company_id": self.company_id,
            "department_id": self.department_id,
            "email": self.email,
            "full_name": self.full_name,
            "position": self.position,
            "role": self.role.value,
            "invited_by_id": self.invited_by_id,
            "status": self.status.value,
            "expires_at": isoformat(self.expires_at),
            "created_at": isoformat(self.created_at),
            "accepted_at": isoformat(self.accepted_at),
            "declined_at": isoformat(self.declined_at),
            "cancelled_at": isoformat(self.cancelled_at),
        }

    def __repr__(self) -> str:
        return f"<Invitation {self.email} status={self.status.value}>"
