"""User-related models."""
from __future__ import annotations

import enum

from flask import current_app
from flask_login import UserMixin
from werkzeug.security import check_password_hash, generate_password_hash

from tripflow import db
from tripflow.utils.dates import isoformat, utcnow


class UserRole(enum.Enum):
    """Roles in ascending order of authority."""

    GENERAL_USER = "general_user"
    APPROVER = "approver"
    DEPARTMENT_ADMIN = "department_admin"
    ADMIN = "admin"


class User(UserMixin, db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    first_name = db.Column(db.String(100), nullable=False)
    last_name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    role = db.Column(db.Enum(UserRole, name="user_role"), nullable=False, default=UserRole.GENERAL_USER)
    company_id = db.Column(db.Integer, db.ForeignKey("companies.id"), nullable=False, index=True)
    department_id = db.Column(
        db.Integer,
        db.ForeignKey("departments.id", use_alter=True, name="fk_users_department_id"),
        nullable=True,
        index=True,
    )
    position = db.Column(db.String(120), nullable=True)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    company = db.relationship("Company", back_populates="users", lazy="joined")
    department = db.relationship("Department", foreign_keys=[department_id], lazy="joined")

    def set_password(self, password: str) -> None:
        method = current_app.config.get("PASSWORD_HASH_METHOD", "scrypt")
        self.password_hash = generate_password_hash(password, method=method)

    def check_password(self, password: str) -> bool:
        return check_password_hash(self.password_hash, password)

    def get_id(self) -> str:
        return str(self.id)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "full_name": self.full_name,
            "email": self.email,
            "role": self.role.value,
            "company_id": self.company_id,
            "department_id": self.department_id,
            "position": self.position,
            "is_active": self.is_active,
            "created_at": isoformat(self.created_at),
        }

    def __repr__(self) -> str:
        return f"<User {self.email}>"
