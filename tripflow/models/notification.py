"""Notification log and per-user notification settings."""
from __future__ import annotations

import enum

from tripflow import db
from tripflow.utils.dates import isoformat, utcnow


class NotificationChannel(enum.Enum):
    EMAIL = "email"
    PUSH = "push"


class NotificationCategory(enum.Enum):
    APPROVAL = "approval"
    REMINDER = "reminder"
    SYSTEM = "system"
    UPDATE = "update"


class Notification(db.Model):
    __tablename__ = "notifications"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    channel = db.Column(db.Enum(NotificationChannel, name="notification_channel"), nullable=False)
    title = db.Column(db.String(255), nullable=False)
    message = db.Column(db.Text, nullable=False)
    timestamp = db.Column(db.DateTime, default=utcnow, nullable=False, index=True)
    read = db.Column(db.Boolean, default=False, nullable=False)
    category = db.Column(db.Enum(NotificationCategory, name="notification_category"), nullable=False)
    related_application_id = db.Column(db.Integer, db.ForeignKey("applications.id"), nullable=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "type": self.channel.value,
            "title": self.title,
            "message": self.message,
            "timestamp": isoformat(self.timestamp),
            "read": self.read,
            "category": self.category.value,
            "related_application_id": self.related_application_id,
        }

    def __repr__(self) -> str:
        return f"<Notification user_id={self.user_id} category={self.category.value}>"


class NotificationSettings(db.Model):
    __tablename__ = "notification_settings"

    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), primary_key=True)
    email_notifications = db.Column(db.Boolean, nullable=False, default=True)
    push_notifications = db.Column(db.Boolean, nullable=False, default=True)
    reminder_time = db.Column(db.String(5), nullable=False, default="09:00")
    approval_only = db.Column(db.Boolean, nullable=False, default=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    def to_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "email_notifications": self.email_notifications,
            "push_notifications": self.push_notifications,
            "reminder_time": self.reminder_time,
            "approval_only": self.approval_only,
        }
