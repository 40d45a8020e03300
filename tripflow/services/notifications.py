"""Notification log: append records, flip the read flag, list newest first.

Only records are persisted here; delivering them by email or push happens
outside this service.
"""
from __future__ import annotations

import logging
from typing import Optional

from flask import current_app

from tripflow import db
from tripflow.errors import NotFoundError
from tripflow.models import (
    Application,
    ApprovalAction,
    Notification,
    NotificationCategory,
    NotificationChannel,
)
from tripflow.services.authorization import Principal
from tripflow.services.results import service_call
from tripflow.services.settings import settings_for
from tripflow.services.store import commit, translate_store_errors

logger = logging.getLogger(__name__)

APPROVAL_MESSAGES = {
    ApprovalAction.APPROVED: (
        "Your application was approved",
        "Your application '{title}' was approved. Please review the details.",
    ),
    ApprovalAction.REJECTED: (
        "Your application was rejected",
        "Your application '{title}' was rejected. Reason: {reason}",
    ),
    ApprovalAction.ON_HOLD: (
        "Your application was put on hold",
        "Your application '{title}' was returned on hold. Comment: {reason}",
    ),
}


@translate_store_errors
def create_notification(
    user_id: int,
    category: NotificationCategory,
    title: str,
    message: str,
    related_application_id: Optional[int] = None,
) -> Optional[Notification]:
    """Append a notification for ``user_id``.

    The channel follows the recipient's settings. Returns ``None`` when the
    recipient only wants approval notifications and this is something else.
    Flushes but does not commit; the caller owns the transaction.
    """
    settings = settings_for(user_id)
    if settings.approval_only and category != NotificationCategory.APPROVAL:
        logger.debug("Skipping %s notification for user %s (approval only)", category.value, user_id)
        return None

    channel = NotificationChannel.EMAIL if settings.email_notifications else NotificationChannel.PUSH
    notification = Notification(
        user_id=user_id,
        channel=channel,
        title=title,
        message=message,
        category=category,
        related_application_id=related_application_id,
        read=False,
    )
    db.session.add(notification)
    db.session.flush()
    return notification


def create_approval_notification(application: Application, action: ApprovalAction) -> Optional[Notification]:
    title, template = APPROVAL_MESSAGES[action]
    message = template.format(title=application.title, reason=application.rejection_reason or "")
    return create_notification(
        application.applicant_id,
        NotificationCategory.APPROVAL,
        title,
        message,
        related_application_id=application.id,
    )


def create_reminder_notification(user_id: int, application_id: int, message: str) -> Optional[Notification]:
    return create_notification(
        user_id,
        NotificationCategory.REMINDER,
        "Approval reminder",
        message,
        related_application_id=application_id,
    )


def create_system_notification(user_id: int, title: str, message: str) -> Optional[Notification]:
    return create_notification(user_id, NotificationCategory.SYSTEM, title, message)


@service_call
def list_notifications(principal: Principal, limit: Optional[int] = None) -> dict:
    limit = limit or current_app.config.get("NOTIFICATION_PAGE_SIZE", 50)
    notifications = _fetch(principal.user_id, limit)
    return {
        "notifications": notifications,
        "unread_count": sum(1 for notification in notifications if not notification.read),
    }


@translate_store_errors
def _fetch(user_id: int, limit: int) -> list[Notification]:
    return (
        Notification.query.filter_by(user_id=user_id)
        .order_by(Notification.timestamp.desc(), Notification.id.desc())
        .limit(limit)
        .all()
    )


@translate_store_errors
def _flip_read(principal: Principal, notification_id: Optional[int] = None) -> int:
    query = Notification.query.filter(
        Notification.user_id == principal.user_id,
        Notification.read.is_(False),
    )
    if notification_id is not None:
        query = query.filter(Notification.id == notification_id)
    return query.update({Notification.read: True}, synchronize_session="fetch")


@service_call
def mark_read(principal: Principal, notification_id: int) -> Notification:
    notification = db.session.get(Notification, notification_id)
    if notification is None or notification.user_id != principal.user_id:
        raise NotFoundError("Notification not found.")
    _flip_read(principal, notification_id)
    commit()
    db.session.refresh(notification)
    return notification


@service_call
def mark_all_read(principal: Principal) -> int:
    """Mark every unread notification of ``principal`` read; returns how many changed."""
    updated = _flip_read(principal)
    commit()
    if updated:
        logger.info("Marked %s notifications read for user %s", updated, principal.user_id)
    return updated
