"""Tests for the notification log and per-user notification settings."""

from tripflow import db
from tripflow.errors import NotFoundError, ValidationError
from tripflow.models import (
    Notification,
    NotificationCategory,
    NotificationChannel,
    NotificationSettings,
)
from tripflow.services import notifications, settings
from tripflow.services.authorization import Principal


def _notify(user, category=NotificationCategory.SYSTEM, title="Hello"):
    notification = notifications.create_notification(user.id, category, title, "Message body")
    db.session.commit()
    return notification


def test_list_is_newest_first_with_unread_count(world):
    first = _notify(world.applicant, title="first")
    second = _notify(world.applicant, title="second")
    _notify(world.outsider)

    result = notifications.list_notifications(Principal.from_user(world.applicant))

    assert [n.id for n in result.data["notifications"]] == [second.id, first.id]
    assert result.data["unread_count"] == 2


def test_list_respects_limit(world):
    for index in range(3):
        _notify(world.applicant, title=str(index))
    result = notifications.list_notifications(Principal.from_user(world.applicant), limit=2)
    assert len(result.data["notifications"]) == 2


def test_mark_read_only_for_owner(world):
    notification = _notify(world.applicant)

    stranger = notifications.mark_read(Principal.from_user(world.outsider), notification.id)
    assert isinstance(stranger.error, NotFoundError)

    owner = notifications.mark_read(Principal.from_user(world.applicant), notification.id)
    assert owner.ok
    assert owner.data.read is True


def test_mark_all_read_is_idempotent(world):
    _notify(world.applicant)
    _notify(world.applicant)
    other = _notify(world.outsider)
    principal = Principal.from_user(world.applicant)

    assert notifications.mark_all_read(principal).data == 2
    assert notifications.mark_all_read(principal).data == 0
    assert notifications.list_notifications(principal).data["unread_count"] == 0
    db.session.expire_all()
    assert db.session.get(Notification, other.id).read is False


def test_channel_follows_email_setting(world):
    assert _notify(world.applicant).channel == NotificationChannel.EMAIL

    settings.update_notification_settings(Principal.from_user(world.applicant), {"email_notifications": False})
    assert _notify(world.applicant).channel == NotificationChannel.PUSH


def test_approval_only_skips_other_categories(world):
    settings.update_notification_settings(Principal.from_user(world.applicant), {"approval_only": True})

    assert _notify(world.applicant, NotificationCategory.REMINDER) is None
    assert _notify(world.applicant, NotificationCategory.APPROVAL) is not None
    assert Notification.query.filter_by(user_id=world.applicant.id).count() == 1


def test_settings_default_until_saved(world):
    result = settings.get_notification_settings(Principal.from_user(world.applicant))

    assert result.ok
    assert result.data.reminder_time == "09:00"
    assert result.data.email_notifications is True
    assert NotificationSettings.query.count() == 0


def test_settings_upsert_keeps_one_row(world):
    principal = Principal.from_user(world.applicant)

    settings.update_notification_settings(principal, {"reminder_time": "08:30"})
    updated = settings.update_notification_settings(principal, {"push_notifications": False})

    assert updated.ok
    assert updated.data.reminder_time == "08:30"
    assert updated.data.push_notifications is False
    assert NotificationSettings.query.count() == 1


def test_settings_validation(world):
    principal = Principal.from_user(world.applicant)
    for patch in ({"reminder_time": "25:00"}, {"approval_only": "yes"}, {"theme": "dark"}):
        result = settings.update_notification_settings(principal, patch)
        assert isinstance(result.error, ValidationError), patch
    assert NotificationSettings.query.count() == 0


def test_system_notification_helper(world):
    notification = notifications.create_system_notification(world.applicant.id, "Maintenance", "Back at 6am")
    db.session.commit()

    assert notification.category == NotificationCategory.SYSTEM
    assert notification.related_application_id is None
