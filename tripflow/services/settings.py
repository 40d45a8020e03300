"""Per-user notification and allowance settings (one row each per user, upserted)."""
from __future__ import annotations

import logging
import re
from decimal import Decimal, InvalidOperation
from typing import Any, Dict

from tripflow import db
from tripflow.errors import ValidationError
from tripflow.models import AllowanceSettings, NotificationSettings
from tripflow.models.allowance import AMOUNT_FIELDS, DISABLED_FIELDS
from tripflow.services.authorization import Principal
from tripflow.services.results import service_call
from tripflow.services.store import commit, translate_store_errors

logger = logging.getLogger(__name__)

BOOLEAN_FIELDS = {"email_notifications", "push_notifications", "approval_only"}
REMINDER_TIME = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def default_settings(user_id: int) -> NotificationSettings:
    return NotificationSettings(
        user_id=user_id,
        email_notifications=True,
        push_notifications=True,
        reminder_time="09:00",
        approval_only=False,
    )


@translate_store_errors
def settings_for(user_id: int) -> NotificationSettings:
    """Stored settings, or unsaved defaults when the user never saved any."""
    return db.session.get(NotificationSettings, user_id) or default_settings(user_id)


@translate_store_errors
def upsert_settings(user_id: int, values: Dict[str, Any]) -> NotificationSettings:
    settings = db.session.get(NotificationSettings, user_id)
    if settings is None:
        settings = default_settings(user_id)
        db.session.add(settings)
    for key, value in values.items():
        setattr(settings, key, value)
    db.session.flush()
    return settings


@service_call
def get_notification_settings(principal: Principal) -> NotificationSettings:
    return settings_for(principal.user_id)


@service_call
def update_notification_settings(principal: Principal, patch: Dict[str, Any]) -> NotificationSettings:
    unknown = set(patch) - BOOLEAN_FIELDS - {"reminder_time"}
    if unknown:
        raise ValidationError(f"Unknown settings: {', '.join(sorted(unknown))}")

    values: Dict[str, Any] = {}
    for key in BOOLEAN_FIELDS & set(patch):
        if not isinstance(patch[key], bool):
            raise ValidationError(f"{key} must be true or false.")
        values[key] = patch[key]
    if "reminder_time" in patch:
        if not isinstance(patch["reminder_time"], str) or not REMINDER_TIME.match(patch["reminder_time"]):
            raise ValidationError("reminder_time must use the HH:MM format.")
        values["reminder_time"] = patch["reminder_time"]

    settings = upsert_settings(principal.user_id, values)
    commit()
    logger.info("Notification settings saved for user %s", principal.user_id)
    return settings


# Allowances -----------------------------------------------------------------


def default_allowances(user_id: int) -> AllowanceSettings:
    values: Dict[str, Any] = {field: Decimal("0") for field in AMOUNT_FIELDS}
    values.update({field: False for field in DISABLED_FIELDS})
    return AllowanceSettings(user_id=user_id, **values)


def _parse_allowance(value: Any, field: str) -> Decimal:
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be a number.")
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, TypeError):
        raise ValidationError(f"{field} must be a number.") from None
    if not amount.is_finite():
        raise ValidationError(f"{field} must be a number.")
    if amount < 0:
        raise ValidationError(f"{field} cannot be negative.")
    return amount.quantize(Decimal("0.01"))


@translate_store_errors
def allowances_for(user_id: int) -> AllowanceSettings:
    return db.session.get(AllowanceSettings, user_id) or default_allowances(user_id)


@translate_store_errors
def upsert_allowances(user_id: int, values: Dict[str, Any]) -> AllowanceSettings:
    allowances = db.session.get(AllowanceSettings, user_id)
    if allowances is None:
        allowances = default_allowances(user_id)
        db.session.add(allowances)
    for key, value in values.items():
        setattr(allowances, key, value)
    db.session.flush()
    return allowances


@service_call
def get_allowance_settings(principal: Principal) -> AllowanceSettings:
    return allowances_for(principal.user_id)


@service_call
def update_allowance_settings(principal: Principal, patch: Dict[str, Any]) -> AllowanceSettings:
    unknown = set(patch) - set(AMOUNT_FIELDS) - set(DISABLED_FIELDS)
    if unknown:
        raise ValidationError(f"Unknown settings: {', '.join(sorted(unknown))}")

    values: Dict[str, Any] = {}
    for key in set(AMOUNT_FIELDS) & set(patch):
        values[key] = _parse_allowance(patch[key], key)
    for key in set(DISABLED_FIELDS) & set(patch):
        if not isinstance(patch[key], bool):
            raise ValidationError(f"{key} must be true or false.")
        values[key] = patch[key]

    allowances = upsert_allowances(principal.user_id, values)
    commit()
    logger.info("Allowance settings saved for user %s", principal.user_id)
    return allowances
