"""Notification log and settings routes."""
from __future__ import annotations

from typing import Any

from flask import request
from flask_login import login_required

from tripflow.services import notifications, settings
from tripflow.utils.helpers import current_principal, json_response, request_payload, result_response

from . import notifications_bp


@notifications_bp.route("", methods=["GET"])
@login_required
def list_notifications() -> Any:
    """Newest notifications of the current user with the unread count."""
    limit = request.args.get("limit", type=int)
    return result_response(notifications.list_notifications(current_principal(), limit=limit))


@notifications_bp.route("/<int:notification_id>/read", methods=["POST"])
@login_required
def mark_read(notification_id: int) -> Any:
    return result_response(notifications.mark_read(current_principal(), notification_id), key="notification")


@notifications_bp.route("/read-all", methods=["POST"])
@login_required
def mark_all_read() -> Any:
    result = notifications.mark_all_read(current_principal())
    if not result.ok:
        return result_response(result)
    return json_response({"updated": result.data})


@notifications_bp.route("/settings", methods=["GET"])
@login_required
def get_settings() -> Any:
    return result_response(settings.get_notification_settings(current_principal()), key="settings")


@notifications_bp.route("/settings", methods=["PUT"])
@login_required
def update_settings() -> Any:
    result = settings.update_notification_settings(current_principal(), request_payload())
    return result_response(result, key="settings")
