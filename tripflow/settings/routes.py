"""Allowance settings routes."""
from __future__ import annotations

from typing import Any

from flask_login import login_required

from tripflow.services import settings
from tripflow.utils.helpers import current_principal, request_payload, result_response

from . import settings_bp


@settings_bp.route("/allowances", methods=["GET"])
@login_required
def get_allowances() -> Any:
    """Saved allowance rates, or zeroed defaults for a user who never saved any."""
    return result_response(settings.get_allowance_settings(current_principal()), key="allowances")


@settings_bp.route("/allowances", methods=["PUT"])
@login_required
def update_allowances() -> Any:
    result = settings.update_allowance_settings(current_principal(), request_payload())
    return result_response(result, key="allowances")
