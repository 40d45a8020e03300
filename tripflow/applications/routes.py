"""Application and approval workflow routes."""
from __future__ import annotations

from typing import Any

from flask import request
from flask_login import login_required

from tripflow.services import applications, approval_workflow
from tripflow.utils.helpers import current_principal, request_payload, result_response

from . import applications_bp


@applications_bp.route("", methods=["GET"])
@login_required
def list_applications() -> Any:
    """List the applications visible to the current user, newest first."""
    result = applications.list_applications(current_principal(), status=request.args.get("status"))
    return result_response(result, key="applications")


@applications_bp.route("", methods=["POST"])
@login_required
def create_application() -> Any:
    result = applications.create_application(current_principal(), request_payload())
    return result_response(result, key="application", status=201)


@applications_bp.route("/<int:application_id>", methods=["GET"])
@login_required
def get_application(application_id: int) -> Any:
    return result_response(applications.get_application(current_principal(), application_id), key="application")


@applications_bp.route("/<int:application_id>", methods=["PATCH"])
@login_required
def edit_application(application_id: int) -> Any:
    result = applications.edit_application(current_principal(), application_id, request_payload())
    return result_response(result, key="application")


@applications_bp.route("/<int:application_id>", methods=["DELETE"])
@login_required
def delete_application(application_id: int) -> Any:
    return result_response(applications.delete_application(current_principal(), application_id))


@applications_bp.route("/<int:application_id>/<action>", methods=["POST"])
@login_required
def transition(application_id: int, action: str) -> Any:
    """Apply a workflow action (submit, approve, reject, hold, resubmit, complete)."""
    comment = request_payload().get("comment")
    result = approval_workflow.transition(current_principal(), application_id, action, comment)
    return result_response(result, key="application")


@applications_bp.route("/<int:application_id>/remind", methods=["POST"])
@login_required
def remind(application_id: int) -> Any:
    result = approval_workflow.remind_approver(
        current_principal(), application_id, request_payload().get("message")
    )
    return result_response(result, key="notification", status=201)


@applications_bp.route("/<int:application_id>/history", methods=["GET"])
@login_required
def history(application_id: int) -> Any:
    return result_response(approval_workflow.history(current_principal(), application_id), key="history")
