"""Department, invitation and membership administration routes."""
from __future__ import annotations

from typing import Any, Dict

from flask import request
from flask_login import current_user, login_required, login_user

from tripflow.auth.forms import RegisterForm
from tripflow.models import PlanTier, UserRole
from tripflow.services import departments
from tripflow.utils.helpers import (
    current_principal,
    form_error_response,
    plan_required,
    request_payload,
    result_response,
    role_required,
)

from . import admin_bp, invitations_bp
from .forms import DepartmentForm, InvitationForm, MembershipForm


def _form_values(form) -> Dict[str, Any]:
    """Submitted field values, leaving out blanks and the CSRF token."""
    return {
        name: value
        for name, value in form.data.items()
        if name != "csrf_token" and value not in (None, "")
    }


# Departments ----------------------------------------------------------------


@admin_bp.route("/departments", methods=["GET"])
@login_required
@plan_required(PlanTier.ENTERPRISE)
@role_required(UserRole.ADMIN)
def list_departments() -> Any:
    return result_response(departments.list_departments(current_principal()), key="departments")


@admin_bp.route("/departments", methods=["POST"])
@login_required
@plan_required(PlanTier.ENTERPRISE)
@role_required(UserRole.ADMIN)
def create_department() -> Any:
    form = DepartmentForm()
    if not form.validate_on_submit():
        return form_error_response(form)
    result = departments.create_department(current_principal(), _form_values(form))
    return result_response(result, key="department", status=201)


@admin_bp.route("/departments/<int:department_id>", methods=["PATCH"])
@login_required
@plan_required(PlanTier.ENTERPRISE)
@role_required(UserRole.ADMIN)
def update_department(department_id: int) -> Any:
    result = departments.update_department(current_principal(), department_id, request_payload())
    return result_response(result, key="department")


@admin_bp.route("/departments/<int:department_id>", methods=["DELETE"])
@login_required
@plan_required(PlanTier.ENTERPRISE)
@role_required(UserRole.ADMIN)
def delete_department(department_id: int) -> Any:
    return result_response(departments.delete_department(current_principal(), department_id))


# Invitations ----------------------------------------------------------------


@admin_bp.route("/invitations", methods=["GET"])
@login_required
@plan_required(PlanTier.ENTERPRISE)
@role_required(UserRole.ADMIN)
def list_invitations() -> Any:
    return result_response(departments.list_invitations(current_principal()), key="invitations")


@admin_bp.route("/invitations", methods=["POST"])
@login_required
@plan_required(PlanTier.ENTERPRISE)
@role_required(UserRole.ADMIN)
def invite_user() -> Any:
    form = InvitationForm()
    if not form.validate_on_submit():
        return form_error_response(form)
    result = departments.invite_user(current_principal(), _form_values(form))
    return result_response(result, key="invitation", status=201)


@admin_bp.route("/invitations/<int:invitation_id>", methods=["DELETE"])
@login_required
@plan_required(PlanTier.ENTERPRISE)
@role_required(UserRole.ADMIN)
def cancel_invitation(invitation_id: int) -> Any:
    return result_response(departments.cancel_invitation(current_principal(), invitation_id), key="invitation")


@invitations_bp.route("/<token>/accept", methods=["POST"])
def accept_invitation(token: str) -> Any:
    """Accept as the logged-in user, or register a new account from the invitation."""
    if current_user.is_authenticated:
        return result_response(departments.accept_invitation(current_principal(), token), key="invitation")

    form = RegisterForm()
    if not form.validate_on_submit():
        return form_error_response(form)
    result = departments.register_from_invitation(token, _form_values(form))
    if result.ok:
        login_user(result.data)
    return result_response(result, key="user", status=201)


@invitations_bp.route("/<token>/decline", methods=["POST"])
def decline_invitation(token: str) -> Any:
    return result_response(departments.decline_invitation(token), key="invitation")


# Memberships ----------------------------------------------------------------


@admin_bp.route("/memberships", methods=["GET"])
@login_required
@plan_required(PlanTier.ENTERPRISE)
@role_required(UserRole.ADMIN)
def list_memberships() -> Any:
    department_id = request.args.get("department_id", type=int)
    return result_response(departments.list_memberships(current_principal(), department_id), key="memberships")


@admin_bp.route("/memberships", methods=["POST"])
@login_required
@plan_required(PlanTier.ENTERPRISE)
@role_required(UserRole.ADMIN)
def add_member() -> Any:
    form = MembershipForm()
    if not form.validate_on_submit():
        return form_error_response(form)
    result = departments.add_member(current_principal(), form.user_id.data, form.department_id.data)
    return result_response(result, key="membership", status=201)


@admin_bp.route("/memberships/<int:membership_id>", methods=["DELETE"])
@login_required
@plan_required(PlanTier.ENTERPRISE)
@role_required(UserRole.ADMIN)
def remove_member(membership_id: int) -> Any:
    return result_response(departments.remove_member(current_principal(), membership_id), key="membership")
