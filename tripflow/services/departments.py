"""Department, invitation and membership administration.

Every admin operation requires the Enterprise plan and the admin role and is
scoped to the admin's company. Removal is always a soft delete: departments
and memberships are deactivated, invitations are cancelled.
"""
from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any, Dict, Optional

from flask import current_app
from sqlalchemy import func

from tripflow import db
from tripflow.errors import AuthorizationError, NotFoundError, ValidationError
from tripflow.models import (
    Department,
    DepartmentMembership,
    Invitation,
    InvitationStatus,
    User,
    UserRole,
)
from tripflow.services import notifications
from tripflow.services.authorization import Principal, parse_role, require_department_management
from tripflow.services.email_service import send_invitation_email
from tripflow.services.results import service_call
from tripflow.services.store import commit, parse_id, require_text, translate_store_errors
from tripflow.utils.dates import utcnow

logger = logging.getLogger(__name__)

DEFAULT_MAX_MEMBERS = 100


def _parse_max_members(value: Any) -> int:
    try:
        max_members = int(value)
    except (TypeError, ValueError):
        raise ValidationError("max_members must be a whole number.") from None
    if max_members < 1:
        raise ValidationError("max_members must be at least 1.")
    return max_members


@translate_store_errors
def _department(principal: Principal, department_id: Any) -> Department:
    department = db.session.get(Department, parse_id(department_id, "department_id"))
    if department is None or department.company_id != principal.company_id or not department.is_active:
        raise NotFoundError("Department not found.")
    return department


@translate_store_errors
def _company_user(principal: Principal, user_id: Any) -> User:
    user = db.session.get(User, parse_id(user_id, "user_id"))
    if user is None or user.company_id != principal.company_id:
        raise NotFoundError("User not found.")
    return user


def _check_name_free(principal: Principal, name: str, exclude_id: Optional[int] = None) -> None:
    query = Department.query.filter(
        Department.company_id == principal.company_id,
        Department.is_active.is_(True),
        func.lower(Department.name) == name.lower(),
    )
    if exclude_id is not None:
        query = query.filter(Department.id != exclude_id)
    if query.first():
        raise ValidationError(f"A department named '{name}' already exists.")


# Departments ----------------------------------------------------------------


@service_call
def list_departments(principal: Principal) -> list[Department]:
    require_department_management(principal)
    return (
        Department.query.filter_by(company_id=principal.company_id, is_active=True)
        .order_by(Department.created_at.desc(), Department.id.desc())
        .all()
    )


@service_call
def create_department(principal: Principal, data: Dict[str, Any]) -> Department:
    require_department_management(principal)
    name = require_text(data.get("name"), "Department name")
    _check_name_free(principal, name)
    manager_id = data.get("manager_id")
    if manager_id is not None:
        manager_id = _company_user(principal, manager_id).id

    department = Department(
        company_id=principal.company_id,
        name=name,
        description=data.get("description"),
        manager_id=manager_id,
        max_members=_parse_max_members(data.get("max_members") or DEFAULT_MAX_MEMBERS),
        created_by_id=principal.user_id,
    )
    db.session.add(department)
    commit()
    logger.info("Department %s created by user %s", department.id, principal.user_id)
    return department


@service_call
def update_department(principal: Principal, department_id: int, patch: Dict[str, Any]) -> Department:
    require_department_management(principal)
    department = _department(principal, department_id)

    unknown = set(patch) - {"name", "description", "manager_id", "max_members"}
    if unknown:
        raise ValidationError(f"Fields cannot be edited: {', '.join(sorted(unknown))}")
    if "name" in patch:
        name = require_text(patch["name"], "Department name")
        _check_name_free(principal, name, exclude_id=department.id)
        department.name = name
    if "description" in patch:
        department.description = patch["description"]
    if "manager_id" in patch:
        department.manager_id = (
            _company_user(principal, patch["manager_id"]).id if patch["manager_id"] is not None else None
        )
    if "max_members" in patch:
        max_members = _parse_max_members(patch["max_members"])
        if max_members < department.member_count:
            raise ValidationError("max_members cannot be lower than the current member count.")
        department.max_members = max_members
    commit()
    logger.info("Department %s updated by user %s", department.id, principal.user_id)
    return department


@service_call
def delete_department(principal: Principal, department_id: int) -> None:
    require_department_management(principal)
    department = _department(principal, department_id)
    now = utcnow()
    department.is_active = False
    department.deactivated_at = now
    for membership in department.memberships:
        if membership.is_active:
            membership.is_active = False
            membership.left_at = now
            if membership.user.department_id == department.id:
                membership.user.department_id = None
    commit()
    logger.info("Department %s deactivated by user %s", department.id, principal.user_id)


# Invitations ----------------------------------------------------------------


def _expire_if_stale(invitation: Invitation) -> None:
    if invitation.status == InvitationStatus.PENDING and invitation.is_expired():
        invitation.status = InvitationStatus.EXPIRED


@service_call
def list_invitations(principal: Principal) -> list[Invitation]:
    require_department_management(principal)
    invitations = (
        Invitation.query.filter_by(company_id=principal.company_id)
        .order_by(Invitation.created_at.desc(), Invitation.id.desc())
        .all()
    )
    for invitation in invitations:
        _expire_if_stale(invitation)
    commit()
    return invitations


@service_call
def invite_user(principal: Principal, data: Dict[str, Any]) -> Invitation:
    require_department_management(principal)
    email = require_text(data.get("email"), "Email").lower()
    role = parse_role(data.get("role") or UserRole.GENERAL_USER)
    department_id = data.get("department_id")
    if department_id is not None:
        department_id = _department(principal, department_id).id

    if User.query.filter(func.lower(User.email) == email, User.company_id == principal.company_id).first():
        raise ValidationError("This user is already a member of your company.")
    if Invitation.query.filter_by(
        company_id=principal.company_id, email=email, status=InvitationStatus.PENDING
    ).filter(Invitation.expires_at > utcnow()).first():
        raise ValidationError("A pending invitation already exists for this email.")

    invitation = Invitation(
        company_id=principal.company_id,
        department_id=department_id,
        email=email,
        full_name=data.get("full_name"),
        position=data.get("position"),
        role=role,
        invited_by_id=principal.user_id,
        expires_at=utcnow() + timedelta(days=current_app.config.get("INVITATION_EXPIRY_DAYS", 7)),
    )
    db.session.add(invitation)
    commit()
    logger.info("Invitation %s sent to %s by user %s", invitation.id, email, principal.user_id)

    if not send_invitation_email(invitation):
        logger.warning("Invitation %s was created but the email could not be delivered", invitation.id)
    return invitation


@service_call
def cancel_invitation(principal: Principal, invitation_id: int) -> Invitation:
    require_department_management(principal)
    invitation = db.session.get(Invitation, invitation_id)
    if invitation is None or invitation.company_id != principal.company_id:
        raise NotFoundError("Invitation not found.")
    if invitation.status != InvitationStatus.PENDING:
        raise ValidationError(f"Cannot cancel an invitation that is {invitation.status.value}.")
    invitation.status = InvitationStatus.CANCELLED
    invitation.cancelled_at = utcnow()
    commit()
    logger.info("Invitation %s cancelled by user %s", invitation.id, principal.user_id)
    return invitation


def _pending_invitation(token: str) -> Invitation:
    invitation = Invitation.query.filter_by(token=token).first()
    if invitation is None:
        raise NotFoundError("Invitation not found.")
    _expire_if_stale(invitation)
    if invitation.status == InvitationStatus.EXPIRED:
        commit()
        raise ValidationError("This invitation has expired.")
    if invitation.status != InvitationStatus.PENDING:
        raise ValidationError(f"This invitation was already {invitation.status.value}.")
    return invitation


def _join(user: User, department: Department) -> DepartmentMembership:
    if department.member_count >= department.max_members:
        raise ValidationError(f"Department '{department.name}' is full.")
    existing = DepartmentMembership.query.filter_by(
        user_id=user.id, department_id=department.id, is_active=True
    ).first()
    if existing:
        raise ValidationError("User is already a member of this department.")
    membership = DepartmentMembership(user_id=user.id, department_id=department.id)
    db.session.add(membership)
    if user.department_id is None:
        user.department_id = department.id
    db.session.flush()
    return membership


def _accept(invitation: Invitation, user: User) -> Invitation:
    user.role = invitation.role
    if invitation.department is not None and invitation.department.is_active:
        _join(user, invitation.department)
        user.department_id = invitation.department_id
    invitation.status = InvitationStatus.ACCEPTED
    invitation.accepted_at = utcnow()
    notifications.create_system_notification(
        invitation.invited_by_id, "Invitation accepted", f"{invitation.email} accepted your invitation."
    )
    commit()
    logger.info("Invitation %s accepted by user %s", invitation.id, user.id)
    return invitation


@service_call
def accept_invitation(principal: Principal, token: str) -> Invitation:
    """Accept an invitation as an existing user of the inviting company."""
    invitation = _pending_invitation(token)
    user = db.session.get(User, principal.user_id)
    if user is None or user.email.lower() != invitation.email or user.company_id != invitation.company_id:
        raise AuthorizationError("This invitation was issued to someone else.")
    return _accept(invitation, user)


@service_call
def register_from_invitation(token: str, data: Dict[str, Any]) -> User:
    """Create the invited user's account and accept the invitation."""
    invitation = _pending_invitation(token)
    if User.query.filter(func.lower(User.email) == invitation.email).first():
        raise ValidationError("An account already exists for this email. Log in to accept the invitation.")
    password = data.get("password") or ""
    if len(password) < 8:
        raise ValidationError("Password must be at least 8 characters.")

    full_name = (invitation.full_name or "").split(" ", 1)
    user = User(
        first_name=require_text(data.get("first_name") or full_name[0], "First name"),
        last_name=require_text(data.get("last_name") or (full_name[1] if len(full_name) > 1 else ""), "Last name"),
        email=invitation.email,
        role=invitation.role,
        company_id=invitation.company_id,
        position=invitation.position,
    )
    user.set_password(password)
    db.session.add(user)
    db.session.flush()
    _accept(invitation, user)
    return user


@service_call
def decline_invitation(token: str) -> Invitation:
    invitation = _pending_invitation(token)
    invitation.status = InvitationStatus.DECLINED
    invitation.declined_at = utcnow()
    commit()
    logger.info("Invitation %s declined", invitation.id)
    return invitation


# Memberships ----------------------------------------------------------------


@service_call
def list_memberships(principal: Principal, department_id: Optional[int] = None) -> list[DepartmentMembership]:
    require_department_management(principal)
    query = (
        DepartmentMembership.query.join(Department, DepartmentMembership.department_id == Department.id)
        .filter(Department.company_id == principal.company_id, DepartmentMembership.is_active.is_(True))
    )
    if department_id is not None:
        query = query.filter(DepartmentMembership.department_id == department_id)
    return query.order_by(DepartmentMembership.joined_at.desc(), DepartmentMembership.id.desc()).all()


@service_call
def add_member(principal: Principal, user_id: int, department_id: int) -> DepartmentMembership:
    require_department_management(principal)
    user = _company_user(principal, user_id)
    department = _department(principal, department_id)
    membership = _join(user, department)
    commit()
    logger.info("User %s added to department %s by user %s", user.id, department.id, principal.user_id)
    return membership


@service_call
def remove_member(principal: Principal, membership_id: int) -> DepartmentMembership:
    require_department_management(principal)
    membership = db.session.get(DepartmentMembership, membership_id)
    if (
        membership is None
        or membership.department.company_id != principal.company_id
        or not membership.is_active
    ):
        raise NotFoundError("Membership not found.")
    membership.is_active = False
    membership.left_at = utcnow()
    if membership.user.department_id == membership.department_id:
        membership.user.department_id = None
    commit()
    logger.info("Membership %s ended by user %s", membership.id, principal.user_id)
    return membership
