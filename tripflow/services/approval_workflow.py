"""Approval workflow for applications.

The workflow keeps no state of its own: each call loads the application,
checks the requested transition against the table below, writes the new
status with an expected-status predicate, appends one approval log row and
(for decisions) one notification to the applicant, then commits once.

    draft    --submit-->   pending
    pending  --approve-->  approved
    pending  --reject-->   rejected   (comment required)
    pending  --hold-->     on_hold    (comment required)
    on_hold  --resubmit--> pending
    approved --complete--> completed
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from tripflow import db
from tripflow.errors import AuthorizationError, NotFoundError, ValidationError
from tripflow.models import Application, ApplicationStatus, ApprovalAction, ApprovalLog, UserRole
from tripflow.services import notifications
from tripflow.services.applications import ApplicationRepository, get_visible
from tripflow.services.authorization import Principal, require_role
from tripflow.services.results import service_call
from tripflow.services.store import commit, translate_store_errors
from tripflow.utils.dates import utcnow

logger = logging.getLogger(__name__)

Guard = Callable[[Principal, Application], None]


def _applicant_only(principal: Principal, application: Application) -> None:
    if application.applicant_id != principal.user_id:
        raise AuthorizationError("Only the applicant can submit this application.")


def _approver_or_above(principal: Principal, application: Application) -> None:
    require_role(principal, UserRole.APPROVER)


def _applicant_or_admin(principal: Principal, application: Application) -> None:
    if application.applicant_id != principal.user_id:
        require_role(principal, UserRole.ADMIN)


@dataclass(frozen=True)
class Transition:
    source: ApplicationStatus
    target: ApplicationStatus
    logged_as: ApprovalAction
    guard: Guard
    comment_required: bool = False
    notify_applicant: bool = False


TRANSITIONS: Dict[str, Transition] = {
    "submit": Transition(
        ApplicationStatus.DRAFT, ApplicationStatus.PENDING, ApprovalAction.SUBMITTED, _applicant_only
    ),
    "approve": Transition(
        ApplicationStatus.PENDING,
        ApplicationStatus.APPROVED,
        ApprovalAction.APPROVED,
        _approver_or_above,
        notify_applicant=True,
    ),
    "reject": Transition(
        ApplicationStatus.PENDING,
        ApplicationStatus.REJECTED,
        ApprovalAction.REJECTED,
        _approver_or_above,
        comment_required=True,
        notify_applicant=True,
    ),
    "hold": Transition(
        ApplicationStatus.PENDING,
        ApplicationStatus.ON_HOLD,
        ApprovalAction.ON_HOLD,
        _approver_or_above,
        comment_required=True,
        notify_applicant=True,
    ),
    "resubmit": Transition(
        ApplicationStatus.ON_HOLD, ApplicationStatus.PENDING, ApprovalAction.RESUBMITTED, _approver_or_above
    ),
    "complete": Transition(
        ApplicationStatus.APPROVED, ApplicationStatus.COMPLETED, ApprovalAction.COMPLETED, _applicant_or_admin
    ),
}


def next_approver(application: Application) -> Optional[int]:
    """Route a submitted application to its department manager."""
    department = application.department
    manager_id = department.manager_id if department else None
    if manager_id is None or manager_id == application.applicant_id:
        return None
    return manager_id


def _changes(action: str, application: Application, comment: Optional[str]) -> Dict[str, Any]:
    now = utcnow()
    changes: Dict[str, Any] = {"status": TRANSITIONS[action].target}
    if action == "submit":
        changes.update(submitted_at=now, current_approver_id=next_approver(application))
    elif action == "approve":
        changes.update(approved_at=now, current_approver_id=None)
    elif action == "reject":
        changes.update(rejection_reason=comment, current_approver_id=None)
    elif action == "hold":
        changes.update(rejection_reason=comment)
    elif action == "resubmit":
        changes.update(rejection_reason=None)
    elif action == "complete":
        changes.update(completed_at=now)
    return changes


def _load(principal: Principal, application_id: int) -> Application:
    application = ApplicationRepository.get(application_id)
    if application.department is None or application.department.company_id != principal.company_id:
        raise NotFoundError("Application not found.")
    return application


@translate_store_errors
def _append_log(
    application_id: int,
    principal: Principal,
    transition: Transition,
    comment: Optional[str],
) -> ApprovalLog:
    entry = ApprovalLog(
        application_id=application_id,
        actor_id=principal.user_id,
        action=transition.logged_as,
        comment=comment,
        previous_status=transition.source,
        new_status=transition.target,
    )
    db.session.add(entry)
    db.session.flush()
    return entry


def _transition(principal: Principal, application_id: int, action: str, comment: Optional[str] = None) -> Application:
    transition = TRANSITIONS.get(action)
    if transition is None:
        raise ValidationError(f"Unknown action '{action}'.")

    application = _load(principal, application_id)
    if application.status != transition.source:
        raise ValidationError(
            f"Cannot {action} an application that is {application.status.value}."
        )
    transition.guard(principal, application)

    comment = (comment or "").strip() or None
    if transition.comment_required and comment is None:
        raise ValidationError(f"A comment is required to {action} an application.")

    updated = ApplicationRepository.update(
        application_id,
        _changes(action, application, comment),
        expected_status=transition.source,
    )
    _append_log(application_id, principal, transition, comment)
    if transition.notify_applicant:
        notifications.create_approval_notification(updated, transition.logged_as)
    commit()

    logger.info(
        "Application %s %s -> %s by user %s",
        application_id,
        transition.source.value,
        transition.target.value,
        principal.user_id,
    )
    return updated


@service_call
def transition(principal: Principal, application_id: int, action: str, comment: Optional[str] = None) -> Application:
    return _transition(principal, application_id, action, comment)


@service_call
def submit(principal: Principal, application_id: int) -> Application:
    return _transition(principal, application_id, "submit")


@service_call
def approve(principal: Principal, application_id: int, comment: Optional[str] = None) -> Application:
    return _transition(principal, application_id, "approve", comment)


@service_call
def reject(principal: Principal, application_id: int, comment: Optional[str]) -> Application:
    return _transition(principal, application_id, "reject", comment)


@service_call
def hold(principal: Principal, application_id: int, comment: Optional[str]) -> Application:
    return _transition(principal, application_id, "hold", comment)


@service_call
def resubmit(principal: Principal, application_id: int, comment: Optional[str] = None) -> Application:
    return _transition(principal, application_id, "resubmit", comment)


@service_call
def complete(principal: Principal, application_id: int) -> Application:
    return _transition(principal, application_id, "complete")


@service_call
def history(principal: Principal, application_id: int) -> list[ApprovalLog]:
    get_visible(principal, application_id)
    return _log_entries(application_id)


@translate_store_errors
def _log_entries(application_id: int) -> list[ApprovalLog]:
    return ApprovalLog.query.filter_by(application_id=application_id).order_by(ApprovalLog.id).all()


@service_call
def remind_approver(principal: Principal, application_id: int, message: Optional[str] = None):
    """Send the current approver of a pending application a reminder."""
    application = get_visible(principal, application_id)
    if application.applicant_id != principal.user_id:
        require_role(principal, UserRole.DEPARTMENT_ADMIN)
    if application.status != ApplicationStatus.PENDING or application.current_approver_id is None:
        raise ValidationError("Only pending applications with an assigned approver can be reminded.")

    notification = notifications.create_reminder_notification(
        application.current_approver_id,
        application.id,
        message or f"'{application.title}' is waiting for your approval.",
    )
    commit()
    return notification
