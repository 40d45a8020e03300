"""Application repository and the role-scoped queries over it."""
from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional

from sqlalchemy import or_

from tripflow import db
from tripflow.errors import AuthorizationError, ConflictError, NotFoundError, ValidationError
from tripflow.models import (
    Application,
    ApplicationPriority,
    ApplicationStatus,
    ApplicationType,
    Department,
    Document,
    User,
    UserRole,
)
from tripflow.services.authorization import Principal
from tripflow.services.results import service_call
from tripflow.services.store import commit, parse_enum, parse_optional_enum, require_text, translate_store_errors
from tripflow.utils.dates import utcnow

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = {"title", "type", "total_amount", "priority", "metadata"}


def _parse_amount(value: Any) -> Optional[Decimal]:
    if value is None or value == "":
        return None
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, TypeError):
        raise ValidationError("Invalid amount.") from None
    if amount < 0:
        raise ValidationError("Amount cannot be negative.")
    return amount


def _scope_filter(principal: Principal):
    """SQL predicate limiting applications to what ``principal`` may see."""
    if principal.role == UserRole.GENERAL_USER:
        return Application.applicant_id == principal.user_id
    if principal.role == UserRole.DEPARTMENT_ADMIN:
        return Application.department_id == principal.department_id
    if principal.role == UserRole.APPROVER:
        return or_(
            Application.applicant_id == principal.user_id,
            Application.current_approver_id == principal.user_id,
            Application.department_id == principal.department_id,
        )
    return Application.department.has(company_id=principal.company_id)


def is_visible(principal: Principal, application: Application) -> bool:
    if application.department is None or application.department.company_id != principal.company_id:
        return False
    if principal.role == UserRole.ADMIN:
        return True
    if principal.role == UserRole.GENERAL_USER:
        return application.applicant_id == principal.user_id
    if principal.role == UserRole.DEPARTMENT_ADMIN:
        return application.department_id == principal.department_id
    return principal.user_id in (application.applicant_id, application.current_approver_id) or (
        application.department_id == principal.department_id
    )


class ApplicationRepository:
    """CRUD over applications. Raises ``TripFlowError`` subclasses."""

    @staticmethod
    @translate_store_errors
    def list(principal: Principal, status: Optional[ApplicationStatus] = None) -> list[Application]:
        query = Application.query.filter(_scope_filter(principal))
        if status is not None:
            query = query.filter(Application.status == status)
        return query.order_by(Application.created_at.desc(), Application.id.desc()).all()

    @staticmethod
    @translate_store_errors
    def get(application_id: int) -> Application:
        application = db.session.get(Application, application_id)
        if application is None:
            raise NotFoundError("Application not found.")
        return application

    @staticmethod
    @translate_store_errors
    def create(principal: Principal, data: Dict[str, Any]) -> Application:
        applicant = db.session.get(User, principal.user_id)
        if applicant is None or not applicant.is_active:
            raise ValidationError("Applicant could not be resolved.")
        if principal.department_id is None:
            raise ValidationError("You must belong to a department to create an application.")
        department = db.session.get(Department, principal.department_id)
        if department is None or not department.is_active or department.company_id != principal.company_id:
            raise ValidationError("Department could not be resolved.")

        application = Application(
            applicant_id=applicant.id,
            department_id=department.id,
            title=require_text(data.get("title"), "Title"),
            type=parse_enum(ApplicationType, data.get("type"), "type"),
            total_amount=_parse_amount(data.get("total_amount")),
            priority=parse_optional_enum(ApplicationPriority, data.get("priority"), "priority")
            or ApplicationPriority.MEDIUM,
            details=data.get("metadata"),
            status=ApplicationStatus.DRAFT,
        )
        db.session.add(application)
        db.session.flush()
        return application

    @staticmethod
    @translate_store_errors
    def update(
        application_id: int,
        patch: Dict[str, Any],
        expected_status: Optional[ApplicationStatus] = None,
    ) -> Application:
        """Apply ``patch`` (attribute name -> value) in a single UPDATE.

        With ``expected_status`` the row is only touched if its status still
        matches; otherwise the update is a conflict.
        """
        values = {getattr(Application, key): value for key, value in patch.items()}
        values[Application.version] = Application.version + 1
        values[Application.updated_at] = utcnow()

        query = Application.query.filter(Application.id == application_id)
        if expected_status is not None:
            query = query.filter(Application.status == expected_status)
        matched = query.update(values, synchronize_session="fetch")

        if not matched:
            if db.session.get(Application, application_id) is None:
                raise NotFoundError("Application not found.")
            raise ConflictError(
                "The application is no longer "
                f"{expected_status.value if expected_status else 'in the expected state'}."
            )

        application = db.session.get(Application, application_id)
        db.session.refresh(application)
        return application

    @staticmethod
    @translate_store_errors
    def is_referenced(application_id: int) -> bool:
        return Document.query.filter_by(application_id=application_id).count() > 0

    @staticmethod
    @translate_store_errors
    def delete(application_id: int) -> None:
        application = db.session.get(Application, application_id)
        if application is None:
            raise NotFoundError("Application not found.")
        db.session.delete(application)
        db.session.flush()


def _clean_patch(patch: Dict[str, Any]) -> Dict[str, Any]:
    unknown = set(patch) - EDITABLE_FIELDS
    if unknown:
        raise ValidationError(f"Fields cannot be edited: {', '.join(sorted(unknown))}")

    values: Dict[str, Any] = {}
    if "title" in patch:
        values["title"] = require_text(patch["title"], "Title")
    if "type" in patch:
        values["type"] = parse_enum(ApplicationType, patch["type"], "type")
    if "total_amount" in patch:
        values["total_amount"] = _parse_amount(patch["total_amount"])
    if "priority" in patch:
        values["priority"] = parse_enum(ApplicationPriority, patch["priority"], "priority")
    if "metadata" in patch:
        values["details"] = patch["metadata"]
    return values


def get_visible(principal: Principal, application_id: int) -> Application:
    application = ApplicationRepository.get(application_id)
    if not is_visible(principal, application):
        raise NotFoundError("Application not found.")
    return application


@service_call
def list_applications(principal: Principal, status: Optional[str] = None) -> list[Application]:
    return ApplicationRepository.list(
        principal, parse_optional_enum(ApplicationStatus, status, "status")
    )


@service_call
def get_application(principal: Principal, application_id: int) -> Application:
    return get_visible(principal, application_id)


@service_call
def create_application(principal: Principal, data: Dict[str, Any]) -> Application:
    application = ApplicationRepository.create(principal, data)
    commit()
    logger.info("Application %s created by user %s", application.id, principal.user_id)
    return application


@service_call
def edit_application(principal: Principal, application_id: int, patch: Dict[str, Any]) -> Application:
    application = get_visible(principal, application_id)
    if application.applicant_id != principal.user_id:
        raise AuthorizationError("Only the applicant can edit this application.")
    if application.status != ApplicationStatus.DRAFT:
        raise ValidationError("Only draft applications can be edited.")

    updated = ApplicationRepository.update(
        application_id, _clean_patch(patch), expected_status=ApplicationStatus.DRAFT
    )
    commit()
    logger.info("Application %s edited by user %s", application_id, principal.user_id)
    return updated


@service_call
def delete_application(principal: Principal, application_id: int) -> None:
    application = get_visible(principal, application_id)
    if application.applicant_id != principal.user_id:
        raise AuthorizationError("Only the applicant can delete this application.")
    if application.status != ApplicationStatus.DRAFT:
        raise ValidationError("Only draft applications can be deleted.")
    if ApplicationRepository.is_referenced(application_id):
        raise ValidationError("Application is referenced by documents and cannot be deleted.")

    ApplicationRepository.delete(application_id)
    commit()
    logger.info("Application %s deleted by user %s", application_id, principal.user_id)
