"""Report documents and their draft/submitted/approved/rejected lifecycle."""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from tripflow import db
from tripflow.errors import AuthorizationError, NotFoundError, ValidationError
from tripflow.models import (
    ApplicationStatus,
    Document,
    DocumentStatus,
    DocumentType,
    User,
    UserRole,
)
from tripflow.services.applications import get_visible
from tripflow.services.authorization import Principal
from tripflow.services.results import service_call
from tripflow.services.store import commit, parse_enum, require_text, translate_store_errors

logger = logging.getLogger(__name__)

TRANSITIONS = {
    "submit": (DocumentStatus.DRAFT, DocumentStatus.SUBMITTED),
    "approve": (DocumentStatus.SUBMITTED, DocumentStatus.APPROVED),
    "reject": (DocumentStatus.SUBMITTED, DocumentStatus.REJECTED),
}


class DocumentRepository:
    @staticmethod
    @translate_store_errors
    def list(principal: Principal) -> list[Document]:
        query = Document.query.join(User, Document.created_by_id == User.id).filter(
            User.company_id == principal.company_id
        )
        if principal.role == UserRole.GENERAL_USER:
            query = query.filter(Document.created_by_id == principal.user_id)
        elif principal.role == UserRole.DEPARTMENT_ADMIN:
            query = query.filter(User.department_id == principal.department_id)
        return query.order_by(Document.created_at.desc(), Document.id.desc()).all()

    @staticmethod
    @translate_store_errors
    def get(document_id: int) -> Document:
        document = db.session.get(Document, document_id)
        if document is None:
            raise NotFoundError("Document not found.")
        return document

    @staticmethod
    @translate_store_errors
    def add(document: Document) -> Document:
        db.session.add(document)
        db.session.flush()
        return document

    @staticmethod
    @translate_store_errors
    def delete(document: Document) -> None:
        db.session.delete(document)
        db.session.flush()


def _visible(principal: Principal, document: Document) -> bool:
    if document.created_by is None or document.created_by.company_id != principal.company_id:
        return False
    if principal.role in (UserRole.APPROVER, UserRole.ADMIN):
        return True
    if document.created_by_id == principal.user_id:
        return True
    return (
        principal.role == UserRole.DEPARTMENT_ADMIN
        and document.created_by.department_id == principal.department_id
    )


def _get_visible(principal: Principal, document_id: int) -> Document:
    document = DocumentRepository.get(document_id)
    if not _visible(principal, document):
        raise NotFoundError("Document not found.")
    return document


def _require_creator(principal: Principal, document: Document) -> None:
    if document.created_by_id != principal.user_id:
        raise AuthorizationError("Only the creator can change this document.")


def _require_draft(document: Document) -> None:
    if document.status != DocumentStatus.DRAFT:
        raise ValidationError("Only draft documents can be changed.")


@service_call
def list_documents(principal: Principal) -> list[Document]:
    return DocumentRepository.list(principal)


@service_call
def create_document(principal: Principal, data: Dict[str, Any]) -> Document:
    application_id = data.get("application_id")
    if application_id is not None:
        try:
            application_id = int(application_id)
        except (TypeError, ValueError):
            raise ValidationError("application_id must be an integer.") from None
        application = get_visible(principal, application_id)
        if application.status != ApplicationStatus.COMPLETED:
            raise ValidationError("Reports can only be attached to completed applications.")

    content = data.get("content")
    if content is not None and not isinstance(content, dict):
        raise ValidationError("content must be a JSON object.")

    document = DocumentRepository.add(
        Document(
            application_id=application_id,
            type=parse_enum(DocumentType, data.get("type"), "type"),
            title=require_text(data.get("title"), "Title"),
            created_by_id=principal.user_id,
            status=DocumentStatus.DRAFT,
            content=content,
            attachment_urls=[],
        )
    )
    commit()
    logger.info("Document %s created by user %s", document.id, principal.user_id)
    return document


@service_call
def update_document(principal: Principal, document_id: int, patch: Dict[str, Any]) -> Document:
    document = _get_visible(principal, document_id)
    _require_creator(principal, document)
    _require_draft(document)

    unknown = set(patch) - {"title", "content"}
    if unknown:
        raise ValidationError(f"Fields cannot be edited: {', '.join(sorted(unknown))}")
    if "title" in patch:
        document.title = require_text(patch["title"], "Title")
    if "content" in patch:
        if patch["content"] is not None and not isinstance(patch["content"], dict):
            raise ValidationError("content must be a JSON object.")
        document.content = patch["content"]
    commit()
    return document


@service_call
def delete_document(principal: Principal, document_id: int) -> None:
    document = _get_visible(principal, document_id)
    _require_creator(principal, document)
    _require_draft(document)
    DocumentRepository.delete(document)
    commit()
    logger.info("Document %s deleted by user %s", document_id, principal.user_id)


def _transition(principal: Principal, document_id: int, action: str) -> Document:
    source, target = TRANSITIONS[action]
    document = _get_visible(principal, document_id)
    if document.created_by_id != principal.user_id and not principal.at_least(UserRole.APPROVER):
        raise AuthorizationError(f"Only the creator or an approver can {action} this document.")
    if document.status != source:
        raise ValidationError(f"Cannot {action} a document that is {document.status.value}.")

    document.status = target
    commit()
    logger.info("Document %s %s -> %s by user %s", document_id, source.value, target.value, principal.user_id)
    return document


@service_call
def submit_document(principal: Principal, document_id: int) -> Document:
    return _transition(principal, document_id, "submit")


@service_call
def approve_document(principal: Principal, document_id: int) -> Document:
    return _transition(principal, document_id, "approve")


@service_call
def reject_document(principal: Principal, document_id: int) -> Document:
    return _transition(principal, document_id, "reject")


def _set_attachments(principal: Principal, document_id: int, url: Optional[str], add: bool) -> Document:
    url = require_text(url, "Attachment URL")
    document = _get_visible(principal, document_id)
    _require_creator(principal, document)

    urls = list(document.attachment_urls or [])
    if add and url not in urls:
        urls.append(url)
    elif not add:
        urls = [existing for existing in urls if existing != url]
    # Reassign so the JSON column registers the change.
    document.attachment_urls = urls
    commit()
    return document


@service_call
def add_attachment(principal: Principal, document_id: int, url: Optional[str]) -> Document:
    return _set_attachments(principal, document_id, url, add=True)


@service_call
def remove_attachment(principal: Principal, document_id: int, url: Optional[str]) -> Document:
    return _set_attachments(principal, document_id, url, add=False)
