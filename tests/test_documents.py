"""Tests for report documents and their lifecycle."""

import pytest

from tripflow.errors import AuthorizationError, NotFoundError, ValidationError
from tripflow.models import ApplicationStatus, Document, DocumentStatus
from tripflow.services import documents
from tripflow.services.authorization import Principal


@pytest.fixture
def other_company_document(make_company, make_department, make_user):
    globex = make_company(name="Globex")
    research = make_department(globex, name="Research")
    member = make_user(globex, department=research, email="gina@globex.com")
    result = documents.create_document(Principal.from_user(member), {"type": "business_report", "title": "Secret"})
    assert result.ok, result.message
    return result.data


@pytest.fixture
def draft(world):
    result = documents.create_document(
        Principal.from_user(world.applicant),
        {"type": "business_report", "title": "Osaka report", "content": {"summary": "Met client"}},
    )
    assert result.ok, result.message
    return result.data


def test_create_starts_as_draft_without_attachments(world, draft):
    assert draft.status == DocumentStatus.DRAFT
    assert draft.created_by_id == world.applicant.id
    assert draft.attachment_urls == []


def test_create_requires_completed_application(world, make_application):
    principal = Principal.from_user(world.applicant)
    approved = make_application(world.applicant, ApplicationStatus.APPROVED)
    completed = make_application(world.applicant, ApplicationStatus.COMPLETED)

    rejected = documents.create_document(
        principal, {"type": "expense_report", "title": "Too early", "application_id": approved.id}
    )
    assert isinstance(rejected.error, ValidationError)

    linked = documents.create_document(
        principal, {"type": "expense_report", "title": "Expenses", "application_id": completed.id}
    )
    assert linked.ok
    assert linked.data.application_id == completed.id


def test_create_rejects_unknown_type_and_non_object_content(world):
    principal = Principal.from_user(world.applicant)
    assert not documents.create_document(principal, {"type": "memo", "title": "x"}).ok
    assert not documents.create_document(principal, {"type": "gps_log", "title": "x", "content": [1, 2]}).ok
    assert Document.query.count() == 0


def test_list_is_scoped_by_role(world, draft, other_company_document):
    foreign = documents.create_document(
        Principal.from_user(world.outsider), {"type": "monthly_report", "title": "Support"}
    ).data

    def ids(user):
        return {document.id for document in documents.list_documents(Principal.from_user(user)).data}

    assert ids(world.applicant) == {draft.id}
    assert ids(world.department_admin) == {draft.id}
    assert ids(world.approver) == {draft.id, foreign.id}
    assert ids(world.admin) == {draft.id, foreign.id}


def test_other_company_documents_are_invisible(world, other_company_document):
    for user in (world.approver, world.admin):
        principal = Principal.from_user(user)
        assert other_company_document.id not in {d.id for d in documents.list_documents(principal).data}
        result = documents.submit_document(principal, other_company_document.id)
        assert isinstance(result.error, NotFoundError)
    assert other_company_document.status == DocumentStatus.DRAFT


def test_only_creator_edits_drafts(world, draft):
    updated = documents.update_document(Principal.from_user(world.applicant), draft.id, {"title": "Final report"})
    assert updated.data.title == "Final report"

    by_admin = documents.update_document(Principal.from_user(world.admin), draft.id, {"title": "Hijacked"})
    assert isinstance(by_admin.error, AuthorizationError)

    hidden = documents.update_document(Principal.from_user(world.outsider), draft.id, {"title": "x"})
    assert isinstance(hidden.error, NotFoundError)


def test_submit_then_approve(world, draft):
    submitted = documents.submit_document(Principal.from_user(world.applicant), draft.id)
    assert submitted.data.status == DocumentStatus.SUBMITTED

    frozen = documents.update_document(Principal.from_user(world.applicant), draft.id, {"title": "late edit"})
    assert isinstance(frozen.error, ValidationError)

    approved = documents.approve_document(Principal.from_user(world.approver), draft.id)
    assert approved.data.status == DocumentStatus.APPROVED

    again = documents.reject_document(Principal.from_user(world.approver), draft.id)
    assert isinstance(again.error, ValidationError)


def test_department_admin_approves_department_document(world, draft):
    documents.submit_document(Principal.from_user(world.applicant), draft.id)
    result = documents.approve_document(Principal.from_user(world.department_admin), draft.id)
    assert result.ok
    assert result.data.status == DocumentStatus.APPROVED


def test_delete_only_drafts(world, draft):
    principal = Principal.from_user(world.applicant)
    documents.submit_document(principal, draft.id)
    assert isinstance(documents.delete_document(principal, draft.id).error, ValidationError)

    other = documents.create_document(principal, {"type": "travel_detail", "title": "Route"}).data
    assert documents.delete_document(principal, other.id).ok
    assert Document.query.filter_by(id=other.id).count() == 0


def test_attachments_are_idempotent(world, draft):
    principal = Principal.from_user(world.applicant)
    url = "https://files.acme.com/receipt.pdf"

    documents.add_attachment(principal, draft.id, url)
    result = documents.add_attachment(principal, draft.id, url)
    assert result.data.attachment_urls == [url]

    documents.remove_attachment(principal, draft.id, url)
    result = documents.remove_attachment(principal, draft.id, url)
    assert result.ok
    assert result.data.attachment_urls == []
