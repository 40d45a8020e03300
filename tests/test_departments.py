"""Tests for department, invitation and membership administration."""

from datetime import timedelta

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Query, Session

from tripflow import db, mail
from tripflow.errors import AuthorizationError, DataAccessError, NotFoundError, ValidationError
from tripflow.models import (
    Department,
    DepartmentMembership,
    Invitation,
    InvitationStatus,
    Notification,
    PlanTier,
    User,
    UserRole,
)
from tripflow.services import applications, departments
from tripflow.services.authorization import Principal
from tripflow.utils.dates import utcnow


@pytest.fixture
def admin(world):
    return Principal.from_user(world.admin)


# =============================================================================
# Gate
# =============================================================================

def test_non_admin_is_refused(world):
    result = departments.list_departments(Principal.from_user(world.department_admin))
    assert isinstance(result.error, AuthorizationError)


def test_admin_on_pro_plan_is_refused(world):
    world.company.plan = PlanTier.PRO
    db.session.commit()
    result = departments.create_department(Principal.from_user(world.admin), {"name": "Legal"})
    assert isinstance(result.error, AuthorizationError)
    assert Department.query.filter_by(name="Legal").count() == 0


# =============================================================================
# Departments
# =============================================================================

def test_create_list_and_member_counts(world, admin):
    created = departments.create_department(admin, {"name": "Legal", "max_members": 5})
    assert created.ok, created.message

    listed = {department.name: department for department in departments.list_departments(admin).data}
    assert set(listed) == {"Sales", "Support", "Legal"}
    assert listed["Sales"].member_count == 3
    assert listed["Legal"].member_count == 0
    assert listed["Legal"].created_by_id == world.admin.id


def test_department_names_are_unique_per_company(world, admin):
    result = departments.create_department(admin, {"name": "sales"})
    assert isinstance(result.error, ValidationError)


def test_update_cannot_shrink_below_members(world, admin):
    result = departments.update_department(admin, world.sales.id, {"max_members": 2})
    assert isinstance(result.error, ValidationError)

    renamed = departments.update_department(admin, world.sales.id, {"name": "Field Sales", "max_members": 3})
    assert renamed.ok
    assert renamed.data.name == "Field Sales"


def test_delete_is_soft_and_ends_memberships(world, admin):
    assert departments.delete_department(admin, world.support.id).ok

    db.session.expire_all()
    support = db.session.get(Department, world.support.id)
    assert support is not None
    assert support.is_active is False
    assert support.deactivated_at is not None
    assert all(not membership.is_active for membership in support.memberships)
    assert world.support.id not in {d.id for d in departments.list_departments(admin).data}


def test_delete_clears_primary_department_of_members(world, admin):
    assert departments.delete_department(admin, world.sales.id).ok

    db.session.expire_all()
    applicant = db.session.get(User, world.applicant.id)
    assert applicant.department_id is None

    result = applications.create_application(
        Principal.from_user(applicant), {"title": "Osaka trip", "type": "business_trip_request"}
    )
    assert isinstance(result.error, ValidationError)
    assert "belong to a department" in result.message

    assert departments.add_member(admin, applicant.id, world.support.id).ok
    db.session.expire_all()
    assert db.session.get(User, world.applicant.id).department_id == world.support.id


def test_store_failure_is_reported_as_data_access_error(world, admin, monkeypatch):
    def failing_all(self):
        raise OperationalError("SELECT", {}, Exception("no such table: departments"))

    monkeypatch.setattr(Query, "all", failing_all)
    result = departments.list_departments(admin)

    assert not result.ok
    assert isinstance(result.error, DataAccessError)


def test_failed_commit_does_not_create_department(world, admin, monkeypatch):
    def failing_commit(self):
        raise OperationalError("COMMIT", {}, Exception("disk I/O error"))

    monkeypatch.setattr(Session, "commit", failing_commit)
    result = departments.create_department(admin, {"name": "Finance"})
    monkeypatch.undo()

    assert isinstance(result.error, DataAccessError)
    assert Department.query.filter_by(name="Finance").count() == 0


def test_department_of_another_company_is_not_found(world, admin, make_company, make_department):
    foreign = make_department(make_company())
    result = departments.update_department(admin, foreign.id, {"name": "Mine"})
    assert isinstance(result.error, NotFoundError)


# =============================================================================
# Invitations
# =============================================================================

def test_invite_creates_pending_invitation_and_sends_mail(world, admin):
    with mail.record_messages() as outbox:
        result = departments.invite_user(
            admin, {"email": "New.Hire@acme.com", "role": "approver", "department_id": world.sales.id}
        )

    assert result.ok, result.message
    invitation = result.data
    assert invitation.email == "new.hire@acme.com"
    assert invitation.status == InvitationStatus.PENDING
    assert invitation.role == UserRole.APPROVER
    assert invitation.expires_at > utcnow() + timedelta(days=6)
    assert len(outbox) == 1
    assert invitation.token in outbox[0].body


def test_invite_survives_mail_failure(world, admin, monkeypatch):
    def broken_send(message):
        raise ConnectionError("smtp down")

    monkeypatch.setattr(mail, "send", broken_send)
    result = departments.invite_user(admin, {"email": "someone@acme.com"})

    assert result.ok
    assert Invitation.query.count() == 1


@pytest.mark.parametrize(
    "payload",
    [
        {"email": "x@acme.com", "role": "owner"},
        {"email": "alice@acme.com"},
        {"email": ""},
    ],
)
def test_invite_validation(world, admin, payload):
    result = departments.invite_user(admin, payload)
    assert isinstance(result.error, ValidationError)
    assert Invitation.query.count() == 0


def test_no_duplicate_pending_invitation(world, admin):
    assert departments.invite_user(admin, {"email": "dup@acme.com"}).ok
    duplicate = departments.invite_user(admin, {"email": "dup@acme.com"})
    assert isinstance(duplicate.error, ValidationError)


def test_list_marks_stale_invitations_expired(world, admin):
    invitation = departments.invite_user(admin, {"email": "late@acme.com"}).data
    invitation.expires_at = utcnow() - timedelta(minutes=1)
    db.session.commit()

    listed = departments.list_invitations(admin).data
    assert [i.status for i in listed] == [InvitationStatus.EXPIRED]


def test_cancel_is_soft(world, admin):
    invitation = departments.invite_user(admin, {"email": "gone@acme.com"}).data

    cancelled = departments.cancel_invitation(admin, invitation.id)
    assert cancelled.data.status == InvitationStatus.CANCELLED
    assert cancelled.data.cancelled_at is not None
    assert isinstance(departments.cancel_invitation(admin, invitation.id).error, ValidationError)
    assert Invitation.query.count() == 1


def test_register_from_invitation_creates_member(world, admin):
    invitation = departments.invite_user(
        admin, {"email": "dana@acme.com", "full_name": "Dana Scully", "department_id": world.support.id}
    ).data

    result = departments.register_from_invitation(invitation.token, {"password": "s3cretpass"})

    assert result.ok, result.message
    user = result.data
    assert (user.first_name, user.last_name) == ("Dana", "Scully")
    assert user.department_id == world.support.id
    assert user.check_password("s3cretpass")
    assert DepartmentMembership.query.filter_by(user_id=user.id, is_active=True).count() == 1
    assert db.session.get(Invitation, invitation.id).status == InvitationStatus.ACCEPTED
    inviter_inbox = Notification.query.filter_by(user_id=world.admin.id).all()
    assert [n.title for n in inviter_inbox] == ["Invitation accepted"]


def test_accept_by_existing_user_changes_role(world, admin):
    invitation = departments.invite_user(
        admin, {"email": "promoted@acme.com", "role": "approver", "department_id": world.sales.id}
    ).data
    # The invitee already exists in the company under another address; align it.
    user = world.outsider
    user.email = "promoted@acme.com"
    db.session.commit()

    result = departments.accept_invitation(Principal.from_user(user), invitation.token)

    assert result.ok, result.message
    db.session.expire_all()
    refreshed = db.session.get(User, user.id)
    assert refreshed.role == UserRole.APPROVER
    assert refreshed.department_id == world.sales.id


def test_accept_rejects_someone_else(world, admin):
    invitation = departments.invite_user(admin, {"email": "target@acme.com"}).data
    result = departments.accept_invitation(Principal.from_user(world.applicant), invitation.token)
    assert isinstance(result.error, AuthorizationError)
    assert db.session.get(Invitation, invitation.id).status == InvitationStatus.PENDING


def test_expired_invitation_cannot_be_used(world, admin):
    invitation = departments.invite_user(admin, {"email": "slow@acme.com"}).data
    invitation.expires_at = utcnow() - timedelta(days=1)
    db.session.commit()

    result = departments.register_from_invitation(invitation.token, {"password": "s3cretpass"})

    assert isinstance(result.error, ValidationError)
    db.session.expire_all()
    assert db.session.get(Invitation, invitation.id).status == InvitationStatus.EXPIRED


def test_decline(world, admin):
    invitation = departments.invite_user(admin, {"email": "nope@acme.com"}).data
    assert departments.decline_invitation(invitation.token).data.status == InvitationStatus.DECLINED
    assert isinstance(departments.decline_invitation(invitation.token).error, ValidationError)


# =============================================================================
# Memberships
# =============================================================================

def test_add_member_enforces_capacity_and_duplicates(world, admin, make_department):
    tiny = make_department(world.company, name="Tiny", max_members=1)

    assert departments.add_member(admin, world.outsider.id, tiny.id).ok
    duplicate = departments.add_member(admin, world.outsider.id, tiny.id)
    assert isinstance(duplicate.error, ValidationError)
    full = departments.add_member(admin, world.applicant.id, tiny.id)
    assert isinstance(full.error, ValidationError)
    assert "full" in full.message


def test_list_and_remove_membership(world, admin):
    memberships = departments.list_memberships(admin, world.sales.id).data
    assert {m.user_id for m in memberships} == {world.applicant.id, world.approver.id, world.department_admin.id}

    target = next(m for m in memberships if m.user_id == world.applicant.id)
    removed = departments.remove_member(admin, target.id)

    assert removed.data.is_active is False
    assert removed.data.left_at is not None
    assert db.session.get(User, world.applicant.id).department_id is None
    assert len(departments.list_memberships(admin, world.sales.id).data) == 2
    assert isinstance(departments.remove_member(admin, target.id).error, NotFoundError)
