"""Tests for the JSON routes and how they map service results to HTTP."""

from tripflow import db
from tripflow.models import Application, ApplicationStatus, Invitation, PlanTier


def test_requires_login(client, world):
    response = client.get("/applications")
    assert response.status_code == 401
    assert response.get_json() == {"error": "Authentication required."}


def test_login_rejects_bad_credentials(client, world):
    response = client.post("/auth/login", json={"email": world.applicant.email, "password": "wrong-password"})
    assert response.status_code == 401


def test_login_validates_form(client, world):
    response = client.post("/auth/login", json={"email": "not-an-email"})
    assert response.status_code == 400
    assert response.get_json()["type"] == "ValidationError"


def test_me_returns_principal(client, world, login):
    login(world.approver)
    body = client.get("/auth/me").get_json()
    assert body["user"]["email"] == world.approver.email
    assert body["principal"]["role"] == "approver"
    assert body["principal"]["plan"] == "Enterprise"


def test_application_lifecycle_over_http(client, world, login):
    login(world.applicant)

    created = client.post("/applications", json={"title": "Berlin fair", "type": "business_trip_request"})
    assert created.status_code == 201
    application_id = created.get_json()["application"]["id"]

    submitted = client.post(f"/applications/{application_id}/submit")
    assert submitted.status_code == 200
    assert submitted.get_json()["application"]["status"] == "pending"

    listed = client.get("/applications?status=pending").get_json()["applications"]
    assert [item["id"] for item in listed] == [application_id]

    history = client.get(f"/applications/{application_id}/history").get_json()["history"]
    assert [entry["action"] for entry in history] == ["submitted"]


def test_transition_errors_map_to_status_codes(client, world, login, make_application):
    pending = make_application(world.applicant, ApplicationStatus.PENDING, current_approver=world.approver)
    login(world.approver)

    missing_comment = client.post(f"/applications/{pending.id}/reject", json={"comment": ""})
    assert missing_comment.status_code == 400

    unknown = client.post("/applications/999999/approve")
    assert unknown.status_code == 404

    approved = client.post(f"/applications/{pending.id}/approve", json={"comment": "ok"})
    assert approved.status_code == 200

    again = client.post(f"/applications/{pending.id}/approve")
    assert again.status_code == 400


def test_general_user_approval_is_forbidden(client, world, login, make_application):
    pending = make_application(world.outsider, ApplicationStatus.PENDING)
    login(world.applicant)

    response = client.post(f"/applications/{pending.id}/approve")

    assert response.status_code == 403
    db.session.expire_all()
    assert db.session.get(Application, pending.id).status == ApplicationStatus.PENDING


def test_notifications_and_settings(client, world, login, make_application):
    pending = make_application(world.applicant, ApplicationStatus.PENDING, current_approver=world.approver)
    login(world.approver)
    client.post(f"/applications/{pending.id}/approve")
    client.post("/auth/logout")
    login(world.applicant)

    body = client.get("/notifications").get_json()
    assert body["unread_count"] == 1
    assert body["notifications"][0]["type"] == "email"

    assert client.post("/notifications/read-all").get_json() == {"updated": 1}
    assert client.post("/notifications/read-all").get_json() == {"updated": 0}

    saved = client.put("/notifications/settings", json={"reminder_time": "07:45"})
    assert saved.status_code == 200
    assert saved.get_json()["settings"]["reminder_time"] == "07:45"
    assert client.put("/notifications/settings", json={"reminder_time": "7pm"}).status_code == 400


def test_allowance_settings_over_http(client, world, login):
    assert client.get("/settings/allowances").status_code == 401
    login(world.applicant)

    defaults = client.get("/settings/allowances").get_json()["allowances"]
    assert defaults["user_id"] == world.applicant.id
    assert defaults["domestic_daily_allowance"] == 0.0

    saved = client.put(
        "/settings/allowances", json={"domestic_daily_allowance": 2500, "domestic_accommodation_disabled": True}
    )
    assert saved.status_code == 200
    assert saved.get_json()["allowances"]["domestic_daily_allowance"] == 2500.0
    assert saved.get_json()["allowances"]["domestic_accommodation_disabled"] is True

    refused = client.put("/settings/allowances", json={"overseas_daily_allowance": -10})
    assert refused.status_code == 400
    assert client.get("/settings/allowances").get_json()["allowances"]["domestic_daily_allowance"] == 2500.0


def test_documents_over_http(client, world, login):
    login(world.applicant)

    created = client.post("/documents", json={"type": "business_report", "title": "Trip notes"})
    assert created.status_code == 201
    document_id = created.get_json()["document"]["id"]

    attached = client.post(f"/documents/{document_id}/attachments", json={"url": "https://files.acme.com/a.pdf"})
    assert attached.get_json()["document"]["attachment_urls"] == ["https://files.acme.com/a.pdf"]

    assert client.post(f"/documents/{document_id}/submit").status_code == 200
    assert client.post(f"/documents/{document_id}/archive").status_code == 404
    assert client.delete(f"/documents/{document_id}").status_code == 400


def test_admin_department_routes(client, world, login):
    login(world.admin)

    created = client.post("/admin/departments", json={"name": "Legal", "max_members": 3})
    assert created.status_code == 201
    assert created.get_json()["department"]["max_members"] == 3

    invalid = client.post("/admin/departments", json={"name": "", "max_members": 0})
    assert invalid.status_code == 400

    names = {d["name"] for d in client.get("/admin/departments").get_json()["departments"]}
    assert names == {"Sales", "Support", "Legal"}


def test_admin_routes_need_enterprise(client, world, login):
    world.company.plan = PlanTier.FREE
    db.session.commit()
    login(world.admin)

    assert client.get("/admin/departments").status_code == 403
    assert "Enterprise" in client.get("/admin/departments").get_json()["error"]


def test_invitation_registration_flow(client, world, login):
    login(world.admin)
    invited = client.post(
        "/admin/invitations",
        json={"email": "erin@acme.com", "full_name": "Erin Hale", "role": "approver", "department_id": world.sales.id},
    )
    assert invited.status_code == 201
    token = db.session.get(Invitation, invited.get_json()["invitation"]["id"]).token
    client.post("/auth/logout")

    registered = client.post(f"/invitations/{token}/accept", json={"password": "erin-secret"})

    assert registered.status_code == 201
    user = registered.get_json()["user"]
    assert user["role"] == "approver"
    assert user["department_id"] == world.sales.id
    assert client.post(f"/invitations/{token}/decline").status_code == 400


def test_admin_routes_need_admin_role(client, world, login):
    login(world.department_admin)

    response = client.get("/admin/memberships")

    assert response.status_code == 403
    assert response.get_json() == {"error": "Insufficient permissions."}
