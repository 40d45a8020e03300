"""
Test configuration and fixtures.

Provides:
- Flask app built with the ``testing`` config (in-memory SQLite, CSRF off,
  mail suppressed) and a fresh schema per test
- Factories for companies, departments, users and applications
- A ``world`` of one company with two departments and one user per role
- Test client login helper
"""
from __future__ import annotations

import itertools
from types import SimpleNamespace
from typing import Optional

import pytest

from tripflow import create_app, db
from tripflow.models import (
    Application,
    ApplicationStatus,
    ApplicationType,
    Company,
    Department,
    DepartmentMembership,
    PlanTier,
    User,
    UserRole,
)

PASSWORD = "password123"
_sequence = itertools.count(1)


# =============================================================================
# Application
# =============================================================================

@pytest.fixture
def app():
    app = create_app("testing")
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


# =============================================================================
# Factories
# =============================================================================

@pytest.fixture
def make_company(app):
    def _make(plan: PlanTier = PlanTier.ENTERPRISE, name: Optional[str] = None) -> Company:
        company = Company(name=name or f"Company {next(_sequence)}", plan=plan)
        db.session.add(company)
        db.session.commit()
        return company

    return _make


@pytest.fixture
def make_department(app):
    def _make(company: Company, name: Optional[str] = None, manager: Optional[User] = None, **kwargs) -> Department:
        department = Department(
            company_id=company.id,
            name=name or f"Department {next(_sequence)}",
            manager_id=manager.id if manager else None,
            **kwargs,
        )
        db.session.add(department)
        db.session.commit()
        return department

    return _make


@pytest.fixture
def make_user(app):
    def _make(
        company: Company,
        role: UserRole = UserRole.GENERAL_USER,
        department: Optional[Department] = None,
        email: Optional[str] = None,
    ) -> User:
        number = next(_sequence)
        user = User(
            first_name="User",
            last_name=str(number),
            email=email or f"user{number}@acme.com",
            role=role,
            company_id=company.id,
            department_id=department.id if department else None,
        )
        user.set_password(PASSWORD)
        db.session.add(user)
        db.session.flush()
        if department is not None:
            db.session.add(DepartmentMembership(user_id=user.id, department_id=department.id))
        db.session.commit()
        return user

    return _make


@pytest.fixture
def make_application(app):
    def _make(
        applicant: User,
        status: ApplicationStatus = ApplicationStatus.DRAFT,
        title: str = "Client visit",
        current_approver: Optional[User] = None,
    ) -> Application:
        application = Application(
            applicant_id=applicant.id,
            department_id=applicant.department_id,
            title=title,
            type=ApplicationType.BUSINESS_TRIP_REQUEST,
            status=status,
            current_approver_id=current_approver.id if current_approver else None,
        )
        db.session.add(application)
        db.session.commit()
        return application

    return _make


@pytest.fixture
def world(make_company, make_department, make_user):
    """One Enterprise company with departments D and E and a user per role.

    ``approver`` manages D, so submitted applications from D route to them.
    """
    company = make_company(PlanTier.ENTERPRISE, name="Acme")
    sales = make_department(company, name="Sales")
    support = make_department(company, name="Support")

    applicant = make_user(company, UserRole.GENERAL_USER, sales, email="alice@acme.com")
    approver = make_user(company, UserRole.APPROVER, sales, email="bob@acme.com")
    department_admin = make_user(company, UserRole.DEPARTMENT_ADMIN, sales, email="carol@acme.com")
    admin = make_user(company, UserRole.ADMIN, support, email="zoe@acme.com")
    outsider = make_user(company, UserRole.GENERAL_USER, support, email="frank@acme.com")

    sales.manager_id = approver.id
    db.session.commit()

    return SimpleNamespace(
        company=company,
        sales=sales,
        support=support,
        applicant=applicant,
        approver=approver,
        department_admin=department_admin,
        admin=admin,
        outsider=outsider,
    )


# =============================================================================
# HTTP helpers
# =============================================================================

@pytest.fixture
def login(client):
    def _login(user: User, password: str = PASSWORD):
        response = client.post("/auth/login", json={"email": user.email, "password": password})
        assert response.status_code == 200, response.get_json()
        return response

    return _login
