"""Role hierarchy and plan-tier checks.

Roles form a total order: ``general_user < approver < department_admin <
admin``. Every role check is a rank comparison, never an exact match. Plan
tier is a separate axis that gates whole feature areas.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from tripflow.errors import AuthorizationError, ValidationError
from tripflow.models import PlanTier, User, UserRole

ROLE_RANK = {
    UserRole.GENERAL_USER: 0,
    UserRole.APPROVER: 1,
    UserRole.DEPARTMENT_ADMIN: 2,
    UserRole.ADMIN: 3,
}

RoleLike = Union[UserRole, str]


def parse_role(value: RoleLike) -> UserRole:
    """Accept a ``UserRole`` or its string value."""
    if isinstance(value, UserRole):
        return value
    try:
        return UserRole(str(value).strip().lower())
    except ValueError:
        raise ValidationError(f"Unknown role '{value}'.") from None


def role_rank(role: RoleLike) -> int:
    return ROLE_RANK[parse_role(role)]


def is_authorized(user_role: RoleLike, required_role: RoleLike) -> bool:
    """True iff ``user_role`` ranks at or above ``required_role``."""
    return role_rank(user_role) >= role_rank(required_role)


@dataclass(frozen=True)
class Principal:
    """The acting user, resolved once per request and passed explicitly."""

    user_id: int
    role: UserRole
    company_id: int
    department_id: Optional[int]
    plan: PlanTier

    @classmethod
    def from_user(cls, user: User) -> "Principal":
        return cls(
            user_id=user.id,
            role=user.role,
            company_id=user.company_id,
            department_id=user.department_id,
            plan=user.company.plan,
        )

    def at_least(self, role: RoleLike) -> bool:
        return is_authorized(self.role, role)

    def to_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "role": self.role.value,
            "company_id": self.company_id,
            "department_id": self.department_id,
            "plan": self.plan.value,
        }


def require_role(principal: Principal, role: RoleLike) -> None:
    if not principal.at_least(role):
        raise AuthorizationError(f"This action requires the {parse_role(role).value} role or higher.")


def can_manage_departments(principal: Principal) -> bool:
    """Department management needs the Enterprise plan and the admin role."""
    return principal.plan == PlanTier.ENTERPRISE and principal.at_least(UserRole.ADMIN)


def require_department_management(principal: Principal) -> None:
    if principal.plan != PlanTier.ENTERPRISE:
        raise AuthorizationError("Department management is available on the Enterprise plan only.")
    require_role(principal, UserRole.ADMIN)
