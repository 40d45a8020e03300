"""Company model."""
from __future__ import annotations

import enum

from tripflow import db
from tripflow.utils.dates import isoformat, utcnow


class PlanTier(enum.Enum):
    FREE = "Free"
    PRO = "Pro"
    ENTERPRISE = "Enterprise"


class Company(db.Model):
    __tablename__ = "companies"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), unique=True, nullable=False)
    plan = db.Column(db.Enum(PlanTier, name="plan_tier"), nullable=False, default=PlanTier.FREE)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    users = db.relationship("User", back_populates="company", lazy="selectin")
    departments = db.relationship("Department", back_populates="company", lazy="selectin")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "plan": self.plan.value if self.plan else None,
            "created_at": isoformat(self.created_at),
        }

    def __repr__(self) -> str:
        return f"<Company {self.name} plan={self.plan.value if self.plan else None}>"
