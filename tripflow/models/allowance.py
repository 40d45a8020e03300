"""Per-user travel allowance settings."""
from __future__ import annotations

from tripflow import db
from tripflow.utils.dates import utcnow

AMOUNT_FIELDS = (
    "domestic_daily_allowance",
    "domestic_accommodation",
    "domestic_transportation",
    "overseas_daily_allowance",
    "overseas_accommodation",
    "overseas_transportation",
    "overseas_preparation_fee",
)

DISABLED_FIELDS = (
    "domestic_accommodation_disabled",
    "domestic_transportation_disabled",
    "overseas_accommodation_disabled",
    "overseas_transportation_disabled",
    "overseas_preparation_fee_disabled",
)


class AllowanceSettings(db.Model):
    """Daily allowance rates used when filling ``allowance_detail`` documents.

    A ``*_disabled`` flag switches the matching item off for the user.
    """

    __tablename__ = "user_allowance_settings"

    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), primary_key=True)
    domestic_daily_allowance = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    domestic_accommodation = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    domestic_transportation = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    domestic_accommodation_disabled = db.Column(db.Boolean, nullable=False, default=False)
    domestic_transportation_disabled = db.Column(db.Boolean, nullable=False, default=False)
    overseas_daily_allowance = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    overseas_accommodation = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    overseas_transportation = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    overseas_preparation_fee = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    overseas_accommodation_disabled = db.Column(db.Boolean, nullable=False, default=False)
    overseas_transportation_disabled = db.Column(db.Boolean, nullable=False, default=False)
    overseas_preparation_fee_disabled = db.Column(db.Boolean, nullable=False, default=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    def to_dict(self) -> dict:
        data = {"user_id": self.user_id}
        for field in AMOUNT_FIELDS:
            value = getattr(self, field)
            data[field] = float(value) if value is not None else 0.0
        for field in DISABLED_FIELDS:
            data[field] = bool(getattr(self, field))
        return data

    def __repr__(self) -> str:
        return f"<AllowanceSettings user_id={self.user_id}>"
