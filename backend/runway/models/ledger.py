from __future__ import annotations

from ..extensions import db
from runway.time_utils import to_utc_z


INCOME = "INCOME"
EXPENSE = "EXPENSE"


class Transaction(db.Model):
    """
    One ledger entry for an organization.

    IMMUTABLE: created once, never updated or deleted.
    amount is always a positive whole number; the sign comes from type.
    occurred_at is business time; created_at is system time (DB default).
    """
    __tablename__ = "transactions"
    __table_args__ = (
        db.Index("ix_transactions_org_occurred", "org_id", "occurred_at"),
        db.CheckConstraint("amount > 0", name="ck_transactions_amount_positive"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    org_id = db.Column(
        db.Integer,
        db.ForeignKey("organizations.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    description = db.Column(db.String(255), nullable=False)
    amount = db.Column(db.Integer, nullable=False)
    currency = db.Column(db.String(4), nullable=False)
    type = db.Column(db.String(16), nullable=False)  # INCOME, EXPENSE

    occurred_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    organization = db.relationship("Organization", backref=db.backref("transactions", lazy=True))

    def __repr__(self) -> str:
        return f"<Transaction id={self.id} org_id={self.org_id} type={self.type} amount={self.amount}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "org_id": self.org_id,
            "description": self.description,
            "amount": self.amount,
            "currency": self.currency,
            "type": self.type,
            "occurred_at": to_utc_z(self.occurred_at),
            "created_at": to_utc_z(self.created_at),
        }


class Summary(db.Model):
    """
    Cached cash-flow summary, one row per organization.

    DERIVED: recomputed from the full transaction set and upserted on every
    summary request. Never read without being refreshed first.
    """
    __tablename__ = "summaries"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    org_id = db.Column(
        db.Integer,
        db.ForeignKey("organizations.id", ondelete="RESTRICT"),
        nullable=False,
        unique=True,
        index=True,
    )
    cash_on_hand = db.Column(db.Integer, nullable=False, default=0)
    monthly_burn = db.Column(db.Integer, nullable=False, default=0)
    runway_months = db.Column(db.Float, nullable=False, default=0)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False)

    organization = db.relationship("Organization", backref=db.backref("summary", uselist=False, lazy=True))
