from __future__ import annotations

from ..extensions import db
from runway.time_utils import to_utc_z


class Organization(db.Model):
    """
    Multi-tenant root: every tenant is an Organization.

    All transactions and the cached summary belong to exactly one
    organization. No data may cross organization boundaries; every query
    must be scoped by org_id.
    """
    __tablename__ = "organizations"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    default_currency = db.Column(db.String(4), nullable=False, default="CAD")

    created_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
    )
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    def __repr__(self) -> str:
        return f"<Organization id={self.id} name={self.name!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "default_currency": self.default_currency,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }

    def to_public_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "default_currency": self.default_currency,
        }


class Membership(db.Model):
    """
    User <-> Organization access grant.

    A user may belong to several organizations. The active organization is
    not stored here; it travels inside each issued session token.
    """
    __tablename__ = "memberships"
    __table_args__ = (
        db.UniqueConstraint("user_id", "org_id", name="uq_memberships_user_org"),
        db.Index("ix_memberships_org_id", "org_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(
        db.Integer,
        db.ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    org_id = db.Column(
        db.Integer,
        db.ForeignKey("organizations.id", ondelete="RESTRICT"),
        nullable=False,
    )
    role = db.Column(db.String(32), nullable=False, default="owner")

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    user = db.relationship("User", backref=db.backref("memberships", lazy=True))
    organization = db.relationship("Organization", backref=db.backref("memberships", lazy=True))

    def __repr__(self) -> str:
        return f"<Membership user_id={self.user_id} org_id={self.org_id} role={self.role!r}>"
