# Overview: Service-layer operations for auth; signup, login and password hashing.

"""
Authentication Service

Signup creates a user, an organization and an "owner" membership in one
commit. Email is globally unique; a duplicate is a ConflictError, reported
distinctly from ordinary validation failures.

SECURITY NOTES:
- Passwords hashed with bcrypt (cost factor from BCRYPT_ROUNDS, default 12)
- Session tokens are issued separately (see session_service.py)
"""

from __future__ import annotations

from datetime import datetime, timedelta

import bcrypt
from flask import current_app
from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import Membership, Organization, User
from ..models.ledger import EXPENSE, INCOME
from ..validation import ConflictError, validate_password
from .ledger_store import LedgerStore, StoreError
from runway.time_utils import utcnow


# (description, amount, type, days before signup)
SAMPLE_TRANSACTIONS = (
    ("Seed round funding", 150000, INCOME, 40),
    ("Monthly payroll", 52000, EXPENSE, 20),
    ("Office rent", 8000, EXPENSE, 10),
    ("New client invoice", 22000, INCOME, 5),
)


def hash_password(password: str) -> str:
    """
    Hash password using bcrypt.

    Password length is validated before hashing.
    """
    validate_password(password)
    rounds = current_app.config.get("BCRYPT_ROUNDS", 12)
    salt = bcrypt.gensalt(rounds=rounds)
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')  # Store as string in database


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify password against bcrypt hash.

    bcrypt.checkpw is timing-safe. A malformed stored hash verifies as False.
    """
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        return False


def sample_transactions(org: Organization, now: datetime) -> list[dict]:
    return [
        {
            "org_id": org.id,
            "description": description,
            "amount": amount,
            "type": txn_type,
            "currency": org.default_currency,
            "occurred_at": now - timedelta(days=days_ago),
        }
        for description, amount, txn_type, days_ago in SAMPLE_TRANSACTIONS
    ]


def signup(store: LedgerStore, email: str, password: str, organization_name: str) -> tuple[User, Organization]:
    """
    Create user + organization + owner membership.

    Raises:
        ConflictError: email already registered
        ValidationError: password too short

    Sample transactions are written after the account commits; a store
    failure while seeding is logged and does not undo the signup.
    """
    existing = db.session.query(User).filter_by(email=email).first()
    if existing:
        raise ConflictError("Account already exists")

    user = User(email=email, password_hash=hash_password(password))
    org = Organization(
        name=organization_name,
        default_currency=current_app.config["DEFAULT_CURRENCY"],
    )
    db.session.add_all([user, org])
    db.session.flush()
    db.session.add(Membership(user_id=user.id, org_id=org.id, role="owner"))

    try:
        db.session.commit()
    except IntegrityError:
        # Lost a race with a concurrent signup for the same email
        db.session.rollback()
        raise ConflictError("Account already exists")

    # Sample data is optional; the account stands even if seeding fails
    if current_app.config.get("SEED_SAMPLE_TRANSACTIONS"):
        try:
            store.create_transactions(sample_transactions(org, utcnow()))
        except StoreError:
            current_app.logger.exception("Failed to seed sample transactions for org %s", org.id)

    current_app.logger.info("Signed up user %s with org %s", user.id, org.id)
    return user, org


def authenticate(email: str, password: str) -> User | None:
    """
    Authenticate user with email and password.

    Returns User if credentials valid, None otherwise.
    Updates last_login_at timestamp on successful authentication.
    """
    user = db.session.query(User).filter_by(email=email.strip().lower()).first()
    if not user:
        return None

    if not verify_password(password, user.password_hash):
        return None

    user.last_login_at = utcnow()
    db.session.commit()
    return user


def primary_membership(user: User) -> Membership | None:
    """The membership a fresh login is scoped to (oldest first)."""
    return (
        db.session.query(Membership)
        .filter_by(user_id=user.id)
        .order_by(Membership.id.asc())
        .first()
    )
