# Overview: Service-layer operations for session tokens; issues and validates bearer tokens.

"""
Session Token Service

Tokens are signed, expiring JWTs (HS256) carrying the user id and the
active organization id. Nothing is stored server-side: switching
organization mints a new token and the old one simply stops being used.

States: Anonymous -> Authenticated(user_id, org_id) on signup/login,
Authenticated -> Authenticated(user_id, other org_id) on switch,
Authenticated -> Anonymous on expiry or a bad signature.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

from flask import current_app
from jose import JWTError, jwt

from ..extensions import db
from ..models import Membership, Organization, User
from runway.time_utils import utcnow


ALGORITHM = "HS256"


@dataclass
class SessionContext:
    """
    Resolved session: the authenticated user and the organization the token
    is scoped to. org_id is fixed for the lifetime of the token.
    """
    user: User
    organization: Organization
    org_id: int


def _secret() -> str:
    secret = current_app.config.get("JWT_SECRET")
    if not secret:
        raise RuntimeError("JWT_SECRET is not configured")
    return secret


def issue_token(user_id: int, org_id: int, ttl: timedelta | None = None) -> str:
    """Sign a token for (user_id, org_id) valid for ttl (default SESSION_TTL)."""
    if ttl is None:
        ttl = current_app.config["SESSION_TTL"]
    now = utcnow()
    claims = {
        "user_id": user_id,
        "org_id": org_id,
        "iat": now,
        "exp": now + ttl,
    }
    return jwt.encode(claims, _secret(), algorithm=ALGORITHM)


def decode_token(token: str) -> tuple[int, int] | None:
    """
    Verify signature and expiry.

    Returns (user_id, org_id), or None for anything that does not verify.
    """
    try:
        payload = jwt.decode(token, _secret(), algorithms=[ALGORITHM])
    except JWTError:
        return None

    user_id = payload.get("user_id")
    org_id = payload.get("org_id")
    if not isinstance(user_id, int) or not isinstance(org_id, int):
        return None
    return user_id, org_id


def validate_session(token: str) -> SessionContext | None:
    """
    Resolve a bearer token to a SessionContext.

    Returns None if the token does not verify, or if the user, the
    organization or the membership between them no longer exists.
    """
    decoded = decode_token(token)
    if decoded is None:
        return None
    user_id, org_id = decoded

    user = db.session.get(User, user_id)
    if user is None:
        return None

    membership = db.session.query(Membership).filter_by(
        user_id=user_id,
        org_id=org_id,
    ).first()
    if membership is None:
        return None

    return SessionContext(
        user=user,
        organization=membership.organization,
        org_id=org_id,
    )
