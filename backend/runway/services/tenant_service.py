"""
Multi-Tenant Service: Membership Checks and Organization Switching

Every request is scoped to the organization inside its session token.
Access to any other organization requires a Membership row, and
cross-tenant attempts are rejected with TenantAccessError.

USAGE:
    from runway.services.tenant_service import get_current_org_id, switch_organization

    org_id = get_current_org_id()
    token, org = switch_organization(store, g.current_user.id, requested_org_id)
"""

from __future__ import annotations

from flask import current_app, g

from ..extensions import db
from ..models import Membership, Organization
from . import session_service


class TenantAccessError(Exception):
    """Raised when cross-tenant access is attempted."""
    pass


def get_current_org_id() -> int:
    """
    Get current tenant's org_id from Flask g context.

    Raises TenantAccessError if org_id not set.
    """
    if not hasattr(g, 'org_id') or g.org_id is None:
        raise TenantAccessError("Tenant context not established")
    return g.org_id


def require_membership(store, user_id: int, org_id: int) -> Membership:
    """
    Return the Membership linking user and organization.

    Raises TenantAccessError if there is none. The message does not reveal
    whether the organization exists.
    """
    membership = store.find_membership(user_id, org_id)
    if membership is None:
        current_app.logger.warning(
            "Cross-tenant access denied: user %s -> org %s", user_id, org_id
        )
        raise TenantAccessError("Access denied for organization")
    return membership


def switch_organization(store, user_id: int, org_id: int) -> tuple[str, Organization]:
    """
    Issue a new session token scoped to org_id.

    Stateless: nothing server-side changes. The returned token supersedes
    the caller's current one for subsequent requests.
    """
    require_membership(store, user_id, org_id)
    org = store.get_organization(org_id)
    if org is None:
        raise TenantAccessError("Access denied for organization")

    token = session_service.issue_token(user_id, org_id)
    current_app.logger.info("User %s switched to org %s", user_id, org_id)
    return token, org


def list_user_organizations(user_id: int) -> list[dict]:
    """Public fields of every organization the user is a member of."""
    rows = (
        db.session.query(Organization)
        .join(Membership, Membership.org_id == Organization.id)
        .filter(Membership.user_id == user_id)
        .order_by(Membership.id.asc())
        .all()
    )
    return [org.to_public_dict() for org in rows]
