# Overview: Flask API routes for organizations and session scoping.

from flask import Blueprint, request, jsonify, current_app, g

from ..decorators import require_auth
from ..services import tenant_service
from ..services.ledger_store import StoreError, current_store
from ..services.tenant_service import TenantAccessError


organizations_bp = Blueprint("organizations", __name__, url_prefix="/api/v1")


@organizations_bp.get("/organizations")
@require_auth
def list_organizations_route():
    return jsonify(tenant_service.list_user_organizations(g.current_user.id)), 200


@organizations_bp.post("/session/organization")
@require_auth
def switch_organization_route():
    """
    Re-scope the session to another organization the user belongs to.

    Returns a new token; the caller replaces its current one. 403 when the
    user is not a member.
    """
    data = request.get_json(silent=True) or {}
    org_id = data.get("organization_id")
    if isinstance(org_id, str) and org_id.strip().isdigit():
        org_id = int(org_id.strip())
    if not isinstance(org_id, int) or isinstance(org_id, bool):
        return jsonify({"error": "organization_id is required", "field": "organization_id"}), 400

    try:
        token, org = tenant_service.switch_organization(current_store(), g.current_user.id, org_id)
        return jsonify({"token": token, "organization": org.to_dict()}), 200

    except TenantAccessError as e:
        return jsonify({"error": str(e)}), 403
    except StoreError:
        current_app.logger.exception("Store failure switching organization")
        return jsonify({"error": "Internal server error"}), 500
