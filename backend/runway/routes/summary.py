# Overview: Flask API route for the cash-flow summary.

from flask import Blueprint, jsonify, current_app

from ..decorators import require_auth
from ..services import summary_service
from ..services.ledger_store import StoreError, current_store
from ..services.tenant_service import TenantAccessError, get_current_org_id


summary_bp = Blueprint("summary", __name__, url_prefix="/api/v1/summary")


@summary_bp.get("")
@require_auth
def summary_route():
    """
    Recompute the summary from the full ledger, refresh the cached row and
    return it. Never serves a stale cache.
    """
    try:
        summary = summary_service.compute_summary(current_store(), get_current_org_id())
        return jsonify(summary), 200

    except TenantAccessError as e:
        return jsonify({"error": str(e)}), 403
    except StoreError:
        current_app.logger.exception("Store failure computing summary")
        return jsonify({"error": "Internal server error"}), 500
