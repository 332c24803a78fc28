# Overview: Flask API routes for the transaction ledger; parses input and returns JSON or PDF responses.

"""
Time semantics:
- API accepts ISO-8601 datetimes with Z/offsets; backend normalizes to UTC-naive internally.
- Export range filtering is inclusive on both ends: from <= occurred_at <= to.
"""

from flask import Blueprint, Response, request, jsonify, current_app

from ..decorators import require_auth
from ..services import export_service, transaction_service
from ..services.ledger_store import StoreError, current_store
from ..services.tenant_service import TenantAccessError, get_current_org_id
from ..validation import ValidationError


transactions_bp = Blueprint("transactions", __name__, url_prefix="/api/v1/transactions")


@transactions_bp.get("")
@require_auth
def list_transactions_route():
    limit = request.args.get("limit", default=transaction_service.DEFAULT_LIST_LIMIT, type=int)
    try:
        rows = transaction_service.list_transactions(current_store(), get_current_org_id(), limit=limit)
        return jsonify([r.to_dict() for r in rows]), 200

    except StoreError:
        current_app.logger.exception("Store failure listing transactions")
        return jsonify({"error": "Internal server error"}), 500


@transactions_bp.post("")
@require_auth
def create_transaction_route():
    """
    Record an income or expense.

    Body: description, amount, type, optional occurred_at and currency.
    """
    try:
        payload = request.get_json(silent=True)
        if payload is None:
            return jsonify({"error": "Invalid JSON payload", "field": None}), 400

        txn = transaction_service.create_transaction(current_store(), get_current_org_id(), payload)
        return jsonify(txn.to_dict()), 201

    except ValidationError as e:
        return jsonify(e.to_dict()), 400
    except TenantAccessError as e:
        return jsonify({"error": str(e)}), 403
    except StoreError:
        current_app.logger.exception("Store failure creating transaction")
        return jsonify({"error": "Internal server error"}), 500


@transactions_bp.get("/export")
@require_auth
def export_transactions_route():
    """
    Download the ledger as PDF.

    Query: from, to (ISO-8601, both optional, inclusive).
    """
    try:
        start, end = export_service.parse_export_range(
            request.args.get("from"),
            request.args.get("to"),
        )
        document = export_service.export_transactions(current_store(), get_current_org_id(), start, end)

    except ValidationError as e:
        return jsonify(e.to_dict()), 400
    except TenantAccessError as e:
        return jsonify({"error": str(e)}), 403
    except StoreError:
        current_app.logger.exception("Store failure exporting transactions")
        return jsonify({"error": "Internal server error"}), 500

    return Response(
        document,
        mimetype="application/pdf",
        headers={"Content-Disposition": 'attachment; filename="transactions.pdf"'},
    )
