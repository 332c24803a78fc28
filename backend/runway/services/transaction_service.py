# Overview: Service-layer operations for the transaction ledger.

from __future__ import annotations

from ..models import Transaction
from ..validation import (
    TRANSACTION_POLICY,
    enforce_rules_transaction,
    validate_payload,
)
from .ledger_store import LedgerStore
from .tenant_service import TenantAccessError
from runway.time_utils import utcnow


DEFAULT_LIST_LIMIT = 100
MAX_LIST_LIMIT = 500


def create_transaction(store: LedgerStore, org_id: int, payload: dict | None) -> Transaction:
    """
    Validate input and append one immutable transaction to the org's ledger.

    - amount is rounded half-up to a whole unit and must end up >= 1
    - occurred_at defaults to now, currency to the org's default currency

    Raises ValidationError (nothing persisted), TenantAccessError, StoreError.
    """
    patch = validate_payload(
        model=Transaction,
        payload=payload,
        policy=TRANSACTION_POLICY,
    )
    enforce_rules_transaction(patch)

    org = store.get_organization(org_id)
    if org is None:
        raise TenantAccessError("Organization not found")

    record = {
        "org_id": org_id,
        "description": patch["description"],
        "amount": patch["amount"],
        "type": patch["type"],
        "currency": patch.get("currency") or org.default_currency.upper(),
        "occurred_at": patch.get("occurred_at") or utcnow(),
    }
    return store.create_transaction(record)


def list_transactions(store: LedgerStore, org_id: int, limit: int = DEFAULT_LIST_LIMIT) -> list[Transaction]:
    """Newest first, capped at limit (clamped to 1..MAX_LIST_LIMIT)."""
    limit = max(1, min(limit, MAX_LIST_LIMIT))
    return store.find_transactions(org_id, newest_first=True, limit=limit)
