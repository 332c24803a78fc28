# Overview: Cash-flow summary computation and the write-through summary cache.

"""
Summary Service

calculate_summary is a pure function over an organization's transactions:

- cash_on_hand: all-time net (INCOME adds, EXPENSE subtracts)
- monthly_burn: EXPENSE total with occurred_at >= now minus one calendar
  month (inclusive lower bound, day clamped to the end of the target month)
- runway_months: cash_on_hand / monthly_burn, rounded half-up to one
  decimal; exactly 0 when monthly_burn is 0

compute_summary recomputes from the full transaction set and upserts the
cached Summary row on every call. The cached row is never returned stale.
"""

from __future__ import annotations

from dataclasses import dataclass, asdict
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable

from flask import current_app

from ..models.ledger import EXPENSE, INCOME
from .ledger_store import LedgerStore
from .tenant_service import TenantAccessError
from runway.time_utils import months_before, to_utc_z, utcnow


@dataclass(frozen=True)
class SummaryFigures:
    cash_on_hand: int
    monthly_burn: int
    runway_months: float

    def as_values(self) -> dict:
        return asdict(self)


def burn_window_start(now: datetime) -> datetime:
    return months_before(now, 1)


def runway(cash_on_hand: int, monthly_burn: int) -> float:
    if monthly_burn == 0:
        return 0.0
    ratio = Decimal(cash_on_hand) / Decimal(monthly_burn)
    return float(ratio.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def calculate_summary(transactions: Iterable, now: datetime) -> SummaryFigures:
    window_start = burn_window_start(now)

    cash_on_hand = 0
    monthly_burn = 0
    for txn in transactions:
        if txn.type == INCOME:
            cash_on_hand += txn.amount
        elif txn.type == EXPENSE:
            cash_on_hand -= txn.amount
            if txn.occurred_at >= window_start:
                monthly_burn += txn.amount

    return SummaryFigures(
        cash_on_hand=cash_on_hand,
        monthly_burn=monthly_burn,
        runway_months=runway(cash_on_hand, monthly_burn),
    )


def compute_summary(store: LedgerStore, org_id: int, now: datetime | None = None) -> dict:
    """
    Recompute, cache and return the organization's summary.

    Raises TenantAccessError if the organization does not exist and
    StoreError if the store fails.
    """
    org = store.get_organization(org_id)
    if org is None:
        raise TenantAccessError("Organization not found")

    now = now or utcnow()
    figures = calculate_summary(store.find_transactions(org_id), now)
    record = store.upsert_summary(org_id, figures.as_values())

    current_app.logger.debug(
        "Summary recomputed for org %s: cash=%s burn=%s runway=%s",
        org_id, record.cash_on_hand, record.monthly_burn, record.runway_months,
    )

    return {
        "cash_on_hand": record.cash_on_hand,
        "monthly_burn": record.monthly_burn,
        "runway_months": record.runway_months,
        "currency": org.default_currency,
        "updated_at": to_utc_z(record.updated_at),
    }
