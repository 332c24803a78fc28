# Overview: Store handle for organizations, memberships, transactions and the summary cache.

"""
Ledger Store

Every core operation receives a store explicitly instead of reaching for the
global db session. The application factory opens one SqlLedgerStore and
attaches it to the app (see current_store); tests may pass any object that
implements the LedgerStore contract.

Invariants:
- Every read and write is keyed by org_id.
- Transactions are append-only: there is no update or delete.
- upsert_summary is a single-row atomic upsert keyed by org_id (last writer wins).
- Store I/O failures are rolled back and raised as StoreError. No retries.
"""

from __future__ import annotations

from datetime import datetime
from typing import Iterable

from flask import current_app
from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError

from ..models import Membership, Organization, Summary, Transaction
from runway.time_utils import utcnow


SUMMARY_FIELDS = ("cash_on_hand", "monthly_burn", "runway_months")


class StoreError(Exception):
    """Raised when the relational store fails; surfaced as an internal error."""
    pass


class LedgerStore:
    """Read/write contract consumed by the summary, transaction and export services."""

    def get_organization(self, org_id: int):
        raise NotImplementedError

    def find_membership(self, user_id: int, org_id: int):
        raise NotImplementedError

    def find_transactions(
        self,
        org_id: int,
        *,
        start: datetime | None = None,
        end: datetime | None = None,
        newest_first: bool = False,
        limit: int | None = None,
    ) -> list:
        raise NotImplementedError

    def create_transaction(self, record: dict):
        raise NotImplementedError

    def create_transactions(self, records: Iterable[dict]) -> list:
        return [self.create_transaction(record) for record in records]

    def upsert_summary(self, org_id: int, values: dict):
        raise NotImplementedError


class SqlLedgerStore(LedgerStore):
    """LedgerStore backed by a SQLAlchemy (scoped) session."""

    def __init__(self, session):
        self.session = session

    def get_organization(self, org_id: int) -> Organization | None:
        try:
            return self.session.get(Organization, org_id)
        except SQLAlchemyError as exc:
            self._fail("load organization", exc)

    def find_membership(self, user_id: int, org_id: int) -> Membership | None:
        try:
            return self.session.query(Membership).filter_by(
                user_id=user_id,
                org_id=org_id,
            ).first()
        except SQLAlchemyError as exc:
            self._fail("load membership", exc)

    def find_transactions(
        self,
        org_id: int,
        *,
        start: datetime | None = None,
        end: datetime | None = None,
        newest_first: bool = False,
        limit: int | None = None,
    ) -> list[Transaction]:
        """
        Transactions for one organization, ordered by occurred_at.

        start/end are inclusive; either may be None for an open bound.
        Ties on occurred_at are broken by id so the order is stable.
        """
        q = self.session.query(Transaction).filter(Transaction.org_id == org_id)

        if start is not None:
            q = q.filter(Transaction.occurred_at >= start)
        if end is not None:
            q = q.filter(Transaction.occurred_at <= end)

        if newest_first:
            q = q.order_by(Transaction.occurred_at.desc(), Transaction.id.desc())
        else:
            q = q.order_by(Transaction.occurred_at.asc(), Transaction.id.asc())

        if limit is not None:
            q = q.limit(limit)

        try:
            return q.all()
        except SQLAlchemyError as exc:
            self._fail("load transactions", exc)

    def create_transaction(self, record: dict) -> Transaction:
        return self.create_transactions([record])[0]

    def create_transactions(self, records: Iterable[dict]) -> list[Transaction]:
        rows = [Transaction(**record) for record in records]
        try:
            self.session.add_all(rows)
            self.session.commit()
        except SQLAlchemyError as exc:
            self._fail("create transaction", exc)
        return rows

    def upsert_summary(self, org_id: int, values: dict) -> Summary:
        row = {key: values[key] for key in SUMMARY_FIELDS}
        row["org_id"] = org_id
        row["updated_at"] = utcnow()

        try:
            dialect = self.session.get_bind().dialect.name
            if dialect in ("sqlite", "postgresql"):
                insert = sqlite_insert if dialect == "sqlite" else pg_insert
                stmt = insert(Summary).values(**row)
                stmt = stmt.on_conflict_do_update(
                    index_elements=[Summary.org_id],
                    set_={
                        key: stmt.excluded[key]
                        for key in SUMMARY_FIELDS + ("updated_at",)
                    },
                )
                self.session.execute(stmt)
            else:
                self._upsert_summary_locked(org_id, row)
            self.session.commit()

            return self.session.execute(
                select(Summary).filter_by(org_id=org_id)
            ).scalar_one()
        except SQLAlchemyError as exc:
            self._fail("upsert summary", exc)

    def _upsert_summary_locked(self, org_id: int, row: dict) -> None:
        # Dialects without ON CONFLICT: lock the row, then update or insert.
        summary = (
            self.session.query(Summary)
            .filter_by(org_id=org_id)
            .with_for_update()
            .first()
        )
        if summary is None:
            self.session.add(Summary(**row))
            return
        for key in SUMMARY_FIELDS + ("updated_at",):
            setattr(summary, key, row[key])

    def _fail(self, action: str, exc: SQLAlchemyError):
        self.session.rollback()
        raise StoreError(f"Failed to {action}") from exc


def current_store() -> LedgerStore:
    """The store opened by the application factory for this app."""
    return current_app.extensions["ledger_store"]
