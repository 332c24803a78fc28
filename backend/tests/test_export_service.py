# Overview: Pytest coverage for the PDF transaction export.

from datetime import datetime

import pytest
from reportlab.platypus import Paragraph, Table

from conftest import txn
from runway.models.ledger import EXPENSE, INCOME
from runway.services import export_service
from runway.services.export_service import (
    EMPTY_MESSAGE,
    build_export_rows,
    build_story,
    format_money,
    parse_export_range,
    signed_amount,
)
from runway.services.ledger_store import StoreError
from runway.validation import ValidationError


class TestFormatting:
    def test_signed_amount(self):
        assert signed_amount(txn(52000, EXPENSE, datetime(2026, 10, 1))) == -52000
        assert signed_amount(txn(150000, INCOME, datetime(2026, 10, 1))) == 150000

    def test_format_money(self):
        assert format_money(150000, "USD") == "$150,000"
        assert format_money(-52000, "CAD") == "-CA$52,000"

    def test_unknown_currency_falls_back_to_usd(self):
        assert format_money(1000, "ZZZZ") == "$1,000"
        assert format_money(1000, None) == "$1,000"

    def test_export_rows(self):
        rows = build_export_rows([
            txn(150000, INCOME, datetime(2026, 9, 8, 9, 30), description="Seed round funding"),
            txn(8000, EXPENSE, datetime(2026, 10, 5), description="Office rent"),
        ])

        assert rows == [
            ("Seed round funding", "INCOME", "CAD", "CA$150,000", "Tue Sep 08 2026"),
            ("Office rent", "EXPENSE", "CAD", "-CA$8,000", "Mon Oct 05 2026"),
        ]


class TestExportRange:
    def test_open_range(self):
        assert parse_export_range(None, "") == (None, None)

    def test_parses_both_bounds(self):
        start, end = parse_export_range("2026-09-01T00:00:00Z", "2026-09-30")
        assert start == datetime(2026, 9, 1)
        assert end == datetime(2026, 9, 30)

    @pytest.mark.parametrize("start_raw,end_raw,field", [
        ("last week", None, "from"),
        (None, "2026-13-01", "to"),
    ])
    def test_bad_bound(self, start_raw, end_raw, field):
        with pytest.raises(ValidationError) as exc:
            parse_export_range(start_raw, end_raw)
        assert exc.value.field == field


class TestStory:
    def test_empty_selection_has_message(self):
        story = build_story("Acme Corp transaction report", [], start=datetime(2027, 1, 1))

        texts = [item.getPlainText() for item in story if isinstance(item, Paragraph)]
        assert EMPTY_MESSAGE in texts
        assert "Range: Fri Jan 01 2027 -> Any" in texts
        assert not any(isinstance(item, Table) for item in story)

    def test_rows_render_as_table_with_header(self):
        rows = [("Office rent", "EXPENSE", "CAD", "-CA$8,000", "Mon Oct 05 2026")]

        story = build_story("Acme Corp transaction report", rows)

        tables = [item for item in story if isinstance(item, Table)]
        assert len(tables) == 1
        assert tables[0].repeatRows == 1


class TestExportTransactions:
    """Document rendering against the in-memory store."""

    def test_renders_pdf(self, memory_store):
        memory_store.create_transaction({
            "org_id": 1, "description": "Seed <round>", "amount": 150000,
            "type": INCOME, "currency": "CAD", "occurred_at": datetime(2026, 9, 8),
        })

        document = export_service.export_transactions(memory_store, 1)

        assert document.startswith(b"%PDF")

    def test_range_after_all_transactions_still_renders(self, memory_store):
        memory_store.create_transaction({
            "org_id": 1, "description": "Rent", "amount": 800,
            "type": EXPENSE, "currency": "CAD", "occurred_at": datetime(2026, 9, 8),
        })

        document = export_service.export_transactions(memory_store, 1, start=datetime(2027, 1, 1))

        assert document.startswith(b"%PDF")
        assert len(document) > 500

    def test_never_writes(self, memory_store):
        export_service.export_transactions(memory_store, 1)

        assert memory_store.transactions == []
        assert memory_store.summary_writes == 0

    def test_store_failure_propagates(self, memory_store):
        memory_store.fail_on = "find_transactions"

        with pytest.raises(StoreError):
            export_service.export_transactions(memory_store, 1)


class TestExportRoute:
    def test_download(self, client, headers_a):
        client.post("/api/v1/transactions", headers=headers_a, json={
            "description": "Office rent", "amount": 8000, "type": "EXPENSE",
        })

        resp = client.get("/api/v1/transactions/export", headers=headers_a)

        assert resp.status_code == 200
        assert resp.mimetype == "application/pdf"
        assert resp.headers["Content-Disposition"] == 'attachment; filename="transactions.pdf"'
        assert resp.data.startswith(b"%PDF")

    def test_empty_range_is_not_an_error(self, client, headers_a):
        resp = client.get("/api/v1/transactions/export?from=2099-01-01T00:00:00Z", headers=headers_a)

        assert resp.status_code == 200
        assert resp.data.startswith(b"%PDF")

    def test_bad_from(self, client, headers_a):
        resp = client.get("/api/v1/transactions/export?from=soon", headers=headers_a)

        assert resp.status_code == 400
        assert resp.json["field"] == "from"

    def test_requires_token(self, client):
        assert client.get("/api/v1/transactions/export").status_code == 401
