# Overview: Transaction export; selects an organization's ledger and renders it as PDF.

"""
Export Service

A read-only projection of the ledger:

- select: org-scoped, inclusive [start, end] on occurred_at, ascending
- rows: description, type, currency, signed amount, calendar date
- render: reportlab document with a repeating header row; an empty
  selection still renders a complete document with an explicit message
"""

from __future__ import annotations

from datetime import datetime
from io import BytesIO
from typing import Iterable
from xml.sax.saxutils import escape

from babel.numbers import format_currency, is_currency
from flask import current_app
from reportlab.lib import colors
from reportlab.lib.pagesizes import LETTER
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle

from ..models.ledger import EXPENSE
from ..validation import ValidationError
from .ledger_store import LedgerStore
from .tenant_service import TenantAccessError
from runway.time_utils import parse_iso_datetime, report_date


EMPTY_MESSAGE = "No transactions found for the selected filters."
FALLBACK_CURRENCY = "USD"
FALLBACK_TITLE = "Runway"
MONEY_FORMAT = "¤#,##0"

HEADER_ROW = ("Description", "Type", "Currency", "Amount", "Date")
COLUMN_WIDTHS = (200, 62, 62, 100, 108)
PAGE_MARGIN = 40


def format_money(value: int, currency: str | None, locale: str = "en_US") -> str:
    """
    Locale-aware currency string with no fractional digits.

    Codes Babel does not know fall back to USD formatting.
    """
    code = (currency or "").strip().upper()
    if not is_currency(code):
        code = FALLBACK_CURRENCY
    return format_currency(
        value,
        code,
        format=MONEY_FORMAT,
        locale=locale,
        currency_digits=False,
    )


def signed_amount(txn) -> int:
    """Amounts are stored positive; EXPENSE reads as negative."""
    return -txn.amount if txn.type == EXPENSE else txn.amount


def parse_export_range(start_raw: str | None, end_raw: str | None) -> tuple[datetime | None, datetime | None]:
    try:
        start = parse_iso_datetime(start_raw)
    except ValueError:
        raise ValidationError("from must be an ISO-8601 datetime", field="from")
    try:
        end = parse_iso_datetime(end_raw)
    except ValueError:
        raise ValidationError("to must be an ISO-8601 datetime", field="to")
    return start, end


def build_export_rows(transactions: Iterable, locale: str = "en_US") -> list[tuple[str, str, str, str, str]]:
    """One display row per transaction; EXPENSE amounts are shown negative."""
    return [
        (
            txn.description,
            txn.type,
            txn.currency,
            format_money(signed_amount(txn), txn.currency, locale),
            report_date(txn.occurred_at),
        )
        for txn in transactions
    ]


def _range_line(start: datetime | None, end: datetime | None) -> str | None:
    if start is None and end is None:
        return None
    start_label = report_date(start) if start else "Any"
    end_label = report_date(end) if end else "Any"
    return f"Range: {start_label} -> {end_label}"


def build_story(
    title: str,
    rows: list[tuple],
    start: datetime | None = None,
    end: datetime | None = None,
) -> list:
    styles = getSampleStyleSheet()
    title_style = ParagraphStyle("title", parent=styles["Title"], fontSize=18)
    normal = styles["Normal"]
    cell = ParagraphStyle("cell", parent=normal, fontSize=9, leading=11)

    story = [Paragraph(escape(title), title_style), Spacer(1, 6)]

    range_line = _range_line(start, end)
    if range_line:
        story.append(Paragraph(escape(range_line), normal))
        story.append(Spacer(1, 6))

    if not rows:
        story.append(Paragraph(EMPTY_MESSAGE, normal))
        return story

    data = [list(HEADER_ROW)]
    for description, txn_type, currency, amount, date_label in rows:
        data.append([Paragraph(escape(description), cell), txn_type, currency, amount, date_label])

    table = Table(data, colWidths=list(COLUMN_WIDTHS), repeatRows=1, hAlign="LEFT")
    table.setStyle(TableStyle([
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, -1), 9),
        ("LINEBELOW", (0, 0), (-1, 0), 0.75, colors.black),
        ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#f0f0f0")),
        ("ALIGN", (3, 1), (3, -1), "RIGHT"),
        ("VALIGN", (0, 0), (-1, -1), "TOP"),
    ]))
    story.append(table)
    return story


def render_transactions_pdf(
    title: str,
    rows: list[tuple],
    start: datetime | None = None,
    end: datetime | None = None,
) -> bytes:
    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=LETTER,
        leftMargin=PAGE_MARGIN,
        rightMargin=PAGE_MARGIN,
        topMargin=PAGE_MARGIN,
        bottomMargin=PAGE_MARGIN,
        title=title,
    )
    doc.build(build_story(title, rows, start, end))
    return buffer.getvalue()


def export_transactions(
    store: LedgerStore,
    org_id: int,
    start: datetime | None = None,
    end: datetime | None = None,
) -> bytes:
    """
    Render the organization's transactions in [start, end] as PDF bytes.

    Never writes to the store.
    """
    org = store.get_organization(org_id)
    if org is None:
        raise TenantAccessError("Organization not found")

    transactions = store.find_transactions(org_id, start=start, end=end)
    locale = current_app.config.get("EXPORT_LOCALE", "en_US")
    rows = build_export_rows(transactions, locale)

    title = f"{org.name or FALLBACK_TITLE} transaction report"
    current_app.logger.info("Exporting %s transactions for org %s", len(rows), org_id)
    return render_transactions_pdf(title, rows, start, end)
