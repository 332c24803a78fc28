from __future__ import annotations
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
import re

from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import String, Text, DateTime
from sqlalchemy.orm import DeclarativeMeta

from runway.models.ledger import INCOME, EXPENSE
from runway.time_utils import parse_iso_datetime


TRANSACTION_TYPES = (INCOME, EXPENSE)

DESCRIPTION_MIN_LENGTH = 2
PASSWORD_MIN_LENGTH = 6
ORGANIZATION_NAME_MIN_LENGTH = 2

# Whole-unit ceiling; also the largest value a 32-bit INTEGER column holds
MAX_AMOUNT = 2_147_483_647

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_CURRENCY_RE = re.compile(r"^[A-Za-z]{3,4}$")


class ValidationError(ValueError):
    """400-level input problem."""

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.field = field

    def to_dict(self) -> dict:
        return {"error": str(self), "field": self.field}


class ConflictError(ValueError):
    """409-level business rule conflict (e.g., duplicate email)."""


@dataclass(frozen=True)
class ModelValidationPolicy:
    """
    Central policy layer:
    - writable_fields: what clients are allowed to set (security boundary)
    - required_on_create: fields required for POST
    - rounded_fields: Integer columns that accept any finite number and
      store it rounded half-up to a whole unit
    """
    writable_fields: set[str]
    required_on_create: set[str] = field(default_factory=set)
    rounded_fields: set[str] = field(default_factory=set)


TRANSACTION_POLICY = ModelValidationPolicy(
    writable_fields={"description", "amount", "type", "currency", "occurred_at"},
    required_on_create={"description", "amount", "type"},
    rounded_fields={"amount"},
)


def _columns_by_key(model: DeclarativeMeta) -> dict[str, Any]:
    mapper = model.__mapper__
    return {c.key: c for c in mapper.columns}


def _round_whole(key: str, value: Any) -> int:
    # bool is an int subclass; never a valid amount
    if isinstance(value, bool):
        raise ValidationError(f"{key} must be a number", field=key)
    if isinstance(value, (int, float)):
        number = Decimal(str(value))
    elif isinstance(value, str):
        try:
            number = Decimal(value.strip())
        except InvalidOperation:
            raise ValidationError(f"{key} must be a number", field=key)
    else:
        raise ValidationError(f"{key} must be a number", field=key)

    if not number.is_finite():
        raise ValidationError(f"{key} must be a finite number", field=key)
    if abs(number) > MAX_AMOUNT:
        raise ValidationError(f"{key} cannot exceed {MAX_AMOUNT:,}", field=key)
    return int(number.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _coerce_value(col, value: Any, policy: ModelValidationPolicy):
    coltype = col.type

    if value is None:
        return None

    if col.key in policy.rounded_fields:
        return _round_whole(col.key, value)

    # Datetimes (accept ISO-8601 strings; normalize to UTC)
    if isinstance(coltype, DateTime):
        if isinstance(value, str):
            try:
                dt = parse_iso_datetime(value)
            except ValueError:
                raise ValidationError(f"{col.key} must be an ISO-8601 datetime", field=col.key)
            if dt is None:
                raise ValidationError(f"{col.key} must be an ISO-8601 datetime", field=col.key)
            return dt
        raise ValidationError(f"{col.key} must be a datetime", field=col.key)

    # Strings / Text
    if isinstance(coltype, (String, Text)):
        if not isinstance(value, str):
            raise ValidationError(f"{col.key} must be a string", field=col.key)
        return value.strip()

    # Default: leave as-is
    return value


def validate_payload(
    *,
    model: DeclarativeMeta,
    payload: dict,
    policy: ModelValidationPolicy,
) -> dict:
    """
    Validates + normalizes incoming JSON against:
    - SQLAlchemy column metadata (nullable, type, String length)
    - a policy allowlist (writable_fields)
    - required_on_create
    Returns a cleaned patch dict with only writable fields.
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    missing = sorted(f for f in policy.required_on_create if f not in payload)
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}", field=missing[0])

    cols = _columns_by_key(model)

    # Reject unknown / non-writable fields
    for k in payload.keys():
        if k not in policy.writable_fields:
            raise ValidationError(f"Field not allowed: {k}", field=k)
        if k not in cols:
            raise ValidationError(f"Unknown field: {k}", field=k)

    patch: dict = {}

    for k, raw in payload.items():
        col = cols[k]

        # Optional fields may be sent as null to mean "use the default"
        if raw is None:
            if k in policy.required_on_create:
                raise ValidationError(f"{k} cannot be null", field=k)
            continue

        val = _coerce_value(col, raw, policy)

        # Blank string check for non-nullable text fields
        if isinstance(col.type, (String, Text)) and not col.nullable:
            if isinstance(val, str) and val == "":
                raise ValidationError(f"{k} cannot be blank", field=k)

        # Max length check for String(n)
        if isinstance(col.type, String) and col.type.length and isinstance(val, str):
            if len(val) > col.type.length:
                raise ValidationError(f"{k} exceeds max length {col.type.length}", field=k)

        patch[k] = val

    return patch


def enforce_rules_transaction(patch: dict) -> None:
    """
    Business rules that are not captured by SQLAlchemy metadata alone.
    Keep these small and centralized.
    """
    description = patch.get("description")
    if description is not None and len(description) < DESCRIPTION_MIN_LENGTH:
        raise ValidationError(
            f"description must be at least {DESCRIPTION_MIN_LENGTH} characters",
            field="description",
        )

    # Rounded amounts below one whole unit would be stored as zero
    if "amount" in patch and patch["amount"] < 1:
        raise ValidationError("amount must be a positive number", field="amount")
    if "amount" in patch and patch["amount"] > MAX_AMOUNT:
        raise ValidationError(f"amount cannot exceed {MAX_AMOUNT:,}", field="amount")

    if "type" in patch and patch["type"] not in TRANSACTION_TYPES:
        raise ValidationError(
            f"type must be one of: {', '.join(TRANSACTION_TYPES)}",
            field="type",
        )

    if "currency" in patch:
        patch["currency"] = normalize_currency(patch["currency"])


def normalize_currency(value: str) -> str:
    if not isinstance(value, str) or not _CURRENCY_RE.match(value.strip()):
        raise ValidationError("currency must be a 3-4 letter code", field="currency")
    return value.strip().upper()


def validate_signup_payload(payload: dict | None) -> tuple[str, str, str]:
    """Returns (email, password, organization_name) or raises ValidationError."""
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    email = payload.get("email")
    password = payload.get("password")
    organization_name = payload.get("organization_name")

    if not isinstance(email, str) or not _EMAIL_RE.match(email.strip()):
        raise ValidationError("email must be a valid email address", field="email")
    validate_password(password)
    if not isinstance(organization_name, str) or len(organization_name.strip()) < ORGANIZATION_NAME_MIN_LENGTH:
        raise ValidationError(
            f"organization_name must be at least {ORGANIZATION_NAME_MIN_LENGTH} characters",
            field="organization_name",
        )

    return email.strip().lower(), password, organization_name.strip()


def validate_password(password: Any) -> None:
    if not isinstance(password, str) or len(password) < PASSWORD_MIN_LENGTH:
        raise ValidationError(
            f"password must be at least {PASSWORD_MIN_LENGTH} characters",
            field="password",
        )
