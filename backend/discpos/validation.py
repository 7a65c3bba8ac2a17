from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any

from sqlalchemy import Integer, Numeric, String, Text
from sqlalchemy.orm import DeclarativeMeta


# Numeric(10, 2) holds at most 99,999,999.99
MAX_MONEY = Decimal("99999999.99")
CENTS = Decimal("0.01")

# INTEGER columns are 32-bit on PostgreSQL
MAX_INT = 2_147_483_647
MIN_INT = -MAX_INT - 1

_INTEGER_RE = re.compile(r"[+-]?\d+")
_DECIMAL_RE = re.compile(r"[+-]?\d*\.\d*")
_SCIENTIFIC_RE = re.compile(r"[+-]?(\d+\.?\d*|\.\d+)[eE][+-]?\d+")


class ValidationError(ValueError):
    """400-level input problem."""


class ConflictError(ValueError):
    """Duplicate unique key (e.g., an email that is already registered)."""


class NotFoundError(LookupError):
    """404-level: the referenced entity does not exist."""


@dataclass(frozen=True)
class ModelValidationPolicy:
    """
    Central policy layer:
    - writable_fields: what clients are allowed to set (security boundary)
    - required_on_create: fields required for POST
    """
    writable_fields: set[str]
    required_on_create: set[str] = None  # type: ignore


def _columns_by_key(model: DeclarativeMeta) -> dict[str, Any]:
    mapper = model.__mapper__
    return {c.key: c for c in mapper.columns}


def parse_int(value: Any, field: str) -> int:
    """
    Strict integer parsing: rejects bools, floats, decimals and scientific notation.
    The result must fit a 32-bit INTEGER column.
    """
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be an integer")
    if isinstance(value, int):
        return _check_int_range(value, field)
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            raise ValidationError(f"{field} must be an integer")
        if _SCIENTIFIC_RE.fullmatch(stripped):
            raise ValidationError(f"{field} must be a plain integer (scientific notation not allowed)")
        if _DECIMAL_RE.fullmatch(stripped):
            raise ValidationError(f"{field} must be an integer (no decimals)")
        if not _INTEGER_RE.fullmatch(stripped):
            raise ValidationError(f"{field} must be an integer")
        return _check_int_range(int(stripped), field)
    if isinstance(value, float):
        raise ValidationError(f"{field} must be an integer, not a decimal")
    raise ValidationError(f"{field} must be an integer")


def _check_int_range(value: int, field: str) -> int:
    if not MIN_INT <= value <= MAX_INT:
        raise ValidationError(f"{field} is out of range")
    return value


def parse_money(value: Any, field: str) -> Decimal:
    """Parse a currency amount into a two-place Decimal; must be >= 0."""
    if value is None or isinstance(value, bool):
        raise ValidationError(f"{field} must be a number")
    if isinstance(value, str) and not value.strip():
        raise ValidationError(f"{field} must be a number")
    try:
        amount = Decimal(str(value).strip())
    except InvalidOperation:
        raise ValidationError(f"{field} must be a number")
    if not amount.is_finite():
        raise ValidationError(f"{field} must be a number")
    if amount < 0:
        raise ValidationError(f"{field} must be >= 0")
    if amount > MAX_MONEY:
        raise ValidationError(f"{field} cannot exceed {MAX_MONEY}")
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


def _coerce_value(col, value: Any):
    coltype = col.type

    if value is None:
        return None

    if isinstance(coltype, Integer):
        return parse_int(value, col.key)

    # Currency columns
    if isinstance(coltype, Numeric):
        return parse_money(value, col.key)

    # Strings / Text
    if isinstance(coltype, (String, Text)):
        return str(value).strip()

    # Default: leave as-is
    return value


def validate_payload(
    *,
    model: DeclarativeMeta,
    payload: dict,
    policy: ModelValidationPolicy,
    partial: bool,
) -> dict:
    """
    Validates + normalizes incoming JSON against:
    - SQLAlchemy column metadata (nullable, type, String length)
    - a policy allowlist (writable_fields)
    - required_on_create (if partial=False)
    Returns a cleaned patch dict with only writable fields.

    Keys outside the allowlist are dropped rather than rejected, so clients
    can post whole objects back (ids, timestamps) without tripping validation.
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    required = policy.required_on_create or set()
    if not partial:
        missing = sorted(f for f in required if payload.get(f) in (None, ""))
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    cols = _columns_by_key(model)
    patch: dict = {}

    for k, raw in payload.items():
        if k not in policy.writable_fields or k not in cols:
            continue
        col = cols[k]

        # NULL handling
        if raw is None:
            if not col.nullable and col.default is None:
                raise ValidationError(f"{k} cannot be null")
            continue

        val = _coerce_value(col, raw)

        # Blank string check for non-nullable text fields
        if isinstance(col.type, (String, Text)) and not col.nullable:
            if isinstance(val, str) and val == "":
                raise ValidationError(f"{k} cannot be blank")

        # Max length check for String(n)
        if isinstance(col.type, String) and col.type.length and isinstance(val, str):
            if len(val) > col.type.length:
                raise ValidationError(f"{k} exceeds max length {col.type.length}")

        patch[k] = val

    return patch


def require_fields(payload: dict | None, *fields: str) -> dict:
    """
    Pull the named string fields out of a JSON body, stripped.
    Raises ValidationError when any of them is missing or blank.
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    values = {}
    for field in fields:
        raw = payload.get(field)
        if raw is None or (isinstance(raw, str) and not raw.strip()):
            raise ValidationError("All fields are required")
        if not isinstance(raw, str):
            raise ValidationError(f"{field} must be a string")
        value = raw.strip()
        values[field] = value
    return values


def enforce_rules_stock(stock: int) -> None:
    if stock < 0:
        raise ValidationError("stock must be >= 0")
