"""Domain validation helpers for balance sheet input."""

from collections.abc import Mapping
from decimal import Decimal
from typing import Any

from src.domain.constants import (
    ASSET_TYPES,
    LIABILITY_TYPES,
    MAX_INTEREST_RATE,
    RECURRENCE_FREQUENCIES,
    TRANSACTION_TYPES,
)
from src.domain.errors import ValidationError
from src.utils.date_utils import coerce_date
from src.utils.decimal_utils import parse_decimal


ASSET_FIELDS = (
    "name",
    "type",
    "current_value",
    "currency",
    "description",
)

LIABILITY_FIELDS = (
    "name",
    "type",
    "current_balance",
    "interest_rate",
    "currency",
    "description",
    "due_date",
    "minimum_payment",
)

RECURRING_FIELDS = (
    "type",
    "category",
    "amount",
    "frequency",
    "start_date",
    "end_date",
    "description",
    "is_active",
)

_FIELD_ALIASES = {
    "asset_type": "type",
    "liability_type": "type",
    "transaction_type": "type",
}


def validate_asset_fields(
    fields: Mapping[str, Any],
    *,
    partial: bool = False,
) -> dict[str, Any]:
    """Validate asset input and return a normalized store row.

    Args:
        fields: Raw asset fields supplied by the caller.
        partial: When True only the provided fields are checked.

    Returns:
        dict[str, Any]: Normalized values keyed by store column.

    Raises:
        ValidationError: If a field is missing, unknown, or out of range.
    """
    values = _normalize_keys(fields, ASSET_FIELDS, "asset")
    row: dict[str, Any] = {}

    if "name" in values or not partial:
        row["name"] = _require_name(values.get("name"), "Asset")
    if "type" in values or not partial:
        row["type"] = _require_choice(
            values.get("type"),
            ASSET_TYPES,
            "Invalid asset type",
            "INVALID_TYPE",
        )
    if "current_value" in values or not partial:
        row["current_value"] = _require_non_negative(
            values.get("current_value"),
            "Asset value cannot be negative",
            "INVALID_VALUE",
        )
    if "currency" in values:
        row["currency"] = _normalize_currency(values["currency"])
    if "description" in values:
        row["description"] = values["description"]
    if partial and not row:
        raise ValidationError("No asset fields to update", "EMPTY_UPDATE")
    return row


def validate_liability_fields(
    fields: Mapping[str, Any],
    *,
    partial: bool = False,
) -> dict[str, Any]:
    """Validate liability input and return a normalized store row.

    Args:
        fields: Raw liability fields supplied by the caller.
        partial: When True only the provided fields are checked.

    Returns:
        dict[str, Any]: Normalized values keyed by store column.

    Raises:
        ValidationError: If a field is missing, unknown, or out of range.
    """
    values = _normalize_keys(fields, LIABILITY_FIELDS, "liability")
    row: dict[str, Any] = {}

    if "name" in values or not partial:
        row["name"] = _require_name(values.get("name"), "Liability")
    if "type" in values or not partial:
        row["type"] = _require_choice(
            values.get("type"),
            LIABILITY_TYPES,
            "Invalid liability type",
            "INVALID_TYPE",
        )
    if "current_balance" in values or not partial:
        row["current_balance"] = _require_non_negative(
            values.get("current_balance"),
            "Liability balance cannot be negative",
            "INVALID_BALANCE",
        )
    if values.get("interest_rate") is not None:
        rate = parse_decimal(values["interest_rate"])
        if rate is None or rate < 0 or rate > MAX_INTEREST_RATE:
            raise ValidationError(
                "Interest rate must be between 0 and 100",
                "INVALID_INTEREST_RATE",
            )
        row["interest_rate"] = rate
    elif "interest_rate" in values:
        row["interest_rate"] = None
    if values.get("minimum_payment") is not None:
        row["minimum_payment"] = _require_non_negative(
            values["minimum_payment"],
            "Minimum payment cannot be negative",
            "INVALID_MINIMUM_PAYMENT",
        )
    elif "minimum_payment" in values:
        row["minimum_payment"] = None
    if "due_date" in values:
        row["due_date"] = _parse_date(values["due_date"], "due date")
    if "currency" in values:
        row["currency"] = _normalize_currency(values["currency"])
    if "description" in values:
        row["description"] = values["description"]
    if partial and not row:
        raise ValidationError("No liability fields to update", "EMPTY_UPDATE")
    return row


def validate_recurring_fields(
    fields: Mapping[str, Any],
    *,
    partial: bool = False,
) -> dict[str, Any]:
    """Validate recurring transaction input and return a store row.

    Raises:
        ValidationError: If a field is missing, unknown, or out of range.
    """
    values = _normalize_keys(fields, RECURRING_FIELDS, "recurring transaction")
    row: dict[str, Any] = {}

    if "type" in values or not partial:
        row["type"] = _require_choice(
            values.get("type"),
            TRANSACTION_TYPES,
            "Invalid transaction type",
            "INVALID_TYPE",
        )
    if "category" in values or not partial:
        category = values.get("category")
        if not isinstance(category, str) or not category.strip():
            raise ValidationError("Category is required", "INVALID_CATEGORY")
        row["category"] = category.strip()
    if "amount" in values or not partial:
        amount = parse_decimal(values.get("amount"))
        if amount is None or amount <= 0:
            raise ValidationError(
                "Amount must be greater than 0",
                "INVALID_AMOUNT",
            )
        row["amount"] = amount
    if "frequency" in values or not partial:
        row["frequency"] = _require_choice(
            values.get("frequency"),
            RECURRENCE_FREQUENCIES,
            "Invalid frequency",
            "INVALID_FREQUENCY",
        )
    if "start_date" in values or not partial:
        start_date = _parse_date(values.get("start_date"), "start date")
        if start_date is None:
            raise ValidationError(
                "Valid start date is required (YYYY-MM-DD)",
                "INVALID_DATE",
            )
        row["start_date"] = start_date
    if "end_date" in values:
        row["end_date"] = _parse_date(values["end_date"], "end date")
        start_date = row.get("start_date")
        if (
            row["end_date"] is not None
            and start_date is not None
            and row["end_date"] < start_date
        ):
            raise ValidationError(
                "End date cannot be before start date",
                "INVALID_DATE",
            )
    if "description" in values:
        row["description"] = values["description"]
    if "is_active" in values:
        row["is_active"] = bool(values["is_active"])
    if partial and not row:
        raise ValidationError(
            "No recurring transaction fields to update",
            "EMPTY_UPDATE",
        )
    return row


def _normalize_keys(
    fields: Mapping[str, Any],
    allowed: tuple[str, ...],
    entity: str,
) -> dict[str, Any]:
    values: dict[str, Any] = {}
    for key, value in fields.items():
        column = _FIELD_ALIASES.get(key, key)
        if column not in allowed:
            raise ValidationError(
                f"Unknown {entity} field: {key}",
                "UNKNOWN_FIELD",
            )
        values[column] = value
    return values


def _require_name(value: Any, entity: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{entity} name is required", "INVALID_NAME")
    return value.strip()


def _require_choice(
    value: Any,
    choices: tuple[str, ...],
    message: str,
    code: str,
) -> str:
    if value not in choices:
        raise ValidationError(message, code)
    return value


def _require_non_negative(value: Any, message: str, code: str) -> Decimal:
    parsed = parse_decimal(value)
    if parsed is None or parsed < 0:
        raise ValidationError(message, code)
    return parsed


def _normalize_currency(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError("Currency code is required", "INVALID_CURRENCY")
    return value.strip().upper()


def _parse_date(value: Any, label: str):
    try:
        return coerce_date(value)
    except ValueError as exc:
        raise ValidationError(
            f"Invalid {label}: {value}",
            "INVALID_DATE",
        ) from exc


__all__ = [
    "ASSET_FIELDS",
    "LIABILITY_FIELDS",
    "RECURRING_FIELDS",
    "validate_asset_fields",
    "validate_liability_fields",
    "validate_recurring_fields",
]
