"""Domain package for business rules and core models."""

from .constants import (
    ASSET_TYPES,
    CASH_ASSET_NAME,
    CASH_ASSET_TYPE,
    DEFAULT_CURRENCY,
    LIABILITY_TYPES,
    RECURRENCE_FREQUENCIES,
    TRANSACTION_TYPES,
)
from .errors import BalanceSheetError, NotAuthenticatedError, ValidationError
from .models import (
    Asset,
    BalanceSheetSettings,
    BalanceSnapshot,
    Liability,
    NetWorthSummary,
    RecurringTransaction,
    Transaction,
)
from .services import (
    aggregate,
    compute_next_occurrence,
    validate_asset_fields,
    validate_liability_fields,
    validate_recurring_fields,
)

__all__ = [
    "ASSET_TYPES",
    "CASH_ASSET_NAME",
    "CASH_ASSET_TYPE",
    "DEFAULT_CURRENCY",
    "LIABILITY_TYPES",
    "RECURRENCE_FREQUENCIES",
    "TRANSACTION_TYPES",
    "BalanceSheetError",
    "NotAuthenticatedError",
    "ValidationError",
    "Asset",
    "BalanceSheetSettings",
    "BalanceSnapshot",
    "Liability",
    "NetWorthSummary",
    "RecurringTransaction",
    "Transaction",
    "aggregate",
    "compute_next_occurrence",
    "validate_asset_fields",
    "validate_liability_fields",
    "validate_recurring_fields",
]
