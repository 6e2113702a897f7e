"""Domain constants for the balance sheet."""

ASSET_TYPES = (
    "cash",
    "bank",
    "investment",
    "property",
    "other",
)

LIABILITY_TYPES = (
    "credit_card",
    "loan",
    "mortgage",
    "other",
)

TRANSACTION_TYPES = (
    "income",
    "expense",
)

RECURRENCE_FREQUENCIES = (
    "daily",
    "weekly",
    "biweekly",
    "monthly",
    "quarterly",
    "yearly",
)

DEFAULT_CURRENCY = "USD"

CASH_ASSET_NAME = "Cash"
CASH_ASSET_TYPE = "cash"

MAX_INTEREST_RATE = 100


__all__ = [
    "ASSET_TYPES",
    "LIABILITY_TYPES",
    "TRANSACTION_TYPES",
    "RECURRENCE_FREQUENCIES",
    "DEFAULT_CURRENCY",
    "CASH_ASSET_NAME",
    "CASH_ASSET_TYPE",
    "MAX_INTEREST_RATE",
]
