"""Domain services package."""

from .aggregation import aggregate
from .recurrence import compute_next_occurrence, format_frequency
from .validation import (
    validate_asset_fields,
    validate_liability_fields,
    validate_recurring_fields,
)

__all__ = [
    "aggregate",
    "compute_next_occurrence",
    "format_frequency",
    "validate_asset_fields",
    "validate_liability_fields",
    "validate_recurring_fields",
]
