"""Domain models for financial aggregates."""

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class NetWorthSummary:
    """Summary of net worth figures.

    Attributes:
        total_assets: Sum of asset values.
        total_liabilities: Sum of liability balances.
        net_worth: Assets minus liabilities.
    """

    total_assets: Decimal
    total_liabilities: Decimal
    net_worth: Decimal


__all__ = ["NetWorthSummary"]
