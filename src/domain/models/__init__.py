"""Domain models package."""

from .balance_sheet import (
    Asset,
    BalanceSheetSettings,
    BalanceSnapshot,
    Liability,
)
from .finance import NetWorthSummary
from .transactions import RecurringTransaction, Transaction

__all__ = [
    "Asset",
    "Liability",
    "BalanceSnapshot",
    "BalanceSheetSettings",
    "NetWorthSummary",
    "Transaction",
    "RecurringTransaction",
]
