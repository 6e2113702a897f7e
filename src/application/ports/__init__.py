"""Application ports package."""

from .database import DatabaseEnginePort
from .ledger_store import (
    ASSETS_TABLE,
    LIABILITIES_TABLE,
    RECURRING_TABLE,
    SNAPSHOTS_TABLE,
    TRANSACTIONS_TABLE,
    DuplicateRowError,
    Filter,
    InsertSubscription,
    LedgerStoreError,
    LedgerStorePort,
    RowNotFoundError,
)
from .settings_store import SettingsStorePort

__all__ = [
    "ASSETS_TABLE",
    "LIABILITIES_TABLE",
    "RECURRING_TABLE",
    "SNAPSHOTS_TABLE",
    "TRANSACTIONS_TABLE",
    "DatabaseEnginePort",
    "DuplicateRowError",
    "Filter",
    "InsertSubscription",
    "LedgerStoreError",
    "LedgerStorePort",
    "RowNotFoundError",
    "SettingsStorePort",
]
