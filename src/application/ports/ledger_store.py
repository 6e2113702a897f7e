"""Port for the durable ledger store.

The ledger store owns the assets, liabilities, balance_snapshots,
transactions, and recurring_transactions tables. Rows travel as plain
mappings keyed by column name; the use cases turn them into domain models.
"""

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Protocol

from src.domain.errors import BalanceSheetError


ASSETS_TABLE = "assets"
LIABILITIES_TABLE = "liabilities"
SNAPSHOTS_TABLE = "balance_snapshots"
TRANSACTIONS_TABLE = "transactions"
RECURRING_TABLE = "recurring_transactions"

FILTER_OPERATORS = ("eq", "gte", "lte")

Row = dict[str, Any]
InsertCallback = Callable[[Row], None]


class LedgerStoreError(BalanceSheetError):
    """Raised when a ledger store call fails."""


class DuplicateRowError(LedgerStoreError):
    """Raised when an insert violates a unique constraint."""


class RowNotFoundError(LedgerStoreError):
    """Raised when an update or delete targets a missing row."""


@dataclass(frozen=True)
class Filter:
    """Column comparison used by select_by_user.

    Attributes:
        column: Column name.
        op: One of eq, gte, lte.
        value: Value compared against the column.
    """

    column: str
    op: str
    value: Any

    def __post_init__(self) -> None:
        if self.op not in FILTER_OPERATORS:
            raise ValueError(f"Unsupported filter operator: {self.op}")


class InsertSubscription(Protocol):
    """Handle returned by subscribe_inserts."""

    def unsubscribe(self) -> None:
        """Stop delivering insert events to the callback."""

    def poll(self) -> int:
        """Deliver rows inserted by other writers since the last poll."""


class LedgerStorePort(Protocol):
    """Port exposing CRUD and insert notifications on ledger tables."""

    def insert(self, table: str, row: Mapping[str, Any]) -> Row:
        """Insert a row and return it as stored."""

    def select_by_user(
        self,
        table: str,
        user_id: str,
        filters: Sequence[Filter] | None = None,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[Row]:
        """Return the rows of a table owned by a user."""

    def select_one(
        self,
        table: str,
        predicate: Mapping[str, Any],
    ) -> Row | None:
        """Return the first row matching all equality predicates."""

    def update(
        self,
        table: str,
        row_id: str,
        patch: Mapping[str, Any],
    ) -> Row:
        """Apply a partial update and return the updated row."""

    def delete(self, table: str, row_id: str) -> None:
        """Delete a row by identifier."""

    def increment(
        self,
        table: str,
        row_id: str,
        column: str,
        delta,
    ) -> Row:
        """Atomically add delta to a numeric column and return the row."""

    def subscribe_inserts(
        self,
        table: str,
        user_id: str,
        callback: InsertCallback,
    ) -> InsertSubscription:
        """Deliver every row inserted into table for user_id to callback."""


__all__ = [
    "ASSETS_TABLE",
    "LIABILITIES_TABLE",
    "SNAPSHOTS_TABLE",
    "TRANSACTIONS_TABLE",
    "RECURRING_TABLE",
    "FILTER_OPERATORS",
    "Row",
    "InsertCallback",
    "LedgerStoreError",
    "DuplicateRowError",
    "RowNotFoundError",
    "Filter",
    "InsertSubscription",
    "LedgerStorePort",
]
