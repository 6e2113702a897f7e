"""Domain models for transactions and recurring schedules."""

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from src.utils.date_utils import coerce_date
from src.utils.decimal_utils import coerce_decimal


@dataclass(frozen=True)
class Transaction:
    """Income or expense entry owned by the transactions subsystem."""

    id: str
    user_id: str
    transaction_type: str
    amount: Decimal
    category: str | None = None
    description: str | None = None
    transaction_date: date | None = None
    created_at: datetime | None = None

    @property
    def signed_amount(self) -> Decimal:
        """Return the amount with the balance sign applied."""
        if self.transaction_type == "expense":
            return -self.amount
        return self.amount

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Transaction":
        """Build a transaction from a ledger store row."""
        return cls(
            id=row["id"],
            user_id=row["user_id"],
            transaction_type=row["type"],
            amount=coerce_decimal(row.get("amount")),
            category=row.get("category"),
            description=row.get("description"),
            transaction_date=coerce_date(row.get("date")),
            created_at=row.get("created_at"),
        )


@dataclass(frozen=True)
class RecurringTransaction:
    """Template that materializes transactions on a schedule."""

    id: str
    user_id: str
    transaction_type: str
    category: str
    amount: Decimal
    frequency: str
    start_date: date
    next_occurrence_date: date
    is_active: bool = True
    description: str | None = None
    end_date: date | None = None
    last_processed_date: date | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "RecurringTransaction":
        """Build a recurring transaction from a ledger store row."""
        return cls(
            id=row["id"],
            user_id=row["user_id"],
            transaction_type=row["type"],
            category=row["category"],
            amount=coerce_decimal(row.get("amount")),
            frequency=row["frequency"],
            start_date=coerce_date(row["start_date"]),
            next_occurrence_date=coerce_date(row["next_occurrence_date"]),
            is_active=bool(row.get("is_active", True)),
            description=row.get("description"),
            end_date=coerce_date(row.get("end_date")),
            last_processed_date=coerce_date(row.get("last_processed_date")),
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
        )


__all__ = ["Transaction", "RecurringTransaction"]
