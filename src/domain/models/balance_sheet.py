"""Domain models for assets, liabilities, and balance snapshots."""

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from src.domain.constants import DEFAULT_CURRENCY
from src.utils.date_utils import coerce_date
from src.utils.decimal_utils import coerce_decimal


@dataclass(frozen=True)
class Asset:
    """A holding owned by one user.

    Attributes:
        id: Row identifier.
        user_id: Owner identifier.
        name: Display name.
        asset_type: One of the ASSET_TYPES values.
        current_value: Current monetary value.
        currency: ISO currency code.
        description: Optional free text.
        created_at: Creation timestamp.
        updated_at: Last update timestamp.
    """

    id: str
    user_id: str
    name: str
    asset_type: str
    current_value: Decimal
    currency: str = DEFAULT_CURRENCY
    description: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Asset":
        """Build an asset from a ledger store row."""
        return cls(
            id=row["id"],
            user_id=row["user_id"],
            name=row["name"],
            asset_type=row["type"],
            current_value=coerce_decimal(row.get("current_value")),
            currency=row.get("currency") or DEFAULT_CURRENCY,
            description=row.get("description"),
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
        )


@dataclass(frozen=True)
class Liability:
    """An obligation owned by one user.

    Attributes:
        id: Row identifier.
        user_id: Owner identifier.
        name: Display name.
        liability_type: One of the LIABILITY_TYPES values.
        current_balance: Outstanding balance.
        currency: ISO currency code.
        interest_rate: Optional annual rate in percent.
        description: Optional free text.
        due_date: Optional next due date.
        minimum_payment: Optional minimum payment amount.
        created_at: Creation timestamp.
        updated_at: Last update timestamp.
    """

    id: str
    user_id: str
    name: str
    liability_type: str
    current_balance: Decimal
    currency: str = DEFAULT_CURRENCY
    interest_rate: Decimal | None = None
    description: str | None = None
    due_date: date | None = None
    minimum_payment: Decimal | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Liability":
        """Build a liability from a ledger store row."""
        interest_rate = row.get("interest_rate")
        minimum_payment = row.get("minimum_payment")
        return cls(
            id=row["id"],
            user_id=row["user_id"],
            name=row["name"],
            liability_type=row["type"],
            current_balance=coerce_decimal(row.get("current_balance")),
            currency=row.get("currency") or DEFAULT_CURRENCY,
            interest_rate=(
                coerce_decimal(interest_rate)
                if interest_rate is not None
                else None
            ),
            description=row.get("description"),
            due_date=coerce_date(row.get("due_date")),
            minimum_payment=(
                coerce_decimal(minimum_payment)
                if minimum_payment is not None
                else None
            ),
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
        )


@dataclass(frozen=True)
class BalanceSnapshot:
    """Point-in-time record of balance sheet totals for one day."""

    id: str
    user_id: str
    snapshot_date: date
    total_assets: Decimal
    total_liabilities: Decimal
    net_worth: Decimal
    notes: str | None = None
    created_at: datetime | None = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "BalanceSnapshot":
        """Build a snapshot from a ledger store row."""
        return cls(
            id=row["id"],
            user_id=row["user_id"],
            snapshot_date=coerce_date(row["snapshot_date"]),
            total_assets=coerce_decimal(row.get("total_assets")),
            total_liabilities=coerce_decimal(row.get("total_liabilities")),
            net_worth=coerce_decimal(row.get("net_worth")),
            notes=row.get("notes"),
            created_at=row.get("created_at"),
        )


@dataclass(frozen=True)
class BalanceSheetSettings:
    """Locally persisted auto-update preferences for one user."""

    auto_update_enabled: bool = False
    primary_asset_id: str | None = None


__all__ = [
    "Asset",
    "Liability",
    "BalanceSnapshot",
    "BalanceSheetSettings",
]
