"""SQLAlchemy Core schema for the ledger tables."""

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    Engine,
    MetaData,
    Numeric,
    String,
    Table,
    Text,
    UniqueConstraint,
)

from src.application.ports.ledger_store import (
    ASSETS_TABLE,
    LIABILITIES_TABLE,
    RECURRING_TABLE,
    SNAPSHOTS_TABLE,
    TRANSACTIONS_TABLE,
)
from src.domain.constants import DEFAULT_CURRENCY


metadata = MetaData()

assets = Table(
    ASSETS_TABLE,
    metadata,
    Column("id", String(36), primary_key=True),
    Column("user_id", String(36), nullable=False, index=True),
    Column("name", Text, nullable=False),
    Column("type", String(32), nullable=False),
    Column("current_value", Numeric(14, 2), nullable=False, default=0),
    Column("currency", String(3), nullable=False, default=DEFAULT_CURRENCY),
    Column("description", Text),
    Column("created_at", DateTime(timezone=True)),
    Column("updated_at", DateTime(timezone=True)),
)

liabilities = Table(
    LIABILITIES_TABLE,
    metadata,
    Column("id", String(36), primary_key=True),
    Column("user_id", String(36), nullable=False, index=True),
    Column("name", Text, nullable=False),
    Column("type", String(32), nullable=False),
    Column("current_balance", Numeric(14, 2), nullable=False, default=0),
    Column("interest_rate", Numeric(5, 2)),
    Column("currency", String(3), nullable=False, default=DEFAULT_CURRENCY),
    Column("description", Text),
    Column("due_date", Date),
    Column("minimum_payment", Numeric(14, 2)),
    Column("created_at", DateTime(timezone=True)),
    Column("updated_at", DateTime(timezone=True)),
)

balance_snapshots = Table(
    SNAPSHOTS_TABLE,
    metadata,
    Column("id", String(36), primary_key=True),
    Column("user_id", String(36), nullable=False),
    Column("snapshot_date", Date, nullable=False),
    Column("total_assets", Numeric(14, 2), nullable=False),
    Column("total_liabilities", Numeric(14, 2), nullable=False),
    Column("net_worth", Numeric(14, 2), nullable=False),
    Column("notes", Text),
    Column("created_at", DateTime(timezone=True)),
    UniqueConstraint(
        "user_id",
        "snapshot_date",
        name="uq_balance_snapshots_user_date",
    ),
)

transactions = Table(
    TRANSACTIONS_TABLE,
    metadata,
    Column("id", String(36), primary_key=True),
    Column("user_id", String(36), nullable=False, index=True),
    Column("type", String(16), nullable=False),
    Column("amount", Numeric(14, 2), nullable=False),
    Column("category", Text),
    Column("description", Text),
    Column("date", Date),
    Column("recurring_id", String(36)),
    Column("created_at", DateTime(timezone=True)),
)

recurring_transactions = Table(
    RECURRING_TABLE,
    metadata,
    Column("id", String(36), primary_key=True),
    Column("user_id", String(36), nullable=False, index=True),
    Column("type", String(16), nullable=False),
    Column("category", Text, nullable=False),
    Column("amount", Numeric(14, 2), nullable=False),
    Column("description", Text),
    Column("frequency", String(16), nullable=False),
    Column("start_date", Date, nullable=False),
    Column("end_date", Date),
    Column("next_occurrence_date", Date, nullable=False),
    Column("last_processed_date", Date),
    Column("is_active", Boolean, nullable=False, default=True),
    Column("created_at", DateTime(timezone=True)),
    Column("updated_at", DateTime(timezone=True)),
)


def create_schema(engine: Engine) -> None:
    """Create every ledger table that does not exist yet."""
    metadata.create_all(engine)


__all__ = [
    "metadata",
    "assets",
    "liabilities",
    "balance_snapshots",
    "transactions",
    "recurring_transactions",
    "create_schema",
]
