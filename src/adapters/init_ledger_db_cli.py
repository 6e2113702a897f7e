"""CLI adapter to create the ledger tables.

The command is idempotent: tables that already exist are left untouched.
"""

from src.infrastructure.container import build_database_adapter
from src.infrastructure.ledger_tables import create_schema, metadata
from src.infrastructure.logging.logger import get_app_logger


def main() -> None:
    """Create every ledger table in the configured database."""
    logger = get_app_logger()
    engine = build_database_adapter().get_ledger_engine()
    create_schema(engine)
    table_names = ", ".join(sorted(metadata.tables))
    logger.info(f"Ledger schema ensured on {engine.url}")
    print(f"Ledger tables ready: {table_names}.")


if __name__ == "__main__":  # pragma: no cover
    main()
