"""Use case returning snapshot history for net worth charts."""

from datetime import date

from src.application.ports.ledger_store import (
    SNAPSHOTS_TABLE,
    Filter,
    LedgerStorePort,
)
from src.domain.models import BalanceSnapshot
from src.infrastructure.logging.logger import get_app_logger


class GetNetWorthTrendUseCase:
    """Read balance snapshots within a date range."""

    def __init__(self, store: LedgerStorePort, logger=None) -> None:
        """Initialize the use case.

        Args:
            store: Ledger store holding the balance_snapshots table.
            logger: Optional logger compatible with logging.Logger-like API.
        """
        self._store = store
        self._logger = logger or get_app_logger()

    def execute(
        self,
        user_id: str,
        start_date: date,
        end_date: date | None = None,
    ) -> list[BalanceSnapshot]:
        """Return snapshots from start_date (inclusive), oldest first.

        Args:
            user_id: Owner of the snapshots.
            start_date: Lower bound of snapshot_date.
            end_date: Optional upper bound of snapshot_date.

        Returns:
            list[BalanceSnapshot]: Snapshots ordered by snapshot_date.
        """
        filters = [Filter("snapshot_date", "gte", start_date)]
        if end_date:
            filters.append(Filter("snapshot_date", "lte", end_date))
        rows = self._store.select_by_user(
            SNAPSHOTS_TABLE,
            user_id,
            filters=filters,
            order_by="snapshot_date",
        )
        snapshots = [BalanceSnapshot.from_row(row) for row in rows]
        self._logger.info(
            f"Net worth trend loaded: {len(snapshots)} snapshots "
            f"from {start_date} to {end_date or 'today'}"
        )
        return snapshots


__all__ = ["GetNetWorthTrendUseCase"]
