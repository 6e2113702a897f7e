"""Use case maintaining at most one balance snapshot per user per day."""

from collections.abc import Callable
from datetime import date

from src.application.ports.ledger_store import (
    ASSETS_TABLE,
    LIABILITIES_TABLE,
    SNAPSHOTS_TABLE,
    DuplicateRowError,
    LedgerStoreError,
    LedgerStorePort,
    Row,
)
from src.application.use_cases.results import OperationResult
from src.domain.errors import NotAuthenticatedError
from src.domain.models import (
    Asset,
    BalanceSnapshot,
    Liability,
    NetWorthSummary,
)
from src.domain.services.aggregation import aggregate
from src.infrastructure.logging.logger import get_app_logger


SAME_DAY_REFRESH = "refresh"
SAME_DAY_KEEP = "keep"
SAME_DAY_POLICIES = (SAME_DAY_REFRESH, SAME_DAY_KEEP)


class SnapshotManager:
    """Create daily balance snapshots idempotently.

    A snapshot is keyed by (user, date). Writing for a date that already has
    a row never creates a second one: with the ``refresh`` policy the
    existing row's totals are updated in place so the day ends with the
    latest figures, with ``keep`` the first write of the day is left as is.
    """

    def __init__(
        self,
        store: LedgerStorePort,
        logger=None,
        today: Callable[[], date] | None = None,
        same_day_policy: str = SAME_DAY_REFRESH,
    ) -> None:
        """Initialize the manager.

        Args:
            store: Ledger store holding the balance_snapshots table.
            logger: Optional logger compatible with logging.Logger-like API.
            today: Optional clock returning the current date.
            same_day_policy: ``refresh`` or ``keep``.
        """
        if same_day_policy not in SAME_DAY_POLICIES:
            raise ValueError(
                f"Unknown same-day snapshot policy: {same_day_policy}"
            )
        self._store = store
        self._logger = logger or get_app_logger()
        self._today = today or date.today
        self._same_day_policy = same_day_policy

    def ensure_daily_snapshot(
        self,
        user_id: str,
        totals: NetWorthSummary,
        snapshot_date: date | None = None,
    ) -> bool:
        """Record today's totals unless a snapshot already exists.

        Failures are logged and reported as False; they never propagate to
        the mutation that triggered the snapshot.

        Args:
            user_id: Owner of the snapshot.
            totals: Aggregated totals to record.
            snapshot_date: Day of the snapshot, today by default.

        Returns:
            bool: True when a new row was created.
        """
        target_date = snapshot_date or self._today()
        try:
            _, created = self._write_snapshot(user_id, totals, target_date)
        except LedgerStoreError as exc:
            self._logger.warning(
                f"Failed to create daily snapshot for {target_date}: {exc}"
            )
            return False
        if created:
            self._logger.info(
                f"Daily snapshot created for {target_date}: "
                f"net_worth={totals.net_worth}"
            )
        return created

    def create_snapshot(
        self,
        user_id: str | None,
        snapshot_date: date | None = None,
    ) -> OperationResult[BalanceSnapshot]:
        """Snapshot the live totals on explicit request.

        Totals are recomputed from the store rather than from any in-memory
        mirror. Unlike ensure_daily_snapshot, failures reach the caller.

        Args:
            user_id: Owner of the snapshot.
            snapshot_date: Day of the snapshot, today by default.

        Returns:
            OperationResult[BalanceSnapshot]: The stored snapshot row.
        """
        if not user_id:
            return OperationResult.fail(str(NotAuthenticatedError()))
        target_date = snapshot_date or self._today()
        try:
            totals = self._load_live_totals(user_id)
            snapshot, _ = self._write_snapshot(user_id, totals, target_date)
        except LedgerStoreError as exc:
            return OperationResult.fail(f"Failed to create snapshot: {exc}")
        return OperationResult.ok(snapshot)

    def list_snapshots(
        self,
        user_id: str,
        limit: int | None = None,
    ) -> list[BalanceSnapshot]:
        """Return a user's snapshots, newest first.

        Raises:
            LedgerStoreError: If the store read fails.
        """
        rows = self._store.select_by_user(
            SNAPSHOTS_TABLE,
            user_id,
            order_by="snapshot_date",
            descending=True,
            limit=limit,
        )
        return [BalanceSnapshot.from_row(row) for row in rows]

    def _load_live_totals(self, user_id: str) -> NetWorthSummary:
        assets = [
            Asset.from_row(row)
            for row in self._store.select_by_user(ASSETS_TABLE, user_id)
        ]
        liabilities = [
            Liability.from_row(row)
            for row in self._store.select_by_user(LIABILITIES_TABLE, user_id)
        ]
        return aggregate(assets, liabilities)

    def _write_snapshot(
        self,
        user_id: str,
        totals: NetWorthSummary,
        snapshot_date: date,
    ) -> tuple[BalanceSnapshot, bool]:
        key = {"user_id": user_id, "snapshot_date": snapshot_date}
        existing = self._store.select_one(SNAPSHOTS_TABLE, key)
        if existing is None:
            try:
                row = self._store.insert(
                    SNAPSHOTS_TABLE,
                    {**key, **self._totals_row(totals)},
                )
                return BalanceSnapshot.from_row(row), True
            except DuplicateRowError:
                # Lost the race against a concurrent writer for the same day.
                existing = self._store.select_one(SNAPSHOTS_TABLE, key)
                if existing is None:
                    raise
        return self._refresh_existing(existing, totals), False

    def _refresh_existing(
        self,
        existing: Row,
        totals: NetWorthSummary,
    ) -> BalanceSnapshot:
        snapshot = BalanceSnapshot.from_row(existing)
        if self._same_day_policy == SAME_DAY_KEEP:
            return snapshot
        if (
            snapshot.total_assets == totals.total_assets
            and snapshot.total_liabilities == totals.total_liabilities
        ):
            return snapshot
        row = self._store.update(
            SNAPSHOTS_TABLE,
            snapshot.id,
            self._totals_row(totals),
        )
        self._logger.info(
            f"Snapshot for {snapshot.snapshot_date} refreshed: "
            f"net_worth={totals.net_worth}"
        )
        return BalanceSnapshot.from_row(row)

    @staticmethod
    def _totals_row(totals: NetWorthSummary) -> Row:
        return {
            "total_assets": totals.total_assets,
            "total_liabilities": totals.total_liabilities,
            "net_worth": totals.total_assets - totals.total_liabilities,
        }


__all__ = [
    "SnapshotManager",
    "SAME_DAY_REFRESH",
    "SAME_DAY_KEEP",
    "SAME_DAY_POLICIES",
]
