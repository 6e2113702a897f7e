"""Per-user session wiring the balance sheet components together."""

from collections.abc import Callable
from datetime import date

from src.application.ports.ledger_store import (
    TRANSACTIONS_TABLE,
    InsertSubscription,
    LedgerStoreError,
    LedgerStorePort,
)
from src.application.ports.settings_store import SettingsStorePort
from src.application.use_cases.auto_update_balance import AutoUpdateReactor
from src.application.use_cases.balance_sheet import BalanceSheetService
from src.application.use_cases.balance_sheet_settings import (
    BalanceSheetSettingsManager,
)
from src.application.use_cases.balance_sheet_state import BalanceSheetState
from src.application.use_cases.manage_snapshots import (
    SAME_DAY_REFRESH,
    SnapshotManager,
)
from src.application.use_cases.recurring_scheduler import RecurringScheduler
from src.application.use_cases.results import OperationResult
from src.domain.constants import DEFAULT_CURRENCY
from src.domain.errors import NotAuthenticatedError
from src.domain.models import NetWorthSummary
from src.infrastructure.logging.logger import get_app_logger


class BalanceSheetSession:
    """State and services owned by one authenticated user.

    Build one session on login and close it on logout. Opening the session
    subscribes the auto-update reactor to the user's transaction inserts,
    loads the balance sheet, and runs the daily snapshot check. Inserts
    from other writers are picked up and applied before each balance sheet
    read or mutation, or continuously by the optional worker thread.
    """

    def __init__(
        self,
        user_id: str,
        store: LedgerStorePort,
        settings_store: SettingsStorePort,
        logger=None,
        today: Callable[[], date] | None = None,
        same_day_policy: str = SAME_DAY_REFRESH,
        default_currency: str = DEFAULT_CURRENCY,
        run_worker: bool = False,
    ) -> None:
        """Initialize the session.

        Args:
            user_id: Authenticated user identifier.
            store: Ledger store shared by all components.
            settings_store: Local key/value store for settings.
            logger: Optional logger compatible with logging.Logger-like API.
            today: Optional clock returning the current date.
            same_day_policy: Snapshot policy for repeated same-day writes.
            default_currency: Currency applied to new assets/liabilities.
            run_worker: Start a background thread for the reactor on open.
        """
        self._logger = logger or get_app_logger()
        self._store = store
        self._run_worker = run_worker
        self._subscription: InsertSubscription | None = None

        self.state = BalanceSheetState(user_id)
        self.settings = BalanceSheetSettingsManager(
            settings_store,
            user_id,
            logger=self._logger,
        )
        self.snapshots = SnapshotManager(
            store,
            logger=self._logger,
            today=today,
            same_day_policy=same_day_policy,
        )
        self.balance_sheet = BalanceSheetService(
            store,
            self.state,
            self.settings,
            self.snapshots,
            logger=self._logger,
            default_currency=default_currency,
            on_access=self.sync,
        )
        self.reactor = AutoUpdateReactor(
            store,
            self.state,
            self.settings,
            self.snapshots,
            logger=self._logger,
            default_currency=default_currency,
        )
        self.recurring = RecurringScheduler(
            store,
            logger=self._logger,
            today=today,
        )

    @property
    def user_id(self) -> str | None:
        return self.state.user_id

    @property
    def is_open(self) -> bool:
        return self._subscription is not None

    def open(self) -> OperationResult[NetWorthSummary]:
        """Subscribe to transaction inserts, load data, and snapshot.

        The subscription is made before the first load so that no insert
        falls between the two.
        """
        if self.state.user_id is None:
            return OperationResult.fail(str(NotAuthenticatedError()))
        self.settings.load()
        if self._subscription is None:
            self._subscription = self._store.subscribe_inserts(
                TRANSACTIONS_TABLE,
                self.state.user_id,
                self.reactor.submit,
            )
        if self._run_worker:
            self.reactor.start(poll=self._poll_inserts)
        result = self.balance_sheet.refresh()
        if result.success:
            self.balance_sheet.ensure_daily_snapshot()
        self._logger.info(f"Balance sheet session opened for {self.user_id}")
        return result

    def sync(self) -> int:
        """Pull inserts made by other writers and apply queued events.

        Runs before every balance sheet read and mutation. While the
        background worker runs, queued events are left to the worker.

        Returns:
            int: Number of events that changed an asset.
        """
        self._poll_inserts()
        if self.reactor.running:
            return 0
        return self.reactor.process_pending()

    def close(self) -> None:
        """Stop reacting to inserts and drop the in-memory state."""
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None
        self.reactor.stop()
        with self.state.lock:
            user_id = self.state.user_id
            self.state.clear()
            self.state.user_id = None
        self._logger.info(f"Balance sheet session closed for {user_id}")

    def _poll_inserts(self) -> None:
        subscription = self._subscription
        if subscription is None:
            return
        try:
            subscription.poll()
        except LedgerStoreError as exc:
            self._logger.warning(f"Failed to poll transaction inserts: {exc}")

    def __enter__(self) -> "BalanceSheetSession":
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


__all__ = ["BalanceSheetSession"]
