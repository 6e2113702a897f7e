"""Use case applying inserted transactions to a designated asset.

When auto-update is enabled, every income or expense inserted into the
transactions table moves the value of one asset: the configured primary
asset, otherwise an existing Cash asset, otherwise a Cash asset created on
the fly. Events arrive through a queue and are applied one at a time while
holding the session lock, so they never interleave with facade mutations.
"""

import queue
import threading
from collections import OrderedDict
from collections.abc import Callable, Mapping
from dataclasses import replace
from decimal import Decimal
from typing import Any

from src.application.ports.ledger_store import (
    ASSETS_TABLE,
    LedgerStoreError,
    LedgerStorePort,
)
from src.application.use_cases.balance_sheet_settings import (
    BalanceSheetSettingsManager,
)
from src.application.use_cases.balance_sheet_state import BalanceSheetState
from src.application.use_cases.manage_snapshots import SnapshotManager
from src.domain.constants import (
    CASH_ASSET_NAME,
    CASH_ASSET_TYPE,
    DEFAULT_CURRENCY,
    TRANSACTION_TYPES,
)
from src.domain.models import Asset, Transaction
from src.infrastructure.logging.logger import get_app_logger


_STOP = object()

APPLIED_IDS_LIMIT = 1000
DEFAULT_POLL_INTERVAL = 1.0


class AutoUpdateReactor:
    """Consume transaction-insert events and adjust asset values."""

    def __init__(
        self,
        store: LedgerStorePort,
        state: BalanceSheetState,
        settings: BalanceSheetSettingsManager,
        snapshot_manager: SnapshotManager,
        logger=None,
        default_currency: str = DEFAULT_CURRENCY,
    ) -> None:
        """Initialize the reactor.

        Args:
            store: Ledger store holding the assets table.
            state: Session state shared with the balance sheet facade.
            settings: Auto-update settings of the session user.
            snapshot_manager: Manager used for the non-fatal re-snapshot.
            logger: Optional logger compatible with logging.Logger-like API.
            default_currency: Currency of an auto-created Cash asset.
        """
        self._store = store
        self._state = state
        self._settings = settings
        self._snapshot_manager = snapshot_manager
        self._logger = logger or get_app_logger()
        self._default_currency = default_currency
        self._events: queue.Queue = queue.Queue()
        self._applied_ids: OrderedDict[str, None] = OrderedDict()
        self._worker: threading.Thread | None = None
        self._poll: Callable[[], Any] | None = None
        self._poll_interval = DEFAULT_POLL_INTERVAL

    @property
    def pending(self) -> int:
        return self._events.qsize()

    @property
    def running(self) -> bool:
        return self._worker is not None and self._worker.is_alive()

    def submit(self, row: Mapping[str, Any]) -> None:
        """Queue an inserted transaction row; used as the feed callback."""
        self._events.put(dict(row))

    def process_pending(self) -> int:
        """Apply every queued event in arrival order.

        Returns:
            int: Number of events that changed an asset.
        """
        applied = 0
        while True:
            try:
                row = self._events.get_nowait()
            except queue.Empty:
                return applied
            try:
                if row is not _STOP and self.handle_transaction(row):
                    applied += 1
            finally:
                self._events.task_done()

    def start(
        self,
        poll: Callable[[], Any] | None = None,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ) -> None:
        """Start a background worker draining the queue.

        Args:
            poll: Optional callable run whenever the queue stays empty for
                poll_interval seconds, used to fetch inserts from other
                writers.
            poll_interval: Seconds to wait for an event before polling.
        """
        if self.running:
            return
        self._poll = poll
        self._poll_interval = poll_interval
        self._worker = threading.Thread(
            target=self._run,
            name="auto-update-reactor",
            daemon=True,
        )
        self._worker.start()

    def stop(self, timeout: float | None = 5.0) -> None:
        """Stop the background worker after the queued events."""
        if not self.running:
            self._worker = None
            return
        self._events.put(_STOP)
        self._worker.join(timeout)
        self._worker = None

    def _run(self) -> None:
        while True:
            try:
                row = self._events.get(timeout=self._poll_interval)
            except queue.Empty:
                self._poll_source()
                continue
            try:
                if row is _STOP:
                    return
                self.handle_transaction(row)
            except Exception as exc:
                self._logger.error(
                    f"Auto-update worker failed on event "
                    f"{row.get('id')}: {exc}"
                )
            finally:
                self._events.task_done()

    def _poll_source(self) -> None:
        if self._poll is None:
            return
        try:
            self._poll()
        except Exception as exc:
            self._logger.error(f"Auto-update worker failed to poll: {exc}")

    def handle_transaction(self, row: Mapping[str, Any]) -> bool:
        """Apply one inserted transaction to the target asset.

        Args:
            row: Transaction row as delivered by the insert feed.

        Returns:
            bool: True when an asset value was changed.
        """
        with self._state.lock:
            user_id = self._state.user_id
            if not self._settings.auto_update_enabled or user_id is None:
                return False

            transaction = self._parse_transaction(row, user_id)
            if transaction is None:
                return False
            if transaction.id in self._applied_ids:
                self._logger.debug(
                    f"Transaction {transaction.id} already applied; skipping"
                )
                return False

            asset_id = self._resolve_target_asset_id()
            if asset_id is None:
                return False
            asset = self._state.find_asset(asset_id)
            if asset is None:
                return False

            delta = transaction.signed_amount
            try:
                self._store.increment(
                    ASSETS_TABLE,
                    asset.id,
                    "current_value",
                    delta,
                )
            except LedgerStoreError as exc:
                self._logger.error(
                    f"Failed to apply transaction {transaction.id} "
                    f"to asset {asset.id}: {exc}"
                )
                return False
            self._remember_applied(transaction.id)
            self._logger.info(
                f"Applied {transaction.transaction_type} {transaction.amount} "
                f"to asset '{asset.name}' "
                f"({asset.current_value} -> {asset.current_value + delta})"
            )

            try:
                self._state.reload(self._store)
            except LedgerStoreError as exc:
                self._logger.warning(
                    f"Failed to refresh balance sheet after auto-update: {exc}"
                )
                self._state.replace_asset(
                    replace(asset, current_value=asset.current_value + delta)
                )
            self._snapshot_manager.ensure_daily_snapshot(
                user_id,
                self._state.totals,
            )
            return True

    def _remember_applied(self, transaction_id: str) -> None:
        self._applied_ids[transaction_id] = None
        while len(self._applied_ids) > APPLIED_IDS_LIMIT:
            self._applied_ids.popitem(last=False)

    def _parse_transaction(
        self,
        row: Mapping[str, Any],
        user_id: str,
    ) -> Transaction | None:
        try:
            transaction = Transaction.from_row(row)
        except (KeyError, ArithmeticError, ValueError) as exc:
            self._logger.warning(
                f"Ignoring malformed transaction event: {exc}"
            )
            return None
        if transaction.user_id != user_id:
            return None
        if transaction.transaction_type not in TRANSACTION_TYPES:
            self._logger.warning(
                f"Ignoring transaction {transaction.id} with type "
                f"{transaction.transaction_type}"
            )
            return None
        if transaction.amount <= Decimal("0"):
            self._logger.warning(
                f"Ignoring transaction {transaction.id} with non-positive "
                f"amount {transaction.amount}"
            )
            return None
        return transaction

    def _resolve_target_asset_id(self) -> str | None:
        primary_asset_id = self._settings.primary_asset_id
        if primary_asset_id:
            if self._state.find_asset(primary_asset_id) is not None:
                return primary_asset_id
            self._logger.warning(
                f"Primary asset {primary_asset_id} no longer exists; "
                "falling back to Cash"
            )

        cash_asset = self._find_cash_asset()
        if cash_asset is not None:
            return cash_asset.id

        created = self._create_cash_asset()
        return created.id if created is not None else None

    def _find_cash_asset(self) -> Asset | None:
        for asset in self._state.assets:
            if (
                asset.name.strip().lower() == CASH_ASSET_NAME.lower()
                or asset.asset_type == CASH_ASSET_TYPE
            ):
                return asset
        return None

    def _create_cash_asset(self) -> Asset | None:
        """Create the default Cash asset; failure aborts the event."""
        try:
            row = self._store.insert(
                ASSETS_TABLE,
                {
                    "user_id": self._state.user_id,
                    "name": CASH_ASSET_NAME,
                    "type": CASH_ASSET_TYPE,
                    "current_value": Decimal("0"),
                    "currency": self._default_currency,
                },
            )
        except LedgerStoreError as exc:
            self._logger.error(f"Failed to create default Cash asset: {exc}")
            return None
        asset = Asset.from_row(row)
        self._state.add_asset(asset)
        self._logger.info(f"Created default Cash asset {asset.id}")
        return asset


__all__ = ["APPLIED_IDS_LIMIT", "AutoUpdateReactor"]
