"""Balance sheet facade exposed to presentation and API layers.

Every public operation returns an OperationResult instead of raising. A
mutation follows a fixed sequence: validate locally, write to the store,
update the in-memory mirror, then record the daily snapshot. Validation
failures never reach the store, store failures leave the mirror untouched,
and snapshot failures never undo the mutation.
"""

from collections.abc import Callable, Mapping
from datetime import date
from decimal import Decimal
from typing import Any

from src.application.ports.ledger_store import (
    ASSETS_TABLE,
    LIABILITIES_TABLE,
    LedgerStoreError,
    LedgerStorePort,
)
from src.application.use_cases.balance_sheet_settings import (
    BalanceSheetSettingsManager,
)
from src.application.use_cases.balance_sheet_state import BalanceSheetState
from src.application.use_cases.manage_snapshots import SnapshotManager
from src.application.use_cases.results import OperationResult
from src.domain.constants import DEFAULT_CURRENCY
from src.domain.errors import ValidationError
from src.domain.models import (
    Asset,
    BalanceSheetSettings,
    BalanceSnapshot,
    Liability,
    NetWorthSummary,
)
from src.domain.services.validation import (
    validate_asset_fields,
    validate_liability_fields,
)
from src.infrastructure.logging.logger import get_app_logger


NOT_AUTHENTICATED_MESSAGE = "User not authenticated. Please log in."


class BalanceSheetService:
    """CRUD on assets and liabilities with always-derived totals."""

    def __init__(
        self,
        store: LedgerStorePort,
        state: BalanceSheetState,
        settings: BalanceSheetSettingsManager,
        snapshot_manager: SnapshotManager,
        logger=None,
        default_currency: str = DEFAULT_CURRENCY,
        on_access: Callable[[], Any] | None = None,
    ) -> None:
        """Initialize the facade.

        Args:
            store: Ledger store for assets and liabilities.
            state: Session state shared with the auto-update reactor.
            settings: Auto-update settings of the session user.
            snapshot_manager: Manager for daily snapshots.
            logger: Optional logger compatible with logging.Logger-like API.
            default_currency: Currency applied when a create omits one.
            on_access: Optional hook run before every read and mutation,
                used by the session to apply pending auto-updates first.
        """
        self._store = store
        self._state = state
        self._settings = settings
        self._snapshot_manager = snapshot_manager
        self._logger = logger or get_app_logger()
        self._default_currency = default_currency
        self._on_access = on_access

    @property
    def user_id(self) -> str | None:
        return self._state.user_id

    @property
    def assets(self) -> tuple[Asset, ...]:
        self._sync()
        return tuple(self._state.assets)

    @property
    def liabilities(self) -> tuple[Liability, ...]:
        self._sync()
        return tuple(self._state.liabilities)

    @property
    def totals(self) -> NetWorthSummary:
        self._sync()
        return self._state.totals

    @property
    def total_assets(self) -> Decimal:
        return self.totals.total_assets

    @property
    def total_liabilities(self) -> Decimal:
        return self.totals.total_liabilities

    @property
    def net_worth(self) -> Decimal:
        return self.totals.net_worth

    @property
    def loading(self) -> bool:
        return self._state.loading

    @property
    def error(self) -> str | None:
        return self._state.error

    @property
    def settings(self) -> BalanceSheetSettings:
        return self._settings.settings

    @property
    def auto_update_enabled(self) -> bool:
        return self._settings.auto_update_enabled

    @property
    def primary_asset_id(self) -> str | None:
        return self._settings.primary_asset_id

    def get_asset(self, asset_id: str) -> OperationResult[Asset]:
        """Return one asset of the session user by identifier."""
        self._sync()
        with self._state.lock:
            if self._state.user_id is None:
                return OperationResult.fail(NOT_AUTHENTICATED_MESSAGE)
            asset = self._state.find_asset(asset_id)
            if asset is None:
                return OperationResult.fail(f"Asset not found: {asset_id}")
            return OperationResult.ok(asset)

    def get_liability(self, liability_id: str) -> OperationResult[Liability]:
        """Return one liability of the session user by identifier."""
        self._sync()
        with self._state.lock:
            if self._state.user_id is None:
                return OperationResult.fail(NOT_AUTHENTICATED_MESSAGE)
            liability = self._state.find_liability(liability_id)
            if liability is None:
                return OperationResult.fail(
                    f"Liability not found: {liability_id}"
                )
            return OperationResult.ok(liability)

    def create_asset(
        self,
        fields: Mapping[str, Any],
    ) -> OperationResult[Asset]:
        """Validate and create an asset, then snapshot the new totals."""
        self._sync()
        with self._state.lock:
            user_id = self._state.user_id
            if user_id is None:
                return OperationResult.fail(NOT_AUTHENTICATED_MESSAGE)
            try:
                row = validate_asset_fields(fields)
            except ValidationError as exc:
                return OperationResult.fail(str(exc))
            row.setdefault("currency", self._default_currency)
            row["user_id"] = user_id
            try:
                asset = Asset.from_row(self._store.insert(ASSETS_TABLE, row))
            except LedgerStoreError as exc:
                return self._store_failure("create asset", exc)
            self._state.add_asset(asset)
            self._logger.info(f"Asset '{asset.name}' created ({asset.id})")
            self._snapshot_after_mutation()
            return OperationResult.ok(asset)

    def update_asset(
        self,
        asset_id: str,
        updates: Mapping[str, Any],
    ) -> OperationResult[Asset]:
        """Apply a partial asset update, then snapshot the new totals."""
        self._sync()
        with self._state.lock:
            if self._state.user_id is None:
                return OperationResult.fail(NOT_AUTHENTICATED_MESSAGE)
            if not asset_id:
                return OperationResult.fail("Asset ID is required")
            if self._state.find_asset(asset_id) is None:
                return OperationResult.fail(f"Asset not found: {asset_id}")
            try:
                patch = validate_asset_fields(updates, partial=True)
            except ValidationError as exc:
                return OperationResult.fail(str(exc))
            try:
                asset = Asset.from_row(
                    self._store.update(ASSETS_TABLE, asset_id, patch)
                )
            except LedgerStoreError as exc:
                return self._store_failure("update asset", exc)
            self._state.replace_asset(asset)
            self._snapshot_after_mutation()
            return OperationResult.ok(asset)

    def delete_asset(self, asset_id: str) -> OperationResult[None]:
        """Delete an asset, then snapshot the new totals."""
        self._sync()
        with self._state.lock:
            if self._state.user_id is None:
                return OperationResult.fail(NOT_AUTHENTICATED_MESSAGE)
            if not asset_id:
                return OperationResult.fail("Asset ID is required")
            if self._state.find_asset(asset_id) is None:
                return OperationResult.fail(f"Asset not found: {asset_id}")
            try:
                self._store.delete(ASSETS_TABLE, asset_id)
            except LedgerStoreError as exc:
                return self._store_failure("delete asset", exc)
            self._state.remove_asset(asset_id)
            self._logger.info(f"Asset {asset_id} deleted")
            self._snapshot_after_mutation()
            return OperationResult.ok()

    def create_liability(
        self,
        fields: Mapping[str, Any],
    ) -> OperationResult[Liability]:
        """Validate and create a liability, then snapshot the new totals."""
        self._sync()
        with self._state.lock:
            user_id = self._state.user_id
            if user_id is None:
                return OperationResult.fail(NOT_AUTHENTICATED_MESSAGE)
            try:
                row = validate_liability_fields(fields)
            except ValidationError as exc:
                return OperationResult.fail(str(exc))
            row.setdefault("currency", self._default_currency)
            row["user_id"] = user_id
            try:
                liability = Liability.from_row(
                    self._store.insert(LIABILITIES_TABLE, row)
                )
            except LedgerStoreError as exc:
                return self._store_failure("create liability", exc)
            self._state.add_liability(liability)
            self._logger.info(
                f"Liability '{liability.name}' created ({liability.id})"
            )
            self._snapshot_after_mutation()
            return OperationResult.ok(liability)

    def update_liability(
        self,
        liability_id: str,
        updates: Mapping[str, Any],
    ) -> OperationResult[Liability]:
        """Apply a partial liability update, then snapshot the new totals."""
        self._sync()
        with self._state.lock:
            if self._state.user_id is None:
                return OperationResult.fail(NOT_AUTHENTICATED_MESSAGE)
            if not liability_id:
                return OperationResult.fail("Liability ID is required")
            if self._state.find_liability(liability_id) is None:
                return OperationResult.fail(
                    f"Liability not found: {liability_id}"
                )
            try:
                patch = validate_liability_fields(updates, partial=True)
            except ValidationError as exc:
                return OperationResult.fail(str(exc))
            try:
                liability = Liability.from_row(
                    self._store.update(LIABILITIES_TABLE, liability_id, patch)
                )
            except LedgerStoreError as exc:
                return self._store_failure("update liability", exc)
            self._state.replace_liability(liability)
            self._snapshot_after_mutation()
            return OperationResult.ok(liability)

    def delete_liability(self, liability_id: str) -> OperationResult[None]:
        """Delete a liability, then snapshot the new totals."""
        self._sync()
        with self._state.lock:
            if self._state.user_id is None:
                return OperationResult.fail(NOT_AUTHENTICATED_MESSAGE)
            if not liability_id:
                return OperationResult.fail("Liability ID is required")
            if self._state.find_liability(liability_id) is None:
                return OperationResult.fail(
                    f"Liability not found: {liability_id}"
                )
            try:
                self._store.delete(LIABILITIES_TABLE, liability_id)
            except LedgerStoreError as exc:
                return self._store_failure("delete liability", exc)
            self._state.remove_liability(liability_id)
            self._logger.info(f"Liability {liability_id} deleted")
            self._snapshot_after_mutation()
            return OperationResult.ok()

    def set_auto_update_enabled(
        self,
        enabled: bool,
    ) -> OperationResult[BalanceSheetSettings]:
        """Turn auto-update from transactions on or off."""
        self._sync()
        with self._state.lock:
            if self._state.user_id is None:
                return OperationResult.fail(NOT_AUTHENTICATED_MESSAGE)
            return OperationResult.ok(
                self._settings.set_auto_update_enabled(bool(enabled))
            )

    def set_primary_asset_id(
        self,
        asset_id: str | None,
    ) -> OperationResult[BalanceSheetSettings]:
        """Select the asset auto-update applies to; None clears it."""
        self._sync()
        with self._state.lock:
            if self._state.user_id is None:
                return OperationResult.fail(NOT_AUTHENTICATED_MESSAGE)
            missing = self._state.find_asset(asset_id) is None
            if asset_id is not None and missing:
                return OperationResult.fail(f"Asset not found: {asset_id}")
            return OperationResult.ok(
                self._settings.set_primary_asset_id(asset_id)
            )

    def refresh(self) -> OperationResult[NetWorthSummary]:
        """Reload both collections from the store."""
        self._sync()
        with self._state.lock:
            if self._state.user_id is None:
                self._state.clear()
                return OperationResult.fail(NOT_AUTHENTICATED_MESSAGE)
            self._state.loading = True
            self._state.error = None
            try:
                self._state.reload(self._store)
            except LedgerStoreError as exc:
                message = f"Failed to fetch balance sheet: {exc}"
                self._logger.error(message)
                self._state.error = message
                return OperationResult.fail(message)
            finally:
                self._state.loading = False
            return OperationResult.ok(self._state.totals)

    def ensure_daily_snapshot(self, snapshot_date: date | None = None) -> bool:
        """Record today's snapshot from the in-memory totals if missing."""
        self._sync()
        with self._state.lock:
            if self._state.user_id is None:
                return False
            return self._snapshot_manager.ensure_daily_snapshot(
                self._state.user_id,
                self._state.totals,
                snapshot_date,
            )

    def create_snapshot(
        self,
        snapshot_date: date | None = None,
    ) -> OperationResult[BalanceSnapshot]:
        """Explicitly snapshot the live totals, surfacing failures."""
        self._sync()
        if self._state.user_id is None:
            return OperationResult.fail(NOT_AUTHENTICATED_MESSAGE)
        return self._snapshot_manager.create_snapshot(
            self._state.user_id,
            snapshot_date,
        )

    def _sync(self) -> None:
        if self._on_access is not None:
            self._on_access()

    def _snapshot_after_mutation(self) -> None:
        self._snapshot_manager.ensure_daily_snapshot(
            self._state.user_id,
            self._state.totals,
        )

    def _store_failure(
        self,
        action: str,
        exc: LedgerStoreError,
    ) -> OperationResult:
        message = f"Failed to {action}: {exc}"
        self._logger.error(message)
        return OperationResult.fail(message)


__all__ = ["BalanceSheetService", "NOT_AUTHENTICATED_MESSAGE"]
