"""Use case for the locally persisted auto-update settings."""

from src.application.ports.settings_store import SettingsStorePort
from src.domain.models import BalanceSheetSettings
from src.infrastructure.logging.logger import get_app_logger


AUTO_UPDATE_KEY = "balance_sheet.{user_id}.auto_update_enabled"
PRIMARY_ASSET_KEY = "balance_sheet.{user_id}.primary_asset_id"

_TRUE_VALUES = ("1", "true", "yes", "on")


class BalanceSheetSettingsManager:
    """Read and write one user's auto-update preferences.

    Settings live in the local key/value store only; changing them never
    touches the ledger store and never triggers a snapshot.
    """

    def __init__(
        self,
        settings_store: SettingsStorePort,
        user_id: str | None,
        logger=None,
    ) -> None:
        self._settings_store = settings_store
        self._user_id = user_id
        self._logger = logger or get_app_logger()
        self._settings = BalanceSheetSettings()

    @property
    def settings(self) -> BalanceSheetSettings:
        return self._settings

    @property
    def auto_update_enabled(self) -> bool:
        return self._settings.auto_update_enabled

    @property
    def primary_asset_id(self) -> str | None:
        return self._settings.primary_asset_id

    def load(self) -> BalanceSheetSettings:
        """Load persisted settings, falling back to defaults."""
        if self._user_id is None:
            self._settings = BalanceSheetSettings()
            return self._settings
        raw_enabled = self._settings_store.get_item(self._key(AUTO_UPDATE_KEY))
        primary_asset_id = self._settings_store.get_item(
            self._key(PRIMARY_ASSET_KEY)
        )
        self._settings = BalanceSheetSettings(
            auto_update_enabled=(
                raw_enabled is not None
                and raw_enabled.strip().lower() in _TRUE_VALUES
            ),
            primary_asset_id=primary_asset_id or None,
        )
        return self._settings

    def set_auto_update_enabled(self, enabled: bool) -> BalanceSheetSettings:
        """Persist the auto-update flag and update the in-memory copy."""
        self._settings_store.set_item(
            self._key(AUTO_UPDATE_KEY),
            "true" if enabled else "false",
        )
        self._settings = BalanceSheetSettings(
            auto_update_enabled=enabled,
            primary_asset_id=self._settings.primary_asset_id,
        )
        self._logger.info(f"Auto-update from transactions set to {enabled}")
        return self._settings

    def set_primary_asset_id(
        self,
        asset_id: str | None,
    ) -> BalanceSheetSettings:
        """Persist the primary asset selection; None clears it."""
        key = self._key(PRIMARY_ASSET_KEY)
        if asset_id is None:
            self._settings_store.remove_item(key)
        else:
            self._settings_store.set_item(key, asset_id)
        self._settings = BalanceSheetSettings(
            auto_update_enabled=self._settings.auto_update_enabled,
            primary_asset_id=asset_id,
        )
        self._logger.info(f"Primary asset set to {asset_id}")
        return self._settings

    def _key(self, template: str) -> str:
        return template.format(user_id=self._user_id or "anonymous")


__all__ = [
    "BalanceSheetSettingsManager",
    "AUTO_UPDATE_KEY",
    "PRIMARY_ASSET_KEY",
]
