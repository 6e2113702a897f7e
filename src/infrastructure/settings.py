"""Settings helpers for infrastructure adapters."""

from dataclasses import dataclass
import os
from pathlib import Path

from src.application.use_cases.manage_snapshots import (
    SAME_DAY_POLICIES,
    SAME_DAY_REFRESH,
)
from src.domain.constants import DEFAULT_CURRENCY
from src.infrastructure.logging.logger import get_app_logger
from src.utils.utils import get_project_root


_TRUE_VALUES = ("1", "true", "yes", "on")


@dataclass(frozen=True)
class AppSettings:
    """Settings for wiring a balance sheet session.

    Attributes:
        default_currency: Currency applied to new assets and liabilities.
        settings_file: JSON file backing the local settings store.
        same_day_policy: Snapshot policy for repeated same-day writes.
        auto_update_worker: Run the reactor on a background thread.
    """

    default_currency: str = DEFAULT_CURRENCY
    settings_file: Path | None = None
    same_day_policy: str = SAME_DAY_REFRESH
    auto_update_worker: bool = False

    @classmethod
    def from_env(cls) -> "AppSettings":
        """Build settings from environment variables.

        Returns:
            AppSettings: Settings sourced from environment variables.
        """
        logger = get_app_logger()
        currency = os.getenv("DEFAULT_CURRENCY", "").strip().upper()
        policy = (
            os.getenv("SNAPSHOT_SAME_DAY_POLICY", SAME_DAY_REFRESH)
            .strip()
            .lower()
        )
        if policy not in SAME_DAY_POLICIES:
            logger.warning(
                f"Unknown SNAPSHOT_SAME_DAY_POLICY '{policy}'; "
                f"using {SAME_DAY_REFRESH}"
            )
            policy = SAME_DAY_REFRESH
        raw_file = os.getenv("BALANCE_SETTINGS_FILE")
        settings_file = (
            Path(raw_file).expanduser().resolve()
            if raw_file
            else cls._default_settings_file()
        )
        worker = os.getenv("AUTO_UPDATE_WORKER", "").strip().lower()
        return cls(
            default_currency=currency or DEFAULT_CURRENCY,
            settings_file=settings_file,
            same_day_policy=policy,
            auto_update_worker=worker in _TRUE_VALUES,
        )

    @staticmethod
    def _default_settings_file() -> Path:
        return get_project_root() / "data" / "balance_sheet_settings.json"


__all__ = ["AppSettings"]
