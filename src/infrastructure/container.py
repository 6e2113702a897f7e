"""Composition root for wiring infrastructure adapters."""

import threading

from sqlalchemy.engine import Engine

from src.application.ports.database import DatabaseEnginePort
from src.application.ports.ledger_store import LedgerStorePort
from src.application.ports.settings_store import SettingsStorePort
from src.application.use_cases.export_balance_sheet import (
    ExportBalanceSheetUseCase,
)
from src.application.use_cases.get_net_worth_trend import (
    GetNetWorthTrendUseCase,
)
from src.application.use_cases.manage_snapshots import SnapshotManager
from src.application.use_cases.recurring_scheduler import RecurringScheduler
from src.application.use_cases.session import BalanceSheetSession
from src.infrastructure.db import SqlAlchemyDatabaseEngineAdapter
from src.infrastructure.ledger_store import SqlAlchemyLedgerStore
from src.infrastructure.logging.logger import get_app_logger
from src.infrastructure.settings import AppSettings
from src.infrastructure.settings_store import (
    InMemorySettingsStore,
    JsonFileSettingsStore,
)


_ledger_stores: dict[Engine, SqlAlchemyLedgerStore] = {}
_ledger_stores_lock = threading.Lock()


def build_database_adapter() -> DatabaseEnginePort:
    """Return the database adapter instance."""
    return SqlAlchemyDatabaseEngineAdapter()


def build_ledger_store(
    db_port: DatabaseEnginePort | None = None,
) -> LedgerStorePort:
    """Return the SQLAlchemy ledger store shared by everything on an engine.

    Sessions, schedulers and CLIs built in one process share the store of
    their engine, so inserts made through one reach the others at once.
    """
    resolved_db = db_port or build_database_adapter()
    engine = resolved_db.get_ledger_engine()
    with _ledger_stores_lock:
        store = _ledger_stores.get(engine)
        if store is None:
            store = SqlAlchemyLedgerStore(
                resolved_db,
                logger=get_app_logger(),
            )
            _ledger_stores[engine] = store
    return store


def build_settings_store(
    settings: AppSettings | None = None,
) -> SettingsStorePort:
    """Return the local settings store.

    Falls back to an in-memory store when no settings file is configured.
    """
    resolved = settings or AppSettings.from_env()
    if resolved.settings_file is None:
        return InMemorySettingsStore()
    return JsonFileSettingsStore(
        resolved.settings_file,
        logger=get_app_logger(),
    )


def build_snapshot_manager(
    store: LedgerStorePort | None = None,
    settings: AppSettings | None = None,
) -> SnapshotManager:
    """Return a snapshot manager using the configured same-day policy."""
    resolved = settings or AppSettings.from_env()
    return SnapshotManager(
        store or build_ledger_store(),
        logger=get_app_logger(),
        same_day_policy=resolved.same_day_policy,
    )


def build_recurring_scheduler(
    store: LedgerStorePort | None = None,
) -> RecurringScheduler:
    """Return the recurring transaction scheduler."""
    return RecurringScheduler(
        store or build_ledger_store(),
        logger=get_app_logger(),
    )


def build_net_worth_trend_use_case(
    store: LedgerStorePort | None = None,
) -> GetNetWorthTrendUseCase:
    """Return the net worth trend use case."""
    return GetNetWorthTrendUseCase(
        store or build_ledger_store(),
        logger=get_app_logger(),
    )


def build_export_use_case(
    store: LedgerStorePort | None = None,
) -> ExportBalanceSheetUseCase:
    """Return the balance sheet CSV export use case."""
    return ExportBalanceSheetUseCase(
        store or build_ledger_store(),
        logger=get_app_logger(),
    )


def build_session(
    user_id: str,
    store: LedgerStorePort | None = None,
    settings_store: SettingsStorePort | None = None,
    settings: AppSettings | None = None,
) -> BalanceSheetSession:
    """Return an unopened balance sheet session for user_id."""
    resolved = settings or AppSettings.from_env()
    return BalanceSheetSession(
        user_id,
        store or build_ledger_store(),
        settings_store or build_settings_store(resolved),
        logger=get_app_logger(),
        same_day_policy=resolved.same_day_policy,
        default_currency=resolved.default_currency,
        run_worker=resolved.auto_update_worker,
    )


__all__ = [
    "build_database_adapter",
    "build_ledger_store",
    "build_settings_store",
    "build_snapshot_manager",
    "build_recurring_scheduler",
    "build_net_worth_trend_use_case",
    "build_export_use_case",
    "build_session",
]
