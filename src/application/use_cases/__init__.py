"""Application use cases package."""

from .results import OperationResult
from .balance_sheet_state import BalanceSheetState
from .balance_sheet_settings import BalanceSheetSettingsManager
from .manage_snapshots import (
    SnapshotManager,
    SAME_DAY_REFRESH,
    SAME_DAY_KEEP,
)
from .auto_update_balance import AutoUpdateReactor
from .balance_sheet import BalanceSheetService
from .recurring_scheduler import RecurringScheduler
from .get_net_worth_trend import GetNetWorthTrendUseCase
from .export_balance_sheet import ExportBalanceSheetUseCase
from .session import BalanceSheetSession

__all__ = [
    "OperationResult",
    "BalanceSheetState",
    "BalanceSheetSettingsManager",
    "SnapshotManager",
    "SAME_DAY_REFRESH",
    "SAME_DAY_KEEP",
    "AutoUpdateReactor",
    "BalanceSheetService",
    "RecurringScheduler",
    "GetNetWorthTrendUseCase",
    "ExportBalanceSheetUseCase",
    "BalanceSheetSession",
]
