"""Use case exporting a balance sheet as a CSV document.

The document has three blocks separated by blank lines: a SUMMARY with the
totals, the ASSETS table, and the LIABILITIES table. Field quoting is left
to the csv module.
"""

import csv
import io
from collections.abc import Callable, Sequence
from datetime import date, datetime
from decimal import Decimal
from pathlib import Path

from src.application.ports.ledger_store import (
    LedgerStoreError,
    LedgerStorePort,
)
from src.application.use_cases.balance_sheet_state import BalanceSheetState
from src.application.use_cases.results import OperationResult
from src.domain.errors import NotAuthenticatedError
from src.domain.models import Asset, Liability, NetWorthSummary
from src.infrastructure.logging.logger import get_app_logger


ASSET_COLUMNS = (
    "Name",
    "Type",
    "Value",
    "Currency",
    "Description",
    "Last Updated",
)
LIABILITY_COLUMNS = (
    "Name",
    "Type",
    "Balance",
    "Interest Rate",
    "Currency",
    "Description",
    "Last Updated",
)


def format_currency(amount: Decimal) -> str:
    return f"${amount:,.2f}"


def format_type(value: str) -> str:
    """Turn a snake_case type into a title ("credit_card" -> "Credit Card")."""
    return " ".join(word[:1].upper() + word[1:] for word in value.split("_"))


def _format_updated(value: datetime | None) -> str:
    if value is None:
        return ""
    return f"{value:%b} {value.day}, {value.year}"


def _format_rate(rate: Decimal | None) -> str:
    if not rate:
        return "N/A"
    return f"{rate}%"


def generate_balance_sheet_csv(
    assets: Sequence[Asset],
    liabilities: Sequence[Liability],
    totals: NetWorthSummary,
    exported_on: date,
) -> str:
    """Render assets, liabilities and totals as CSV text.

    Args:
        assets: Assets in display order.
        liabilities: Liabilities in display order.
        totals: Totals shown in the summary block.
        exported_on: Date printed in the title line.

    Returns:
        str: CSV document with newline line endings.
    """
    output = io.StringIO()
    writer = csv.writer(output, lineterminator="\n")
    writer.writerow(
        [
            f"Balance Sheet Export - {exported_on:%B} "
            f"{exported_on.day}, {exported_on.year}"
        ]
    )
    writer.writerow([])

    writer.writerow(["SUMMARY"])
    writer.writerow(["Total Assets", format_currency(totals.total_assets)])
    writer.writerow(
        ["Total Liabilities", format_currency(totals.total_liabilities)]
    )
    writer.writerow(["Net Worth", format_currency(totals.net_worth)])
    writer.writerow([])

    writer.writerow(["ASSETS"])
    writer.writerow(ASSET_COLUMNS)
    for asset in assets:
        writer.writerow(
            [
                asset.name,
                format_type(asset.asset_type),
                f"{asset.current_value:.2f}",
                asset.currency,
                asset.description or "",
                _format_updated(asset.updated_at),
            ]
        )
    writer.writerow([])

    writer.writerow(["LIABILITIES"])
    writer.writerow(LIABILITY_COLUMNS)
    for liability in liabilities:
        writer.writerow(
            [
                liability.name,
                format_type(liability.liability_type),
                f"{liability.current_balance:.2f}",
                _format_rate(liability.interest_rate),
                liability.currency,
                liability.description or "",
                _format_updated(liability.updated_at),
            ]
        )
    return output.getvalue()


class ExportBalanceSheetUseCase:
    """Write a user's current balance sheet to a dated CSV file."""

    def __init__(
        self,
        store: LedgerStorePort,
        logger=None,
        today: Callable[[], date] | None = None,
    ) -> None:
        """Initialize the use case.

        Args:
            store: Ledger store holding the assets and liabilities tables.
            logger: Optional logger compatible with logging.Logger-like API.
            today: Optional clock returning the current date.
        """
        self._store = store
        self._logger = logger or get_app_logger()
        self._today = today or date.today

    def execute(
        self,
        user_id: str | None,
        directory: Path,
    ) -> OperationResult[Path]:
        """Export the user's balance sheet into directory.

        The file is named balance-sheet-YYYY-MM-DD.csv after the export
        date; an existing file of the same name is replaced.

        Returns:
            OperationResult[Path]: Path of the written file on success.
        """
        if not user_id:
            return OperationResult.fail(str(NotAuthenticatedError()))
        state = BalanceSheetState(user_id)
        try:
            state.reload(self._store)
        except LedgerStoreError as exc:
            message = f"Failed to export balance sheet: {exc}"
            self._logger.error(message)
            return OperationResult.fail(message)

        exported_on = self._today()
        content = generate_balance_sheet_csv(
            state.assets,
            state.liabilities,
            state.totals,
            exported_on,
        )
        path = Path(directory) / f"balance-sheet-{exported_on.isoformat()}.csv"
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        except OSError as exc:
            message = f"Failed to export balance sheet: {exc}"
            self._logger.error(message)
            return OperationResult.fail(message)
        self._logger.info(
            f"Balance sheet exported to {path}: {len(state.assets)} assets, "
            f"{len(state.liabilities)} liabilities"
        )
        return OperationResult.ok(path)


__all__ = [
    "ASSET_COLUMNS",
    "LIABILITY_COLUMNS",
    "ExportBalanceSheetUseCase",
    "format_currency",
    "format_type",
    "generate_balance_sheet_csv",
]
