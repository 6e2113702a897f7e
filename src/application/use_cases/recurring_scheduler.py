"""Use case scheduling recurring income and expenses.

Due recurring transactions are materialized into the transactions table,
the same table the auto-update reactor listens on, so scheduled entries
adjust the balance sheet exactly like manually entered ones.
"""

from collections.abc import Callable, Mapping
from datetime import date
from typing import Any

from src.application.ports.ledger_store import (
    RECURRING_TABLE,
    TRANSACTIONS_TABLE,
    Filter,
    LedgerStoreError,
    LedgerStorePort,
)
from src.application.use_cases.results import OperationResult
from src.domain.errors import NotAuthenticatedError, ValidationError
from src.domain.models import RecurringTransaction, Transaction
from src.domain.services.recurrence import (
    compute_next_occurrence,
    format_frequency,
)
from src.domain.services.validation import validate_recurring_fields
from src.infrastructure.logging.logger import get_app_logger


class RecurringScheduler:
    """Manage recurring templates and materialize due transactions."""

    def __init__(
        self,
        store: LedgerStorePort,
        logger=None,
        today: Callable[[], date] | None = None,
    ) -> None:
        """Initialize the scheduler.

        Args:
            store: Ledger store holding recurring and transaction tables.
            logger: Optional logger compatible with logging.Logger-like API.
            today: Optional clock returning the current date.
        """
        self._store = store
        self._logger = logger or get_app_logger()
        self._today = today or date.today

    @staticmethod
    def compute_next_occurrence(frequency: str, from_date: date) -> date:
        """Return the occurrence that follows from_date."""
        return compute_next_occurrence(frequency, from_date)

    def create_recurring(
        self,
        user_id: str | None,
        fields: Mapping[str, Any],
    ) -> OperationResult[RecurringTransaction]:
        """Validate and store a new recurring template.

        The start date counts as the first, already recorded occurrence;
        the schedule begins one period later.
        """
        if not user_id:
            return OperationResult.fail(str(NotAuthenticatedError()))
        try:
            row = validate_recurring_fields(fields)
        except ValidationError as exc:
            return OperationResult.fail(str(exc))
        row.update(
            {
                "user_id": user_id,
                "next_occurrence_date": compute_next_occurrence(
                    row["frequency"],
                    row["start_date"],
                ),
                "is_active": row.get("is_active", True),
            }
        )
        try:
            created = self._store.insert(RECURRING_TABLE, row)
        except LedgerStoreError as exc:
            return OperationResult.fail(
                f"Failed to create recurring transaction: {exc}"
            )
        recurring = RecurringTransaction.from_row(created)
        self._logger.info(
            f"{format_frequency(recurring.frequency)} "
            f"{recurring.transaction_type} '{recurring.category}' "
            f"scheduled from "
            f"{recurring.next_occurrence_date}"
        )
        return OperationResult.ok(recurring)

    def list_recurring(
        self,
        user_id: str,
    ) -> OperationResult[list[RecurringTransaction]]:
        """Return a user's recurring templates, next due first."""
        try:
            rows = self._store.select_by_user(
                RECURRING_TABLE,
                user_id,
                order_by="next_occurrence_date",
            )
        except LedgerStoreError as exc:
            return OperationResult.fail(
                f"Failed to fetch recurring transactions: {exc}"
            )
        return OperationResult.ok(
            [RecurringTransaction.from_row(row) for row in rows]
        )

    def get_recurring(
        self,
        recurring_id: str,
    ) -> OperationResult[RecurringTransaction]:
        try:
            row = self._store.select_one(RECURRING_TABLE, {"id": recurring_id})
        except LedgerStoreError as exc:
            return OperationResult.fail(
                f"Failed to fetch recurring transaction: {exc}"
            )
        if row is None:
            return OperationResult.fail("Recurring transaction not found")
        return OperationResult.ok(RecurringTransaction.from_row(row))

    def update_recurring(
        self,
        recurring_id: str,
        updates: Mapping[str, Any],
    ) -> OperationResult[RecurringTransaction]:
        """Apply a partial update.

        Changing the frequency or start date re-anchors the next occurrence
        one period after the start date, skipping dates already processed.
        """
        try:
            patch = validate_recurring_fields(updates, partial=True)
        except ValidationError as exc:
            return OperationResult.fail(str(exc))
        current = self.get_recurring(recurring_id)
        if not current.success:
            return current
        recurring = current.data
        if "frequency" in patch or "start_date" in patch:
            patch["next_occurrence_date"] = self._reanchor(
                patch.get("frequency", recurring.frequency),
                patch.get("start_date", recurring.start_date),
                recurring.last_processed_date,
            )
        try:
            row = self._store.update(RECURRING_TABLE, recurring_id, patch)
        except LedgerStoreError as exc:
            return OperationResult.fail(
                f"Failed to update recurring transaction: {exc}"
            )
        return OperationResult.ok(RecurringTransaction.from_row(row))

    def toggle_status(
        self,
        recurring_id: str,
        is_active: bool,
    ) -> OperationResult[RecurringTransaction]:
        return self.update_recurring(recurring_id, {"is_active": is_active})

    def delete_recurring(self, recurring_id: str) -> OperationResult[None]:
        try:
            self._store.delete(RECURRING_TABLE, recurring_id)
        except LedgerStoreError as exc:
            return OperationResult.fail(
                f"Failed to delete recurring transaction: {exc}"
            )
        return OperationResult.ok()

    def get_due(
        self,
        user_id: str,
        as_of: date | None = None,
    ) -> list[RecurringTransaction]:
        """Return active templates whose next occurrence is on or before as_of.

        Raises:
            LedgerStoreError: If the store read fails.
        """
        rows = self._store.select_by_user(
            RECURRING_TABLE,
            user_id,
            filters=[
                Filter("is_active", "eq", True),
                Filter("next_occurrence_date", "lte", as_of or self._today()),
            ],
            order_by="next_occurrence_date",
        )
        return [RecurringTransaction.from_row(row) for row in rows]

    def process_recurring(
        self,
        recurring: RecurringTransaction,
    ) -> tuple[Transaction, RecurringTransaction]:
        """Materialize one occurrence and advance the schedule.

        The transaction is dated on the occurrence being processed. The
        template is deactivated once its next occurrence passes end_date.

        Raises:
            LedgerStoreError: If either write fails.
        """
        occurrence = recurring.next_occurrence_date
        transaction_row = self._store.insert(
            TRANSACTIONS_TABLE,
            {
                "user_id": recurring.user_id,
                "type": recurring.transaction_type,
                "category": recurring.category,
                "amount": recurring.amount,
                "description": (
                    recurring.description
                    or f"Recurring: {recurring.category}"
                ),
                "date": occurrence,
                "recurring_id": recurring.id,
            },
        )
        next_occurrence = compute_next_occurrence(
            recurring.frequency,
            occurrence,
            anchor=recurring.start_date,
        )
        finished = (
            recurring.end_date is not None
            and next_occurrence > recurring.end_date
        )
        updated_row = self._store.update(
            RECURRING_TABLE,
            recurring.id,
            {
                "next_occurrence_date": next_occurrence,
                "last_processed_date": occurrence,
                "is_active": recurring.is_active and not finished,
            },
        )
        return (
            Transaction.from_row(transaction_row),
            RecurringTransaction.from_row(updated_row),
        )

    def materialize_due_transactions(
        self,
        user_id: str,
        as_of: date | None = None,
    ) -> list[Transaction]:
        """Insert every occurrence due up to as_of, catching up missed ones.

        A template that fails to process is logged and skipped; the others
        still run.

        Returns:
            list[Transaction]: Transactions inserted by this run.
        """
        target_date = as_of or self._today()
        try:
            due = self.get_due(user_id, target_date)
        except LedgerStoreError as exc:
            self._logger.error(
                f"Failed to fetch due recurring transactions: {exc}"
            )
            return []

        created: list[Transaction] = []
        for recurring in due:
            current = recurring
            try:
                while (
                    current.is_active
                    and current.next_occurrence_date <= target_date
                ):
                    transaction, current = self.process_recurring(current)
                    created.append(transaction)
            except LedgerStoreError as exc:
                self._logger.error(
                    f"Failed to process recurring transaction "
                    f"{recurring.id}: {exc}"
                )
        if created:
            self._logger.info(
                f"Materialized {len(created)} recurring transactions "
                f"up to {target_date}"
            )
        return created

    @staticmethod
    def _reanchor(
        frequency: str,
        start_date: date,
        last_processed: date | None,
    ) -> date:
        if last_processed is None or last_processed < start_date:
            return compute_next_occurrence(frequency, start_date)
        return compute_next_occurrence(
            frequency,
            last_processed,
            anchor=start_date,
        )


__all__ = ["RecurringScheduler"]
