"""Tests for the process_recurring_cli adapter."""

from datetime import date
from decimal import Decimal
from unittest.mock import MagicMock

from src.adapters import process_recurring_cli
from src.domain.models import Transaction


def test_main_materializes_and_prints(monkeypatch, capsys):
    scheduler = MagicMock()
    scheduler.materialize_due_transactions.return_value = [
        Transaction(
            id="t1",
            user_id="user-1",
            transaction_type="expense",
            amount=Decimal("950"),
            category="Rent",
            transaction_date=date(2024, 3, 1),
        )
    ]
    monkeypatch.setattr(
        process_recurring_cli,
        "build_recurring_scheduler",
        lambda: scheduler,
    )
    monkeypatch.setattr(
        process_recurring_cli,
        "get_app_logger",
        lambda: MagicMock(),
    )
    monkeypatch.setattr(
        process_recurring_cli,
        "get_usage_logger",
        lambda: MagicMock(),
    )
    monkeypatch.setenv("BALANCE_USER_ID", "user-1")
    monkeypatch.setenv("RECURRING_AS_OF", "2024-03-15")

    process_recurring_cli.main()

    scheduler.materialize_due_transactions.assert_called_once_with(
        "user-1",
        date(2024, 3, 15),
    )
    out = capsys.readouterr().out
    assert "Created 1 recurring transactions." in out
    assert "2024-03-01 expense 950 Rent" in out


def test_main_rejects_invalid_date(monkeypatch):
    scheduler = MagicMock()
    logger = MagicMock()
    monkeypatch.setattr(
        process_recurring_cli,
        "build_recurring_scheduler",
        lambda: scheduler,
    )
    monkeypatch.setattr(
        process_recurring_cli,
        "get_app_logger",
        lambda: logger,
    )
    monkeypatch.setenv("BALANCE_USER_ID", "user-1")
    monkeypatch.setenv("RECURRING_AS_OF", "tomorrow")

    process_recurring_cli.main()

    scheduler.materialize_due_transactions.assert_not_called()
    logger.warning.assert_called_once()
