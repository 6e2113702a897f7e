"""Tests for the SnapshotManager use case."""

from datetime import date
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from src.application.ports.ledger_store import (
    ASSETS_TABLE,
    LIABILITIES_TABLE,
    SNAPSHOTS_TABLE,
    DuplicateRowError,
    LedgerStoreError,
)
from src.application.use_cases.manage_snapshots import (
    SAME_DAY_KEEP,
    SnapshotManager,
)
from src.domain.models import NetWorthSummary


USER_ID = "user-1"
TODAY = date(2024, 3, 15)


def _totals(assets: str, liabilities: str) -> NetWorthSummary:
    return NetWorthSummary(
        total_assets=Decimal(assets),
        total_liabilities=Decimal(liabilities),
        net_worth=Decimal(assets) - Decimal(liabilities),
    )


def _snapshot_row(**overrides) -> dict:
    row = {
        "id": "snap-1",
        "user_id": USER_ID,
        "snapshot_date": TODAY,
        "total_assets": Decimal("100"),
        "total_liabilities": Decimal("40"),
        "net_worth": Decimal("60"),
    }
    row.update(overrides)
    return row


def test_ensure_daily_snapshot_creates_one_row_per_day(
    ledger_store,
    logger,
) -> None:
    """Repeated calls on the same day should keep a single snapshot."""
    manager = SnapshotManager(ledger_store, logger=logger, today=lambda: TODAY)

    first = manager.ensure_daily_snapshot(USER_ID, _totals("100", "40"))
    second = manager.ensure_daily_snapshot(USER_ID, _totals("150", "40"))

    assert first is True
    assert second is False
    rows = ledger_store.select_by_user(SNAPSHOTS_TABLE, USER_ID)
    assert len(rows) == 1
    assert rows[0]["snapshot_date"] == TODAY


def test_refresh_policy_updates_same_day_totals(ledger_store, logger) -> None:
    """The refresh policy should carry the latest totals of the day."""
    manager = SnapshotManager(ledger_store, logger=logger, today=lambda: TODAY)

    manager.ensure_daily_snapshot(USER_ID, _totals("100", "40"))
    manager.ensure_daily_snapshot(USER_ID, _totals("150", "40"))

    snapshot = manager.list_snapshots(USER_ID)[0]
    assert snapshot.total_assets == Decimal("150")
    assert snapshot.net_worth == Decimal("110")


def test_keep_policy_leaves_first_snapshot(ledger_store, logger) -> None:
    manager = SnapshotManager(
        ledger_store,
        logger=logger,
        today=lambda: TODAY,
        same_day_policy=SAME_DAY_KEEP,
    )

    manager.ensure_daily_snapshot(USER_ID, _totals("100", "40"))
    manager.ensure_daily_snapshot(USER_ID, _totals("150", "40"))

    snapshot = manager.list_snapshots(USER_ID)[0]
    assert snapshot.total_assets == Decimal("100")
    assert snapshot.net_worth == Decimal("60")


def test_snapshots_are_scoped_per_user_and_day(ledger_store, logger) -> None:
    manager = SnapshotManager(ledger_store, logger=logger, today=lambda: TODAY)

    assert manager.ensure_daily_snapshot(USER_ID, _totals("1", "0"))
    assert manager.ensure_daily_snapshot("user-2", _totals("2", "0"))
    assert manager.ensure_daily_snapshot(
        USER_ID,
        _totals("3", "0"),
        snapshot_date=date(2024, 3, 16),
    )

    dates = [s.snapshot_date for s in manager.list_snapshots(USER_ID)]
    assert dates == [date(2024, 3, 16), TODAY]


def test_unknown_policy_is_rejected() -> None:
    with pytest.raises(ValueError):
        SnapshotManager(MagicMock(), logger=MagicMock(), same_day_policy="x")


def test_ensure_daily_snapshot_store_failure_is_non_fatal() -> None:
    """Store errors should be logged and reported as False."""
    store = MagicMock()
    store.select_one.side_effect = LedgerStoreError("connection lost")
    logger = MagicMock()
    manager = SnapshotManager(store, logger=logger, today=lambda: TODAY)

    created = manager.ensure_daily_snapshot(USER_ID, _totals("1", "0"))

    assert created is False
    logger.warning.assert_called_once()
    assert "connection lost" in logger.warning.call_args[0][0]


def test_duplicate_insert_reuses_concurrent_snapshot() -> None:
    """Losing the insert race should fall back to the existing row."""
    store = MagicMock()
    store.select_one.side_effect = [None, _snapshot_row()]
    store.insert.side_effect = DuplicateRowError("duplicate")
    manager = SnapshotManager(
        store,
        logger=MagicMock(),
        today=lambda: TODAY,
    )

    created = manager.ensure_daily_snapshot(USER_ID, _totals("100", "40"))

    assert created is False
    store.update.assert_not_called()


def test_duplicate_insert_refreshes_changed_totals() -> None:
    store = MagicMock()
    store.select_one.side_effect = [None, _snapshot_row()]
    store.insert.side_effect = DuplicateRowError("duplicate")
    store.update.return_value = _snapshot_row(
        total_assets=Decimal("120"),
        net_worth=Decimal("80"),
    )
    manager = SnapshotManager(
        store,
        logger=MagicMock(),
        today=lambda: TODAY,
    )

    manager.ensure_daily_snapshot(USER_ID, _totals("120", "40"))

    store.update.assert_called_once_with(
        SNAPSHOTS_TABLE,
        "snap-1",
        {
            "total_assets": Decimal("120"),
            "total_liabilities": Decimal("40"),
            "net_worth": Decimal("80"),
        },
    )


def test_create_snapshot_uses_live_store_totals(ledger_store, logger) -> None:
    """Explicit snapshots should recompute totals from the store."""
    ledger_store.insert(
        ASSETS_TABLE,
        {
            "user_id": USER_ID,
            "name": "Checking",
            "type": "bank",
            "current_value": Decimal("500"),
        },
    )
    ledger_store.insert(
        LIABILITIES_TABLE,
        {
            "user_id": USER_ID,
            "name": "Visa",
            "type": "credit_card",
            "current_balance": Decimal("120.50"),
        },
    )
    manager = SnapshotManager(ledger_store, logger=logger, today=lambda: TODAY)

    result = manager.create_snapshot(USER_ID)

    assert result.success
    assert result.data.snapshot_date == TODAY
    assert result.data.total_assets == Decimal("500")
    assert result.data.total_liabilities == Decimal("120.50")
    assert result.data.net_worth == Decimal("379.50")


def test_create_snapshot_surfaces_store_failure() -> None:
    store = MagicMock()
    store.select_by_user.side_effect = LedgerStoreError("boom")
    manager = SnapshotManager(store, logger=MagicMock(), today=lambda: TODAY)

    result = manager.create_snapshot(USER_ID)

    assert not result.success
    assert result.error == "Failed to create snapshot: boom"


def test_create_snapshot_requires_user() -> None:
    manager = SnapshotManager(MagicMock(), logger=MagicMock())

    result = manager.create_snapshot(None)

    assert not result.success
