"""Tests for the SqlAlchemyLedgerStore on an in-memory SQLite engine."""

from datetime import date
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from src.application.ports.ledger_store import (
    ASSETS_TABLE,
    SNAPSHOTS_TABLE,
    TRANSACTIONS_TABLE,
    DuplicateRowError,
    Filter,
    LedgerStoreError,
    RowNotFoundError,
)
from src.infrastructure.db import SqlAlchemyDatabaseEngineAdapter
from src.infrastructure.ledger_store import SqlAlchemyLedgerStore


USER_ID = "user-1"


def _asset(name="Checking", value="100", user_id=USER_ID) -> dict:
    return {
        "user_id": user_id,
        "name": name,
        "type": "bank",
        "current_value": Decimal(value),
    }


def test_insert_assigns_id_and_timestamps(ledger_store) -> None:
    row = ledger_store.insert(ASSETS_TABLE, _asset())

    assert row["id"]
    assert row["created_at"] is not None
    assert row["updated_at"] is not None
    assert row["current_value"] == Decimal("100")
    assert row["currency"] == "USD"


def test_select_by_user_filters_orders_and_limits(ledger_store) -> None:
    ledger_store.insert(ASSETS_TABLE, _asset("A", "10"))
    ledger_store.insert(ASSETS_TABLE, _asset("B", "30"))
    ledger_store.insert(ASSETS_TABLE, _asset("C", "20"))
    ledger_store.insert(ASSETS_TABLE, _asset("Other", "99", "user-2"))

    rows = ledger_store.select_by_user(
        ASSETS_TABLE,
        USER_ID,
        filters=[Filter("current_value", "gte", Decimal("15"))],
        order_by="current_value",
        descending=True,
        limit=5,
    )

    assert [row["name"] for row in rows] == ["B", "C"]


def test_select_one_returns_none_when_missing(ledger_store) -> None:
    assert ledger_store.select_one(ASSETS_TABLE, {"id": "missing"}) is None


def test_update_applies_patch(ledger_store) -> None:
    row = ledger_store.insert(ASSETS_TABLE, _asset())

    updated = ledger_store.update(ASSETS_TABLE, row["id"], {"name": "Main"})

    assert updated["name"] == "Main"
    assert updated["current_value"] == Decimal("100")


def test_update_and_delete_missing_rows_raise(ledger_store) -> None:
    with pytest.raises(RowNotFoundError):
        ledger_store.update(ASSETS_TABLE, "missing", {"name": "x"})
    with pytest.raises(RowNotFoundError):
        ledger_store.delete(ASSETS_TABLE, "missing")


def test_delete_removes_row(ledger_store) -> None:
    row = ledger_store.insert(ASSETS_TABLE, _asset())

    ledger_store.delete(ASSETS_TABLE, row["id"])

    assert ledger_store.select_by_user(ASSETS_TABLE, USER_ID) == []


def test_increment_adds_delta_in_store(ledger_store) -> None:
    row = ledger_store.insert(ASSETS_TABLE, _asset(value="100"))

    ledger_store.increment(
        ASSETS_TABLE,
        row["id"],
        "current_value",
        Decimal("25.5"),
    )
    updated = ledger_store.increment(
        ASSETS_TABLE,
        row["id"],
        "current_value",
        Decimal("-200"),
    )

    assert updated["current_value"] == Decimal("-74.50")


def test_duplicate_snapshot_raises_duplicate_row(ledger_store) -> None:
    snapshot = {
        "user_id": USER_ID,
        "snapshot_date": date(2024, 3, 15),
        "total_assets": Decimal("1"),
        "total_liabilities": Decimal("0"),
        "net_worth": Decimal("1"),
    }
    ledger_store.insert(SNAPSHOTS_TABLE, snapshot)

    with pytest.raises(DuplicateRowError) as excinfo:
        ledger_store.insert(SNAPSHOTS_TABLE, snapshot)

    assert excinfo.value.code == "DUPLICATE_ROW"


def test_unknown_table_and_column_raise(ledger_store) -> None:
    with pytest.raises(LedgerStoreError):
        ledger_store.insert("accounts", {})
    with pytest.raises(LedgerStoreError):
        ledger_store.insert(ASSETS_TABLE, {**_asset(), "colour": "red"})


def test_subscribers_receive_own_inserts_only(ledger_store) -> None:
    received = []
    subscription = ledger_store.subscribe_inserts(
        TRANSACTIONS_TABLE,
        USER_ID,
        received.append,
    )

    ledger_store.insert(
        TRANSACTIONS_TABLE,
        {"user_id": USER_ID, "type": "income", "amount": Decimal("5")},
    )
    ledger_store.insert(
        TRANSACTIONS_TABLE,
        {"user_id": "user-2", "type": "income", "amount": Decimal("7")},
    )
    subscription.unsubscribe()
    subscription.unsubscribe()
    ledger_store.insert(
        TRANSACTIONS_TABLE,
        {"user_id": USER_ID, "type": "expense", "amount": Decimal("1")},
    )

    assert [row["amount"] for row in received] == [Decimal("5")]


def test_failing_subscriber_does_not_break_insert(ledger_store, logger):
    def _explode(row):
        raise RuntimeError("subscriber bug")

    ledger_store.subscribe_inserts(TRANSACTIONS_TABLE, USER_ID, _explode)

    row = ledger_store.insert(
        TRANSACTIONS_TABLE,
        {"user_id": USER_ID, "type": "income", "amount": Decimal("5")},
    )

    assert row["id"]
    logger.error.assert_called_once()


def _income(amount: str, user_id: str = USER_ID) -> dict:
    return {"user_id": user_id, "type": "income", "amount": Decimal(amount)}


def test_poll_delivers_inserts_from_other_writers(sqlite_engine, logger):
    """A second store on the same database stands in for another process."""
    store = SqlAlchemyLedgerStore(
        SqlAlchemyDatabaseEngineAdapter(sqlite_engine),
        logger=logger,
    )
    other = SqlAlchemyLedgerStore(
        SqlAlchemyDatabaseEngineAdapter(sqlite_engine),
        logger=logger,
    )
    other.insert(TRANSACTIONS_TABLE, _income("1"))
    received = []
    store.subscribe_inserts(TRANSACTIONS_TABLE, USER_ID, received.append)

    other.insert(TRANSACTIONS_TABLE, _income("5"))
    other.insert(TRANSACTIONS_TABLE, _income("7", user_id="user-2"))

    assert received == []
    assert store.poll_inserts() == 1
    assert store.poll_inserts() == 0
    assert [row["amount"] for row in received] == [Decimal("5")]


def test_pushed_rows_are_not_delivered_again_by_poll(ledger_store) -> None:
    received = []
    subscription = ledger_store.subscribe_inserts(
        TRANSACTIONS_TABLE,
        USER_ID,
        received.append,
    )

    ledger_store.insert(TRANSACTIONS_TABLE, _income("5"))

    assert subscription.poll() == 0
    assert len(received) == 1


def test_unsubscribed_feed_does_not_poll(sqlite_engine, ledger_store):
    received = []
    subscription = ledger_store.subscribe_inserts(
        TRANSACTIONS_TABLE,
        USER_ID,
        received.append,
    )
    subscription.unsubscribe()
    other = SqlAlchemyLedgerStore(
        SqlAlchemyDatabaseEngineAdapter(sqlite_engine),
        logger=MagicMock(),
    )
    other.insert(TRANSACTIONS_TABLE, _income("5"))

    assert subscription.poll() == 0
    assert ledger_store.poll_inserts() == 0
    assert received == []


def test_subscribe_to_unknown_table_raises(ledger_store) -> None:
    with pytest.raises(LedgerStoreError):
        ledger_store.subscribe_inserts("missing", USER_ID, print)
