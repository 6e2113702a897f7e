"""End-to-end tests for BalanceSheetSession on an in-memory ledger."""

from datetime import date
from decimal import Decimal

from src.application.ports.ledger_store import (
    SNAPSHOTS_TABLE,
    TRANSACTIONS_TABLE,
)
from src.application.use_cases.session import BalanceSheetSession
from src.infrastructure.db import SqlAlchemyDatabaseEngineAdapter
from src.infrastructure.ledger_store import SqlAlchemyLedgerStore


USER_ID = "user-1"
TODAY = date(2024, 3, 15)


def _session(ledger_store, settings_store, logger, **kwargs):
    return BalanceSheetSession(
        USER_ID,
        ledger_store,
        settings_store,
        logger=logger,
        today=lambda: TODAY,
        **kwargs,
    )


def _snapshots(ledger_store) -> list[dict]:
    return ledger_store.select_by_user(SNAPSHOTS_TABLE, USER_ID)


def test_full_cycle_keeps_totals_and_snapshot_consistent(
    ledger_store,
    settings_store,
    logger,
):
    """Manual edits and auto-updates should converge on one daily row."""
    session = _session(ledger_store, settings_store, logger)
    assert session.open().success
    facade = session.balance_sheet

    checking = facade.create_asset(
        {"name": "Checking", "type": "bank", "current_value": 1000}
    ).data
    assert facade.net_worth == Decimal("1000")
    assert len(_snapshots(ledger_store)) == 1

    facade.create_liability(
        {"name": "Credit Card", "type": "credit_card", "current_balance": 200}
    )
    assert facade.net_worth == Decimal("800")
    assert len(_snapshots(ledger_store)) == 1

    facade.set_auto_update_enabled(True)
    facade.set_primary_asset_id(checking.id)
    ledger_store.insert(
        TRANSACTIONS_TABLE,
        {
            "user_id": USER_ID,
            "type": "income",
            "amount": Decimal("300"),
            "category": "Salary",
            "date": TODAY,
        },
    )
    assert session.reactor.process_pending() == 1

    assert facade.assets[0].current_value == Decimal("1300")
    assert facade.net_worth == Decimal("1100")
    snapshots = _snapshots(ledger_store)
    assert len(snapshots) == 1
    assert snapshots[0]["total_assets"] == Decimal("1300")
    assert snapshots[0]["total_liabilities"] == Decimal("200")
    assert snapshots[0]["net_worth"] == Decimal("1100")
    session.close()


def test_open_records_daily_snapshot(ledger_store, settings_store, logger):
    session = _session(ledger_store, settings_store, logger)

    result = session.open()

    assert result.success
    assert result.data.net_worth == Decimal("0")
    assert len(_snapshots(ledger_store)) == 1
    assert session.is_open
    session.close()


def test_open_restores_persisted_settings(
    ledger_store,
    settings_store,
    logger,
):
    first = _session(ledger_store, settings_store, logger)
    first.open()
    first.balance_sheet.set_auto_update_enabled(True)
    first.close()

    second = _session(ledger_store, settings_store, logger)
    second.open()

    assert second.balance_sheet.auto_update_enabled is True
    second.close()


def test_close_stops_feed_and_clears_state(
    ledger_store,
    settings_store,
    logger,
):
    session = _session(ledger_store, settings_store, logger)
    session.open()
    session.balance_sheet.create_asset(
        {"name": "Checking", "type": "bank", "current_value": 10}
    )

    session.close()
    ledger_store.insert(
        TRANSACTIONS_TABLE,
        {"user_id": USER_ID, "type": "income", "amount": Decimal("5")},
    )

    assert session.user_id is None
    assert not session.is_open
    assert session.balance_sheet.assets == ()
    assert session.reactor.pending == 0
    assert not session.balance_sheet.create_asset(
        {"name": "Late", "type": "bank", "current_value": 1}
    ).success


def test_recurring_transactions_flow_into_balance(
    ledger_store,
    settings_store,
    logger,
):
    """Materialized recurring entries should reach the reactor."""
    with _session(ledger_store, settings_store, logger) as session:
        facade = session.balance_sheet
        facade.set_auto_update_enabled(True)
        session.recurring.create_recurring(
            USER_ID,
            {
                "type": "income",
                "category": "Salary",
                "amount": "2500",
                "frequency": "monthly",
                "start_date": "2024-02-01",
            },
        )

        created = session.recurring.materialize_due_transactions(USER_ID)

        assert len(created) == 1
        assert [a.name for a in facade.assets] == ["Cash"]
        assert facade.total_assets == Decimal("2500")


def test_background_worker_runs_while_open(
    ledger_store,
    settings_store,
    logger,
):
    session = _session(ledger_store, settings_store, logger, run_worker=True)
    session.open()
    assert session.reactor.running
    session.balance_sheet.set_auto_update_enabled(True)
    ledger_store.insert(
        TRANSACTIONS_TABLE,
        {"user_id": USER_ID, "type": "income", "amount": Decimal("40")},
    )

    session.reactor.stop()

    assert session.balance_sheet.total_assets == Decimal("40")
    session.close()
    assert not session.reactor.running


def test_reads_apply_queued_auto_updates(
    ledger_store,
    settings_store,
    logger,
):
    """Balance reads should reflect inserts without a worker thread."""
    session = _session(ledger_store, settings_store, logger)
    session.open()
    session.balance_sheet.set_auto_update_enabled(True)

    ledger_store.insert(
        TRANSACTIONS_TABLE,
        {"user_id": USER_ID, "type": "income", "amount": Decimal("40")},
    )

    assert session.balance_sheet.total_assets == Decimal("40")
    assert session.reactor.pending == 0
    session.close()


def test_inserts_from_another_writer_reach_session(
    sqlite_engine,
    ledger_store,
    settings_store,
    logger,
):
    session = _session(ledger_store, settings_store, logger)
    session.open()
    session.balance_sheet.set_auto_update_enabled(True)
    other_writer = SqlAlchemyLedgerStore(
        SqlAlchemyDatabaseEngineAdapter(sqlite_engine),
        logger=logger,
    )

    other_writer.insert(
        TRANSACTIONS_TABLE,
        {"user_id": USER_ID, "type": "income", "amount": Decimal("25")},
    )
    other_writer.insert(
        TRANSACTIONS_TABLE,
        {"user_id": USER_ID, "type": "expense", "amount": Decimal("5")},
    )

    assert session.balance_sheet.total_assets == Decimal("20")
    assert session.sync() == 0
    session.close()
