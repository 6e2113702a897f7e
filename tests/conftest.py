"""Shared fixtures backed by an in-memory SQLite ledger."""

from datetime import date
from unittest.mock import MagicMock

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from src.infrastructure.db import SqlAlchemyDatabaseEngineAdapter
from src.infrastructure.ledger_store import SqlAlchemyLedgerStore
from src.infrastructure.ledger_tables import create_schema
from src.infrastructure.settings_store import InMemorySettingsStore


USER_ID = "user-1"
TODAY = date(2024, 3, 15)


@pytest.fixture
def logger() -> MagicMock:
    return MagicMock()


@pytest.fixture
def sqlite_engine():
    engine = create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
        future=True,
    )
    create_schema(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def ledger_store(sqlite_engine, logger) -> SqlAlchemyLedgerStore:
    return SqlAlchemyLedgerStore(
        SqlAlchemyDatabaseEngineAdapter(sqlite_engine),
        logger=logger,
    )


@pytest.fixture
def settings_store() -> InMemorySettingsStore:
    return InMemorySettingsStore()


@pytest.fixture
def today():
    return lambda: TODAY
