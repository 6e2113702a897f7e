"""SQLAlchemy-backed ledger store with a table-observing insert feed."""

import threading
import uuid
from collections.abc import Mapping, Sequence
from datetime import datetime, timedelta, timezone
from typing import Any

from sqlalchemy import Table, and_, delete, func, insert, select, update
from sqlalchemy.engine import Connection
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from src.application.ports.database import DatabaseEnginePort
from src.application.ports.ledger_store import (
    DuplicateRowError,
    Filter,
    InsertCallback,
    LedgerStoreError,
    LedgerStorePort,
    Row,
    RowNotFoundError,
)
from src.infrastructure.ledger_tables import metadata
from src.infrastructure.logging.logger import get_app_logger


DEFAULT_POLL_LOOKBACK = timedelta(seconds=30)


class _InsertSubscription:
    """Insert feed of one (table, user) pair for one callback.

    Rows written through the owning store are pushed as soon as they
    commit. Rows written by other store instances or other processes are
    picked up by poll(), which reads the table past a created_at
    watermark. Each row id is delivered at most once.
    """

    def __init__(
        self,
        store: "SqlAlchemyLedgerStore",
        table: str,
        user_id: str,
        callback: InsertCallback,
        lookback: timedelta,
    ) -> None:
        self._store = store
        self._table = table
        self._user_id = user_id
        self._callback = callback
        self._lookback = lookback
        self._lock = threading.Lock()
        self._watermark: datetime | None = None
        self._seen: dict[str, datetime | None] = {}
        self._active = True

    @property
    def key(self) -> tuple[str, str]:
        return (self._table, self._user_id)

    @property
    def active(self) -> bool:
        return self._active

    def unsubscribe(self) -> None:
        if self._active:
            self._active = False
            self._store._remove_subscriber(self)

    def mark_existing(self) -> None:
        """Record the rows already in the table so they are never sent."""
        latest = self._store._latest_created_at(self._table, self._user_id)
        if latest is None:
            return
        rows = self._store._rows_since(
            self._table,
            self._user_id,
            latest - self._lookback,
        )
        with self._lock:
            for row in rows:
                self._remember(row)

    def deliver(self, row: Row) -> bool:
        """Send a row to the callback unless it was already delivered."""
        with self._lock:
            if not self._active or row["id"] in self._seen:
                return False
            self._remember(row)
        self._callback(dict(row))
        return True

    def poll(self) -> int:
        """Deliver rows committed since the last poll.

        Returns:
            int: Number of rows handed to the callback.

        Raises:
            LedgerStoreError: If the table read fails.
        """
        if not self._active:
            return 0
        with self._lock:
            since = (
                self._watermark - self._lookback
                if self._watermark is not None
                else None
            )
        delivered = 0
        for row in self._store._rows_since(self._table, self._user_id, since):
            try:
                if self.deliver(row):
                    delivered += 1
            except Exception as exc:
                self._store._log_subscriber_error(self._table, row, exc)
        self._prune()
        return delivered

    def _remember(self, row: Row) -> None:
        created_at = row.get("created_at")
        self._seen[row["id"]] = created_at
        if created_at is not None and (
            self._watermark is None or created_at > self._watermark
        ):
            self._watermark = created_at

    def _prune(self) -> None:
        with self._lock:
            if self._watermark is None:
                return
            horizon = self._watermark - self._lookback
            self._seen = {
                row_id: created_at
                for row_id, created_at in self._seen.items()
                if created_at is None or created_at >= horizon
            }


class SqlAlchemyLedgerStore(LedgerStorePort):
    """Ledger store over the SQLAlchemy Core ledger tables.

    Identifiers and timestamps are assigned on insert. Rows inserted through
    this store are pushed to matching subscribers once the write commits;
    rows inserted by any other writer reach them on the next poll.
    """

    def __init__(
        self,
        db_port: DatabaseEnginePort,
        logger=None,
        poll_lookback: timedelta = DEFAULT_POLL_LOOKBACK,
    ) -> None:
        """Initialize the store.

        Args:
            db_port: Port providing access to the ledger engine.
            logger: Optional logger compatible with logging.Logger-like API.
            poll_lookback: How far behind the newest seen created_at a poll
                reads, covering writers whose commits land out of order.
        """
        self._db_port = db_port
        self._logger = logger or get_app_logger()
        self._poll_lookback = poll_lookback
        self._subscribers: dict[
            tuple[str, str], list[_InsertSubscription]
        ] = {}
        self._subscribers_lock = threading.Lock()

    def insert(self, table: str, row: Mapping[str, Any]) -> Row:
        """Insert a row and return it as stored.

        Raises:
            DuplicateRowError: If a unique constraint is violated.
            LedgerStoreError: If the write fails for any other reason.
        """
        target = self._table(table)
        values = self._values(target, row)
        now = datetime.now(timezone.utc)
        values.setdefault("id", str(uuid.uuid4()))
        for column in ("created_at", "updated_at"):
            if column in target.c:
                values.setdefault(column, now)
        try:
            with self._begin() as conn:
                conn.execute(insert(target).values(**values))
                stored = self._fetch(conn, target, values["id"])
        except IntegrityError as exc:
            message = str(exc.orig)
            if "unique" in message.lower() or "duplicate" in message.lower():
                raise DuplicateRowError(
                    f"Duplicate row in {table}",
                    "DUPLICATE_ROW",
                    message,
                ) from exc
            raise LedgerStoreError(
                f"Integrity error on {table}: {message}",
                "INTEGRITY_ERROR",
                message,
            ) from exc
        except SQLAlchemyError as exc:
            raise self._wrap(f"Failed to insert into {table}", exc) from exc
        self._notify(table, stored)
        return stored

    def select_by_user(
        self,
        table: str,
        user_id: str,
        filters: Sequence[Filter] | None = None,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[Row]:
        target = self._table(table)
        conditions = [target.c.user_id == user_id]
        for item in filters or ():
            column = self._column(target, item.column)
            if item.op == "eq":
                conditions.append(column == item.value)
            elif item.op == "gte":
                conditions.append(column >= item.value)
            else:
                conditions.append(column <= item.value)
        query = select(target).where(and_(*conditions))
        if order_by:
            column = self._column(target, order_by)
            query = query.order_by(column.desc() if descending else column)
        if limit is not None:
            query = query.limit(limit)
        try:
            with self._connect() as conn:
                rows = conn.execute(query).mappings().all()
        except SQLAlchemyError as exc:
            raise self._wrap(f"Failed to read {table}", exc) from exc
        return [dict(row) for row in rows]

    def select_one(
        self,
        table: str,
        predicate: Mapping[str, Any],
    ) -> Row | None:
        target = self._table(table)
        conditions = [
            self._column(target, name) == value
            for name, value in predicate.items()
        ]
        query = select(target).where(and_(*conditions)).limit(1)
        try:
            with self._connect() as conn:
                row = conn.execute(query).mappings().first()
        except SQLAlchemyError as exc:
            raise self._wrap(f"Failed to read {table}", exc) from exc
        return dict(row) if row is not None else None

    def update(
        self,
        table: str,
        row_id: str,
        patch: Mapping[str, Any],
    ) -> Row:
        """Apply a partial update and return the updated row.

        Raises:
            RowNotFoundError: If no row has the identifier.
            LedgerStoreError: If the write fails.
        """
        target = self._table(table)
        values = self._values(target, patch)
        values.pop("id", None)
        if "updated_at" in target.c:
            values["updated_at"] = datetime.now(timezone.utc)
        statement = (
            update(target).where(target.c.id == row_id).values(**values)
        )
        return self._write_and_fetch(table, target, row_id, statement)

    def delete(self, table: str, row_id: str) -> None:
        target = self._table(table)
        try:
            with self._begin() as conn:
                result = conn.execute(
                    delete(target).where(target.c.id == row_id)
                )
        except SQLAlchemyError as exc:
            raise self._wrap(f"Failed to delete from {table}", exc) from exc
        if result.rowcount == 0:
            raise RowNotFoundError(
                f"Row {row_id} not found in {table}",
                "NOT_FOUND",
            )

    def increment(
        self,
        table: str,
        row_id: str,
        column: str,
        delta,
    ) -> Row:
        """Add delta to a numeric column in a single UPDATE statement."""
        target = self._table(table)
        target_column = self._column(target, column)
        values = {column: target_column + delta}
        if "updated_at" in target.c:
            values["updated_at"] = datetime.now(timezone.utc)
        statement = (
            update(target).where(target.c.id == row_id).values(**values)
        )
        return self._write_and_fetch(table, target, row_id, statement)

    def subscribe_inserts(
        self,
        table: str,
        user_id: str,
        callback: InsertCallback,
    ) -> _InsertSubscription:
        """Deliver rows inserted into table for user_id to callback.

        Rows present when the subscription starts are not delivered.

        Raises:
            LedgerStoreError: If the table has no created_at column or the
                initial read fails.
        """
        target = self._table(table)
        self._column(target, "created_at")
        subscription = _InsertSubscription(
            self,
            table,
            user_id,
            callback,
            self._poll_lookback,
        )
        subscription.mark_existing()
        with self._subscribers_lock:
            self._subscribers.setdefault(subscription.key, []).append(
                subscription
            )
        self._logger.debug(f"Subscribed to inserts on {table} for {user_id}")
        return subscription

    def poll_inserts(self) -> int:
        """Poll every active subscription for rows written elsewhere."""
        with self._subscribers_lock:
            subscriptions = [
                subscription
                for group in self._subscribers.values()
                for subscription in group
            ]
        return sum(subscription.poll() for subscription in subscriptions)

    def _remove_subscriber(self, subscription: _InsertSubscription) -> None:
        with self._subscribers_lock:
            group = self._subscribers.get(subscription.key, [])
            if subscription in group:
                group.remove(subscription)
            if not group:
                self._subscribers.pop(subscription.key, None)

    def _notify(self, table: str, row: Row) -> None:
        key = (table, row.get("user_id"))
        with self._subscribers_lock:
            subscriptions = list(self._subscribers.get(key, ()))
        for subscription in subscriptions:
            try:
                subscription.deliver(row)
            except Exception as exc:
                self._log_subscriber_error(table, row, exc)

    def _log_subscriber_error(
        self,
        table: str,
        row: Row,
        exc: Exception,
    ) -> None:
        self._logger.error(
            f"Insert subscriber failed for {table} row "
            f"{row.get('id')}: {exc}"
        )

    def _latest_created_at(self, table: str, user_id: str):
        target = self._table(table)
        query = select(func.max(target.c.created_at)).where(
            target.c.user_id == user_id
        )
        try:
            with self._connect() as conn:
                return conn.execute(query).scalar()
        except SQLAlchemyError as exc:
            raise self._wrap(f"Failed to read {table}", exc) from exc

    def _rows_since(
        self,
        table: str,
        user_id: str,
        since: datetime | None,
    ) -> list[Row]:
        target = self._table(table)
        conditions = [target.c.user_id == user_id]
        if since is not None:
            conditions.append(target.c.created_at >= since)
        query = (
            select(target)
            .where(and_(*conditions))
            .order_by(target.c.created_at, target.c.id)
        )
        try:
            with self._connect() as conn:
                rows = conn.execute(query).mappings().all()
        except SQLAlchemyError as exc:
            raise self._wrap(f"Failed to read {table}", exc) from exc
        return [dict(row) for row in rows]

    def _write_and_fetch(
        self,
        table: str,
        target: Table,
        row_id: str,
        statement,
    ) -> Row:
        try:
            with self._begin() as conn:
                result = conn.execute(statement)
                if result.rowcount == 0:
                    raise RowNotFoundError(
                        f"Row {row_id} not found in {table}",
                        "NOT_FOUND",
                    )
                return self._fetch(conn, target, row_id)
        except IntegrityError as exc:
            raise DuplicateRowError(
                f"Duplicate row in {table}",
                "DUPLICATE_ROW",
                str(exc.orig),
            ) from exc
        except SQLAlchemyError as exc:
            raise self._wrap(f"Failed to update {table}", exc) from exc

    @staticmethod
    def _fetch(conn: Connection, target: Table, row_id: str) -> Row:
        row = (
            conn.execute(select(target).where(target.c.id == row_id))
            .mappings()
            .one()
        )
        return dict(row)

    def _connect(self):
        return self._db_port.get_ledger_engine().connect()

    def _begin(self):
        return self._db_port.get_ledger_engine().begin()

    @staticmethod
    def _table(name: str) -> Table:
        target = metadata.tables.get(name)
        if target is None:
            raise LedgerStoreError(f"Unknown table: {name}", "UNKNOWN_TABLE")
        return target

    @staticmethod
    def _column(target: Table, name: str):
        if name not in target.c:
            raise LedgerStoreError(
                f"Unknown column {name} on {target.name}",
                "UNKNOWN_COLUMN",
            )
        return target.c[name]

    @classmethod
    def _values(cls, target: Table, row: Mapping[str, Any]) -> dict[str, Any]:
        for name in row:
            cls._column(target, name)
        return dict(row)

    @staticmethod
    def _wrap(message: str, exc: SQLAlchemyError) -> LedgerStoreError:
        return LedgerStoreError(f"{message}: {exc}", "STORE_ERROR", exc)


__all__ = ["DEFAULT_POLL_LOOKBACK", "SqlAlchemyLedgerStore"]
