#
# SPDX-License-Identifier: AGPL-3.0-only
# Copyright (c) 2026 m2-eng
# Author: m2-eng
# Co-Author: GitHub Copilot
# License: GNU Affero General Public License v3.0 (AGPL-3.0-only)
# Purpose: Logical per-caller session and the autodisconnect policy.
#
"""
Logical per-caller session and the autodisconnect policy.

A Session outlives its physical connection: a pooled session hands its
connection back to the pool after every unit of work and gets a new one
attached by the registry when it is needed again.
"""

import logging
import threading
from enum import Enum
from typing import Any, Callable, Hashable, Optional, Sequence

from mysql.connector import Error

from sqlwrapper.connection.statement import RowCursor, StatementExecution, count_placeholders
from sqlwrapper.database.base import DatabaseInfo
from sqlwrapper.errors import ConnectionFailure, NoActiveConnection, StatementError, TransactionError
from sqlwrapper.utils import close_quietly

logger = logging.getLogger(__name__)


class ConnectionEvent(Enum):
    """Notifications a session sends to its registry."""
    CLOSE = "close"
    AUTO_DISCONNECT = "auto-disconnect"


class ReleaseEvent(Enum):
    """Points at which a pooled connection may go back to the pool."""
    END_OF_CURSOR = "end-of-cursor"
    NO_RESULT_SET = "no-result-set"
    COMMIT = "commit"
    ROLLBACK = "rollback"
    AUTOCOMMIT_ON = "autocommit-on"

    @property
    def transactional(self) -> bool:
        return self in (ReleaseEvent.COMMIT, ReleaseEvent.ROLLBACK, ReleaseEvent.AUTOCOMMIT_ON)


def should_autodisconnect(event: ReleaseEvent, enabled: bool, autocommit: bool) -> bool:
    """
    Autodisconnect policy.

    Transactional events end a unit of work, so they release whenever
    autodisconnect is enabled. A statement without result set or an
    exhausted cursor only ends a unit of work outside a transaction.
    """
    if event.transactional:
        return enabled
    return enabled and autocommit


class AutodisconnectCoordinator:
    """Applies should_autodisconnect to one session."""

    def __init__(self, session: "Session", enabled: bool):
        self._session = session
        self.enabled = enabled

    def notify(self, event: ReleaseEvent) -> bool:
        if not self.enabled:
            return False
        if should_autodisconnect(event, self.enabled, self._session.autocommit_enabled()):
            logger.debug("Autodisconnect of caller '%s' after %s", self._session.caller_id, event.value)
            self._session.auto_disconnect()
            return True
        return False

    def end_of_cursor(self) -> bool:
        return self.notify(ReleaseEvent.END_OF_CURSOR)

    def no_result_set(self) -> bool:
        return self.notify(ReleaseEvent.NO_RESULT_SET)

    def commit(self) -> bool:
        return self.notify(ReleaseEvent.COMMIT)

    def rollback(self) -> bool:
        return self.notify(ReleaseEvent.ROLLBACK)

    def autocommit_on(self) -> bool:
        return self.notify(ReleaseEvent.AUTOCOMMIT_ON)


class Session:
    """
    One caller's connection.

    Args:
        caller_id: Identity of the caller owning the session
        connection: Physical connection handle
        dialect: Brand specific helper
        pooled: True if the connection comes from the pool
        on_event: Callback receiving (session, ConnectionEvent)
        autodisconnect: Release the connection after each unit of work
            (only honoured for pooled sessions)
    """

    def __init__(
        self,
        caller_id: Hashable,
        connection,
        dialect: DatabaseInfo,
        pooled: bool,
        on_event: Optional[Callable[["Session", ConnectionEvent], None]] = None,
        autodisconnect: bool = False,
    ):
        self.caller_id = caller_id
        self.dialect = dialect
        self.pooled = pooled
        self.coordinator = AutodisconnectCoordinator(self, pooled and autodisconnect)
        self._connection = connection
        self._statement: Optional[StatementExecution] = None
        self._on_event = on_event
        self._closed = False
        self._lock = threading.RLock()

    @property
    def connection(self):
        return self._connection

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def statement(self) -> Optional[StatementExecution]:
        return self._statement

    @property
    def cursor(self) -> Optional[RowCursor]:
        statement = self._statement
        return statement.cursor if statement is not None else None

    @property
    def row_count(self) -> int:
        statement = self._statement
        return statement.row_count if statement is not None else -1

    def is_connected(self) -> bool:
        connection = self._connection
        if connection is None:
            return False
        try:
            return bool(connection.is_connected())
        except Exception as e:
            logger.debug("Connection probe failed for caller '%s': %s", self.caller_id, e)
            return False

    def attach(self, connection) -> None:
        """Attaches a freshly acquired pooled connection, in autocommit mode."""
        with self._lock:
            previous, self._connection = self._connection, connection
        if previous is not None and previous is not connection:
            close_quietly(previous, "replaced connection")
        try:
            connection.autocommit = True
        except Error as e:
            with self._lock:
                self._connection = None
            close_quietly(connection, "pooled connection")
            raise ConnectionFailure(f"Could not prepare pooled connection: {e}") from e

    def close(self) -> None:
        """Closes statement and connection and tells the registry. Idempotent."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            statement, self._statement = self._statement, None
            connection, self._connection = self._connection, None
        if statement is not None:
            statement.close()
        if connection is not None:
            close_quietly(connection, f"connection of caller '{self.caller_id}'")
        logger.debug("Session of caller '%s' closed", self.caller_id)
        self._emit(ConnectionEvent.CLOSE)

    def auto_disconnect(self) -> None:
        """Releases only the physical connection; statement and registration stay."""
        with self._lock:
            connection, self._connection = self._connection, None
        if connection is None:
            return
        close_quietly(connection, f"connection of caller '{self.caller_id}'")
        self._emit(ConnectionEvent.AUTO_DISCONNECT)

    def create_statement(self, sql: str, parameters: Optional[Sequence[Any]] = None) -> StatementExecution:
        """
        Replaces the current statement with a new one.

        Raises:
            StatementError: Parameter count does not match the placeholders
            NoActiveConnection: No physical connection attached
        """
        with self._lock:
            previous, self._statement = self._statement, None
        if previous is not None:
            previous.close()

        if self._connection is None:
            raise NoActiveConnection(f"No active connection for caller '{self.caller_id}'")

        parameters = list(parameters or [])
        expected = count_placeholders(sql)
        if expected != len(parameters):
            raise StatementError(
                f"Statement expects {expected} parameter(s) but {len(parameters)} were given"
            )

        statement = StatementExecution(self, sql, parameters)
        self._statement = statement
        return statement

    def start_transaction(self) -> None:
        self.autocommit_off()

    def commit(self) -> None:
        connection = self._require_connection()
        if self.autocommit_enabled():
            raise TransactionError("Cannot commit: no transaction in progress (autocommit is enabled)")
        try:
            connection.commit()
        except Error as e:
            raise TransactionError(f"Commit failed: {e}") from e
        self.coordinator.commit()

    def rollback(self) -> None:
        connection = self._require_connection()
        if self.autocommit_enabled():
            raise TransactionError("Cannot roll back: no transaction in progress (autocommit is enabled)")
        try:
            connection.rollback()
        except Error as e:
            raise TransactionError(f"Rollback failed: {e}") from e
        self.coordinator.rollback()

    def autocommit_on(self) -> None:
        self._set_autocommit(True)
        self.coordinator.autocommit_on()

    def autocommit_off(self) -> None:
        self._set_autocommit(False)

    def autocommit_enabled(self) -> bool:
        connection = self._connection
        if connection is None:
            return False
        try:
            return bool(connection.autocommit)
        except Error as e:
            logger.debug("Could not read autocommit for caller '%s': %s", self.caller_id, e)
            return False

    def use_database(self, schema_name: str) -> None:
        self._require_connection()
        self.dialect.use_database(self, schema_name)

    def current_database(self) -> str:
        return self.dialect.current_database(self)

    def find_database(self, schema_name: str) -> bool:
        return self.dialect.find_database(self, schema_name)

    def _set_autocommit(self, enabled: bool) -> None:
        connection = self._require_connection()
        try:
            connection.autocommit = enabled
        except Error as e:
            raise TransactionError(f"Could not switch autocommit {'on' if enabled else 'off'}: {e}") from e

    def _require_connection(self):
        connection = self._connection
        if connection is None:
            raise NoActiveConnection(f"No active connection for caller '{self.caller_id}'")
        return connection

    def _emit(self, event: ConnectionEvent) -> None:
        if self._on_event is not None:
            self._on_event(self, event)

    def __repr__(self) -> str:
        kind = "pooled" if self.pooled else "explicit"
        state = "connected" if self._connection is not None else "idle"
        return f"Session({self.caller_id!r}, {kind}, {state})"
