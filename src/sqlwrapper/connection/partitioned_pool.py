#
# SPDX-License-Identifier: AGPL-3.0-only
# Copyright (c) 2026 m2-eng
# Author: m2-eng
# Co-Author: GitHub Copilot
# License: GNU Affero General Public License v3.0 (AGPL-3.0-only)
# Purpose: Blocking, partitioned MySQL connection pool.
#
"""
Blocking, partitioned MySQL connection pool.

mysql.connector's own pool raises PoolError as soon as it is exhausted. This
module spreads the connections over several MySQLConnectionPool partitions
and gates checkout with a counting semaphore, so a checkout waits until a
connection is returned instead of failing.
"""

import itertools
import logging
import threading
from typing import Any, Callable, Dict, List, Optional

import mysql.connector.pooling
from mysql.connector import Error
from mysql.connector.errors import OperationalError, PoolError

from sqlwrapper.errors import ConnectionFailure, PoolTimeout

logger = logging.getLogger(__name__)

# Upper bound of mysql.connector.pooling.MySQLConnectionPool
MAX_PARTITION_SIZE = mysql.connector.pooling.CNX_POOL_MAXSIZE
POLL_INTERVAL = 0.1

_generation = itertools.count(1)


class PooledConnection:
    """
    Handle for a connection checked out of a partition.

    close() hands the connection back to its partition and frees the
    checkout permit exactly once. After that the handle is dead.
    """

    is_pooled = True

    def __init__(self, connection, release: Callable[[], None]):
        self._connection = connection
        self._release = release
        self._released = False
        self._lock = threading.Lock()

    @property
    def connection_id(self):
        return self._target().connection_id

    @property
    def autocommit(self) -> bool:
        return self._target().autocommit

    @autocommit.setter
    def autocommit(self, value: bool) -> None:
        # PooledMySQLConnection only forwards reads; an assignment would land
        # on the wrapper instead of the session.
        self._target().cmd_query(f"SET @@session.autocommit = {'ON' if value else 'OFF'}")

    @property
    def released(self) -> bool:
        return self._released

    def is_connected(self) -> bool:
        if self._released:
            return False
        return self._connection.is_connected()

    def cursor(self, *args, **kwargs):
        return self._target().cursor(*args, **kwargs)

    def commit(self) -> None:
        self._target().commit()

    def rollback(self) -> None:
        self._target().rollback()

    def close(self) -> None:
        with self._lock:
            if self._released:
                return
            self._released = True
        try:
            self._connection.close()
        finally:
            self._release()

    def _target(self):
        if self._released:
            raise OperationalError("Connection has been returned to the pool")
        return self._connection

    def __getattr__(self, name):
        return getattr(self._target(), name)

    def __repr__(self) -> str:
        state = "released" if self._released else "checked out"
        return f"PooledConnection({state})"


class PartitionedConnectionPool:
    """
    P partitions of N connections each, N * P checkout permits.

    Args:
        partitions: Number of partitions
        partition_size: Connections per partition
        connect_params: Keyword arguments for the driver connection
        partition_factory: Callable building one partition; defaults to
            mysql.connector.pooling.MySQLConnectionPool

    Raises:
        ConnectionFailure: A partition could not open its connections
    """

    def __init__(
        self,
        partitions: int,
        partition_size: int,
        connect_params: Dict[str, Any],
        partition_factory: Optional[Callable[..., Any]] = None,
    ):
        factory = partition_factory or mysql.connector.pooling.MySQLConnectionPool
        generation = next(_generation)

        self.size = partitions * partition_size
        self._permits = threading.Semaphore(self.size)
        self._partitions: List[Any] = []
        self._next_partition = itertools.count()
        self._closed = False

        try:
            for index in range(partitions):
                self._partitions.append(factory(
                    pool_name=f"sqlwrapper_{generation}_{index}",
                    pool_size=partition_size,
                    **connect_params
                ))
        except Error as e:
            self.close()
            raise ConnectionFailure(f"Error creating connection pool: {e}") from e

        logger.info(
            "Connection pool ready: %s partition(s) x %s connection(s)",
            partitions, partition_size
        )

    @property
    def closed(self) -> bool:
        return self._closed

    def checkout(self, cancelled: Optional[threading.Event] = None) -> PooledConnection:
        """
        Blocks until a connection is available.

        Args:
            cancelled: Event that aborts the wait when set

        Raises:
            PoolTimeout: The wait was cancelled
            ConnectionFailure: Pool shut down or driver error
        """
        while not self._permits.acquire(timeout=POLL_INTERVAL):
            if self._closed:
                raise ConnectionFailure("Connection pool has been shut down")
            if cancelled is not None and cancelled.is_set():
                raise PoolTimeout("Connection checkout cancelled")

        try:
            if self._closed:
                raise ConnectionFailure("Connection pool has been shut down")
            if cancelled is not None and cancelled.is_set():
                raise PoolTimeout("Connection checkout cancelled")
            connection = self._get_from_partitions()
        except BaseException:
            self._permits.release()
            raise

        return PooledConnection(connection, self._permits.release)

    def _get_from_partitions(self):
        partitions = self._partitions
        if not partitions:
            raise ConnectionFailure("Connection pool has been shut down")
        start = next(self._next_partition)
        for offset in range(len(partitions)):
            partition = partitions[(start + offset) % len(partitions)]
            try:
                return partition.get_connection()
            except PoolError:
                continue
            except Error as e:
                raise ConnectionFailure(f"Error getting connection from pool: {e}") from e
        # A permit guarantees an idle connection somewhere; reaching this
        # means a partition lost connections it could not reopen.
        raise ConnectionFailure("No idle connection in any partition")

    def close(self) -> None:
        """Closes the idle connections of all partitions; checked-out ones die on release."""
        self._closed = True
        for partition in self._partitions:
            try:
                partition._remove_connections()
            except Error as e:
                logger.debug("Error closing pool partition: %s", e)
        self._partitions = []
