#
# SPDX-License-Identifier: AGPL-3.0-only
# Copyright (c) 2026 m2-eng
# Author: m2-eng
# Co-Author: GitHub Copilot
# License: GNU Affero General Public License v3.0 (AGPL-3.0-only)
# Purpose: Connection pool facade with bounded-wait acquire.
#
"""
Connection pool facade with bounded-wait acquire.
"""

import logging
import threading
from concurrent.futures import CancelledError, Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Any, Callable, Optional

from sqlwrapper.connection.partitioned_pool import (
    MAX_PARTITION_SIZE,
    PartitionedConnectionPool,
    PooledConnection,
)
from sqlwrapper.database.base import DatabaseInfo
from sqlwrapper.errors import ConnectionFailure, NoActiveConnection, PoolConfigurationError, PoolTimeout
from sqlwrapper.utils import close_quietly

logger = logging.getLogger(__name__)

MIN_CONNECTIONS = 5
DEFAULT_TIMEOUT = 5


def _discard_abandoned(future: Future) -> None:
    """Done-callback for checkouts whose caller already gave up."""
    if future.cancelled() or future.exception() is not None:
        return
    close_quietly(future.result(), "abandoned pooled connection")


class ConnectionPool:
    """
    Facade over the partitioned pool.

    acquire() runs the blocking checkout on a worker thread and waits for it
    at most `timeout` seconds (0 waits forever).

    Args:
        partition_factory: Passed through to PartitionedConnectionPool
        on_evict: Called before the underlying pool is replaced or shut down;
            must close every pooled session still holding a connection
    """

    def __init__(
        self,
        partition_factory: Optional[Callable[..., Any]] = None,
        on_evict: Optional[Callable[[], None]] = None,
    ):
        self._partition_factory = partition_factory
        self._on_evict = on_evict
        self._pool: Optional[PartitionedConnectionPool] = None
        self._executor: Optional[ThreadPoolExecutor] = None
        self._dialect: Optional[DatabaseInfo] = None
        self._partitions = 0
        self._max_connections = 0
        self._timeout = DEFAULT_TIMEOUT
        self._lock = threading.RLock()

    @property
    def enabled(self) -> bool:
        return self._pool is not None

    @property
    def dialect(self) -> Optional[DatabaseInfo]:
        return self._dialect

    @property
    def timeout(self) -> float:
        return self._timeout

    @property
    def partitions(self) -> int:
        return self._partitions

    @property
    def max_connections(self) -> int:
        return self._max_connections

    @staticmethod
    def validate(partitions: int, max_connections: int, timeout: float) -> int:
        """
        Checks pool parameters before any connection is attempted.

        Returns:
            Connections per partition

        Raises:
            PoolConfigurationError: Parameters violate the pool limits
        """
        if partitions < 1:
            raise PoolConfigurationError(f"Number of partitions must be at least 1 (got {partitions})")
        per_partition = max_connections // partitions
        if per_partition * partitions < MIN_CONNECTIONS:
            raise PoolConfigurationError(
                f"Effective number of connections ({per_partition * partitions}) "
                f"is below the minimum of {MIN_CONNECTIONS}; "
                f"max-connections={max_connections}, partitions={partitions}"
            )
        if per_partition > MAX_PARTITION_SIZE:
            raise PoolConfigurationError(
                f"At most {MAX_PARTITION_SIZE} connections per partition are supported "
                f"(got {per_partition}); increase the number of partitions"
            )
        if timeout < 0:
            raise PoolConfigurationError(f"Timeout must not be negative (got {timeout})")
        return per_partition

    def reconfigure(self, partitions: int, max_connections: int, timeout: float, dialect: DatabaseInfo) -> None:
        """
        Replaces the underlying pool.

        The new pool is opened with the dialect's connect parameters first;
        only then are pooled sessions closed and the old pool shut down.

        Raises:
            PoolConfigurationError: Invalid parameters (nothing is changed)
            ConnectionFailure: The new pool could not be opened (the old pool
                stays in service)
        """
        per_partition = self.validate(partitions, max_connections, timeout)

        with self._lock:
            new_pool = PartitionedConnectionPool(
                partitions, per_partition, dialect.connect_params(), self._partition_factory
            )
            self._close_pool()
            if self._executor is None:
                self._executor = ThreadPoolExecutor(thread_name_prefix="sqlwrapper-acquire")
            self._pool = new_pool
            self._dialect = dialect
            self._partitions = partitions
            self._max_connections = max_connections
            self._timeout = timeout
            logger.info(
                "Connection pool configured for %s (partitions=%s, max-connections=%s, timeout=%ss)",
                dialect.build_url(), partitions, max_connections, timeout
            )

    def set_timeout(self, timeout: float) -> None:
        if timeout < 0:
            raise PoolConfigurationError(f"Timeout must not be negative (got {timeout})")
        self._timeout = timeout

    def acquire(self, timeout: Optional[float] = None) -> PooledConnection:
        """
        Checks a connection out of the pool.

        Args:
            timeout: Seconds to wait, 0 for no bound; configured timeout if None

        Raises:
            PoolTimeout: No connection became available in time
            NoActiveConnection: Pooling is not configured
            ConnectionFailure: Driver error during checkout
        """
        with self._lock:
            pool, executor = self._pool, self._executor
        if pool is None or executor is None:
            raise NoActiveConnection("Connection pool is not configured")

        timeout = self._timeout if timeout is None else timeout
        cancelled = threading.Event()
        future = executor.submit(pool.checkout, cancelled)
        try:
            if timeout == 0:
                return future.result()
            return future.result(timeout=timeout)
        except CancelledError:
            raise ConnectionFailure("Connection pool has been shut down")
        except FutureTimeoutError:
            cancelled.set()
            if not future.cancel():
                future.add_done_callback(_discard_abandoned)
            logger.warning("Timeout while waiting for a pooled connection (%ss)", timeout)
            raise PoolTimeout(f"Could not get a connection from the pool within {timeout} seconds")

    def close(self) -> None:
        """Evicts pooled sessions and closes the underlying pool; pooling is disabled afterwards."""
        with self._lock:
            self._close_pool()
            self._dialect = None

    def shutdown(self) -> None:
        with self._lock:
            self.close()
            if self._executor is not None:
                self._executor.shutdown(wait=False, cancel_futures=True)
                self._executor = None

    def _close_pool(self) -> None:
        if self._pool is None:
            return
        if self._on_evict is not None:
            self._on_evict()
        self._pool.close()
        self._pool = None
        logger.debug("Connection pool closed")
