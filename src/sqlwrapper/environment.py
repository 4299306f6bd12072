#
# SPDX-License-Identifier: AGPL-3.0-only
# Copyright (c) 2026 m2-eng
# Author: m2-eng
# Co-Author: GitHub Copilot
# License: GNU Affero General Public License v3.0 (AGPL-3.0-only)
# Purpose: Context object wiring configuration, pool and session registry.
#
"""
Context object wiring configuration, pool and session registry.
"""

import logging
from importlib.metadata import PackageNotFoundError, version as package_version
from typing import Any, Callable, Hashable, Mapping, Optional

import mysql.connector
from mysql.connector import Error

from sqlwrapper.config import (
    CONNECTIONPOOL,
    DEFAULTCONNECTION,
    EXPLICITCONNECTION,
    LOGGING,
    OPT_MAXCONNECTIONS,
    OPT_PARTITIONS,
    OPT_TIMEOUT,
    SqlConfiguration,
)
from sqlwrapper.connection.pool import ConnectionPool
from sqlwrapper.connection.registry import SessionRegistry
from sqlwrapper.connection.session import Session
from sqlwrapper.database import create_database_info, get_brand
from sqlwrapper.errors import ConfigurationError, ConnectionFailure, NoActiveConnection
from sqlwrapper.logging_setup import configure_logging
from sqlwrapper.settings import Setting

logger = logging.getLogger(__name__)


class SqlEnvironment:
    """
    Owns the configuration, the connection pool and the session registry.

    Args:
        configuration: Configuration store (a fresh one if omitted)
        partition_factory: Builds pool partitions (mysql.connector pooling
            if omitted)
        connect: Opens explicit connections (mysql.connector.connect if
            omitted)
    """

    def __init__(
        self,
        configuration: Optional[SqlConfiguration] = None,
        partition_factory: Optional[Callable[..., Any]] = None,
        connect: Optional[Callable[..., Any]] = None,
    ):
        self.configuration = configuration or SqlConfiguration()
        self._connect = connect or mysql.connector.connect
        self.pool = ConnectionPool(partition_factory=partition_factory, on_evict=self._evict_pooled)
        self.registry = SessionRegistry(self.pool)

        self.configuration.add_listener(DEFAULTCONNECTION, self._on_default_connection)
        self.configuration.add_listener(CONNECTIONPOOL, self._on_connection_pool)
        self.configuration.add_listener(LOGGING, configure_logging)

    @classmethod
    def from_config_file(cls, config_path: str, **kwargs) -> "SqlEnvironment":
        environment = cls(**kwargs)
        environment.configuration.load_file(config_path)
        return environment

    def __enter__(self) -> "SqlEnvironment":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown()

    def get_session(self, caller_id: Hashable, create_if_absent: bool = False) -> Optional[Session]:
        return self.registry.get(caller_id, create_if_absent)

    def get_active_session(self, caller_id: Hashable, create_if_absent: bool = True) -> Session:
        """
        Session with a physical connection attached.

        Raises:
            NoActiveConnection: Caller has no connection and none can be pooled
        """
        session = self.registry.get(caller_id, create_if_absent)
        if session is None or not session.is_connected():
            raise NoActiveConnection(
                f"No connection for caller '{caller_id}'; "
                "use connect or configure a default connection"
            )
        return session

    def connect(self, caller_id: Hashable, params: Mapping[str, Any]) -> Session:
        """
        Opens an explicit connection for a caller, replacing any previous one.

        The previous session is closed only once the new connection is open.

        Raises:
            ConfigurationError: Unknown key or missing user/password
            ConnectionFailure: The driver could not connect
        """
        setting = self.configuration.resolve(EXPLICITCONNECTION, params)
        if not setting.is_valid():
            raise ConfigurationError("connect: user and password are required")
        dialect = create_database_info(setting)

        try:
            connection = self._connect(**dialect.connect_params())
        except Error as e:
            logger.error("Could not connect to %s: %s", dialect.build_url(), e)
            raise ConnectionFailure(f"Could not connect to {dialect.build_url()}: {e}") from e

        session = Session(caller_id, connection, dialect, pooled=False, on_event=self.registry.handle_event)
        self.registry.register(session)
        logger.info("Caller '%s' connected to %s", caller_id, dialect.build_url())
        return session

    def close_all(self) -> int:
        return self.registry.close_all()

    def shutdown(self) -> None:
        closed = self.close_all()
        self.pool.shutdown()
        logger.info("SQL environment shut down (%s session(s) closed)", closed)

    @staticmethod
    def version() -> str:
        try:
            return package_version("sqlwrapper")
        except PackageNotFoundError:
            return "Unknown"

    def _evict_pooled(self) -> None:
        self.registry.close_pooled()

    @staticmethod
    def _pool_parameters(setting: Setting):
        return (
            setting.get_int(OPT_PARTITIONS),
            setting.get_int(OPT_MAXCONNECTIONS),
            setting.get_int(OPT_TIMEOUT),
        )

    def _on_default_connection(self, setting: Setting) -> None:
        brand = get_brand(setting)
        if not brand.is_complete(setting):
            if self.pool.enabled:
                self.pool.close()
            logger.info("Default connection incomplete; connection pool disabled")
            return
        dialect = brand(setting)
        partitions, max_connections, timeout = self._pool_parameters(
            self.configuration.get_configuration(CONNECTIONPOOL)
        )
        self.pool.reconfigure(partitions, max_connections, timeout, dialect)

    def _on_connection_pool(self, setting: Setting) -> None:
        partitions, max_connections, timeout = self._pool_parameters(setting)
        ConnectionPool.validate(partitions, max_connections, timeout)
        if not self.pool.enabled:
            return
        if (partitions, max_connections) != (self.pool.partitions, self.pool.max_connections):
            self.pool.reconfigure(partitions, max_connections, timeout, self.pool.dialect)
        else:
            self.pool.set_timeout(timeout)
