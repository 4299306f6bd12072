#
# SPDX-License-Identifier: AGPL-3.0-only
# Copyright (c) 2026 m2-eng
# Author: m2-eng
# Co-Author: GitHub Copilot
# License: GNU Affero General Public License v3.0 (AGPL-3.0-only)
# Purpose: Caller-facing command surface of the SQL wrapper.
#
"""
Caller-facing command surface of the SQL wrapper.

Every command takes the caller id first. Errors propagate as SqlWrapperError
subclasses; translating them for a host (HTTP, CLI, ...) is up to the caller.
"""

import logging
from typing import Any, Dict, Hashable, List, Mapping, Optional, Sequence, Union

from sqlwrapper.config import SqlConfiguration
from sqlwrapper.environment import SqlEnvironment
from sqlwrapper.errors import ConfigurationError, StatementError
from sqlwrapper.logging_setup import parse_level

logger = logging.getLogger(__name__)
user_logger = logging.getLogger("sqlwrapper.user")

MODE_DIRECT = "direct"
MODE_QUERY = "query"
MODE_UPDATE = "update"
EXECUTION_MODES = (MODE_DIRECT, MODE_QUERY, MODE_UPDATE)

KeyValues = Union[Mapping[str, Any], Sequence[Sequence[Any]]]


def _as_key_values(name: str, key_values: KeyValues) -> Dict[str, Any]:
    if isinstance(key_values, Mapping):
        return dict(key_values)
    return SqlConfiguration.parse_setting_list(name, key_values)


class SqlCommands:
    """Commands exposed to callers."""

    def __init__(self, environment: SqlEnvironment):
        self.environment = environment

    # connection management

    def connect(self, caller_id: Hashable, params: KeyValues) -> None:
        self.environment.connect(caller_id, _as_key_values("connect", params))

    def disconnect(self, caller_id: Hashable) -> None:
        session = self.environment.get_session(caller_id)
        if session is not None:
            session.close()

    def is_connected(self, caller_id: Hashable) -> bool:
        """True whenever pooling is enabled, since a connection is handed out on demand."""
        if self.environment.pool.enabled:
            return True
        return self.debug_is_connected(caller_id)

    def debug_is_connected(self, caller_id: Hashable) -> bool:
        """Physical state of the caller's connection."""
        session = self.environment.get_session(caller_id)
        return session is not None and session.is_connected()

    # statements

    def execute(self, caller_id: Hashable, sql: str, params: Optional[Sequence[Any]] = None,
                mode: str = MODE_DIRECT) -> bool:
        """
        Executes a statement.

        Args:
            caller_id: Calling agent
            sql: Statement text, '?' marks parameters
            params: Parameter values (query and update only)
            mode: "direct", "query" or "update"

        Returns:
            True if rows can be fetched
        """
        if mode not in EXECUTION_MODES:
            raise StatementError(f"Unknown execution mode '{mode}'; use one of {', '.join(EXECUTION_MODES)}")
        session = self.environment.get_active_session(caller_id)
        statement = session.create_statement(sql, params)
        if mode == MODE_QUERY:
            statement.execute_query()
            return True
        if mode == MODE_UPDATE:
            statement.execute_update()
            return False
        return statement.execute_direct()

    def fetch_row(self, caller_id: Hashable) -> List[Any]:
        session = self.environment.get_session(caller_id)
        cursor = session.cursor if session is not None else None
        return cursor.fetch_row() if cursor is not None else []

    def fetch_all(self, caller_id: Hashable) -> List[List[Any]]:
        session = self.environment.get_session(caller_id)
        cursor = session.cursor if session is not None else None
        return cursor.fetch_all() if cursor is not None else []

    def row_available(self, caller_id: Hashable) -> bool:
        session = self.environment.get_session(caller_id)
        cursor = session.cursor if session is not None else None
        return cursor is not None and cursor.is_row_available()

    def row_count(self, caller_id: Hashable) -> int:
        session = self.environment.get_session(caller_id)
        return session.row_count if session is not None else -1

    # transactions

    def start_transaction(self, caller_id: Hashable) -> None:
        self.environment.get_active_session(caller_id).start_transaction()

    def commit(self, caller_id: Hashable) -> None:
        self.environment.get_active_session(caller_id).commit()

    def rollback(self, caller_id: Hashable) -> None:
        self.environment.get_active_session(caller_id).rollback()

    def autocommit_on(self, caller_id: Hashable) -> None:
        self.environment.get_active_session(caller_id).autocommit_on()

    def autocommit_off(self, caller_id: Hashable) -> None:
        self.environment.get_active_session(caller_id).autocommit_off()

    def autocommit_enabled(self, caller_id: Hashable) -> bool:
        return self.environment.get_active_session(caller_id).autocommit_enabled()

    # database context

    def use_database(self, caller_id: Hashable, schema_name: str) -> None:
        self.environment.get_active_session(caller_id).use_database(schema_name)

    def current_database(self, caller_id: Hashable) -> str:
        return self.environment.get_active_session(caller_id).current_database()

    def find_database(self, caller_id: Hashable, schema_name: str) -> bool:
        return self.environment.get_active_session(caller_id).find_database(schema_name)

    # configuration and misc

    def configure(self, name: str, key_values: KeyValues) -> None:
        self.environment.configuration.configure(name, _as_key_values(name, key_values))

    def get_configuration(self, name: str) -> List[List[str]]:
        configuration = self.environment.configuration
        if name not in configuration.names():
            raise ConfigurationError(f"Unknown configuration name '{name}'")
        setting = configuration.get_configuration(name)
        return [[key, value] for key, value in setting.items()]

    def get_full_configuration(self) -> Dict[str, List[List[str]]]:
        return self.environment.configuration.get_full_configuration()

    def show_version(self) -> str:
        return self.environment.version()

    def log(self, level: str, message: str) -> None:
        user_logger.log(parse_level(level), message)
