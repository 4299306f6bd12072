#
# SPDX-License-Identifier: AGPL-3.0-only
# Copyright (c) 2026 m2-eng
# Author: m2-eng
# Co-Author: GitHub Copilot
# License: GNU Affero General Public License v3.0 (AGPL-3.0-only)
# Purpose: MySQL specific dialect helper.
#
"""
MySQL specific dialect helper.
"""

import logging
from typing import Any, Dict

from sqlwrapper.config import OPT_DATABASE, OPT_JDBC_URL
from sqlwrapper.database.base import DatabaseInfo
from sqlwrapper.errors import SqlWrapperError, StatementError, UnsupportedOperationForConnectionKind
from sqlwrapper.settings import Setting

logger = logging.getLogger(__name__)


class MySqlDatabase(DatabaseInfo):
    """MySQL / MariaDB through mysql.connector."""

    BRANDNAME = "MySql"
    DEFAULT_PORT = 3306
    URL_SCHEME = "mysql"

    @classmethod
    def is_complete(cls, setting: Setting) -> bool:
        # The pool needs a schema, either directly or through the url.
        return setting.is_valid() and (setting.is_set(OPT_DATABASE) or setting.is_set(OPT_JDBC_URL))

    def default_driver(self) -> str:
        return "mysql.connector"

    def connect_params(self) -> Dict[str, Any]:
        params = {
            "host": self.host,
            "port": self.port,
            "user": self.user,
            "password": self.password,
            "autocommit": True,
            "use_pure": True,
        }
        if self.database:
            params["database"] = self.database
        return params

    def use_database(self, session, schema_name: str) -> None:
        if session.pooled:
            raise UnsupportedOperationForConnectionKind(
                "use-database is only allowed on connections created using connect; "
                "this is a connection from the connection pool"
            )
        quoted = "`" + schema_name.replace("`", "``") + "`"
        try:
            # USE never produces a result set nor a meaningful row count
            session.create_statement(f"USE {quoted}").execute_direct()
        except SqlWrapperError as e:
            raise StatementError(f"Could not switch database context to '{schema_name}': {e}") from e

    def current_database(self, session) -> str:
        if session is None:
            return ""
        try:
            statement = session.create_statement("SELECT DATABASE()")
            if statement.execute_direct():
                row = statement.cursor.fetch_row()
                return row[0] if row and row[0] is not None else ""
        except SqlWrapperError as e:
            logger.warning("Could not determine current database: %s", e)
        return ""

    def find_database(self, session, schema_name: str) -> bool:
        if session is None:
            return False
        try:
            statement = session.create_statement(
                "SELECT SCHEMA_NAME FROM INFORMATION_SCHEMA.SCHEMATA WHERE SCHEMA_NAME = ?",
                [schema_name],
            )
            statement.execute_query()
            row = statement.cursor.fetch_row()
            return bool(row) and str(row[0]).lower() == schema_name.lower()
        except SqlWrapperError as e:
            # semantics: database not found
            logger.error("Exception while finding database '%s': %s", schema_name, e)
        return False


BRANDS = {
    MySqlDatabase.BRANDNAME.lower(): MySqlDatabase,
}
