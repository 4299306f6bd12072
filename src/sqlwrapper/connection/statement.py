#
# SPDX-License-Identifier: AGPL-3.0-only
# Copyright (c) 2026 m2-eng
# Author: m2-eng
# Co-Author: GitHub Copilot
# License: GNU Affero General Public License v3.0 (AGPL-3.0-only)
# Purpose: Statement execution, row cursor and value conversion.
#
"""
Statement execution, row cursor and value conversion.

Column values are converted to three canonical types: character, binary and
temporal columns (YEAR included) become str, numeric columns float, BIT columns bool.
"""

import logging
from datetime import date, datetime, time, timedelta
from typing import TYPE_CHECKING, Any, Callable, List, Optional, Sequence

from mysql.connector import Error
from mysql.connector.constants import FieldType

from sqlwrapper.errors import NoActiveConnection, StatementError
from sqlwrapper.utils import close_quietly

if TYPE_CHECKING:
    from sqlwrapper.connection.session import Session

logger = logging.getLogger(__name__)

PARAMETER_TYPES = (str, int, float, bool, type(None))

NUMERIC_TYPES = frozenset({
    FieldType.TINY,
    FieldType.SHORT,
    FieldType.LONG,
    FieldType.LONGLONG,
    FieldType.INT24,
    FieldType.DECIMAL,
    FieldType.NEWDECIMAL,
    FieldType.FLOAT,
    FieldType.DOUBLE,
})

BOOLEAN_TYPES = frozenset({FieldType.BIT})


def count_placeholders(sql: str) -> int:
    """Counts '?' placeholders outside string literals, quoted identifiers and comments."""
    count = 0
    i = 0
    length = len(sql)
    while i < length:
        ch = sql[i]
        if ch in ("'", '"', "`"):
            i = _skip_quoted(sql, i)
        elif ch == "#" or (sql.startswith("--", i) and (i + 2 == length or sql[i + 2].isspace())):
            end = sql.find("\n", i)
            i = length if end < 0 else end + 1
        elif sql.startswith("/*", i):
            end = sql.find("*/", i + 2)
            i = length if end < 0 else end + 2
        else:
            if ch == "?":
                count += 1
            i += 1
    return count


def _skip_quoted(sql: str, start: int) -> int:
    quote = sql[start]
    i = start + 1
    while i < len(sql):
        ch = sql[i]
        if ch == "\\" and quote != "`":
            i += 2
        elif ch == quote:
            # doubled quote is an escaped quote
            if i + 1 < len(sql) and sql[i + 1] == quote:
                i += 2
            else:
                return i + 1
        else:
            i += 1
    return len(sql)


def _format_timedelta(value: timedelta) -> str:
    seconds = int(value.total_seconds())
    sign = "-" if seconds < 0 else ""
    hours, rest = divmod(abs(seconds), 3600)
    minutes, seconds = divmod(rest, 60)
    return f"{sign}{hours:02d}:{minutes:02d}:{seconds:02d}"


def _to_text(value: Any) -> str:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="replace")
    if isinstance(value, timedelta):
        return _format_timedelta(value)
    if isinstance(value, datetime):
        return value.isoformat(sep=" ")
    if isinstance(value, (date, time)):
        return value.isoformat()
    if isinstance(value, (set, frozenset)):
        # SET columns
        return ",".join(sorted(value))
    return str(value)


def convert_value(value: Any, type_code: int) -> Any:
    """
    Converts one column value by its type tag.

    NULL becomes "" for text columns, 0.0 for numeric and False for BIT.
    Unknown type tags are treated as text.
    """
    if type_code in NUMERIC_TYPES:
        if value is None:
            return 0.0
        if isinstance(value, (bytes, bytearray)):
            value = bytes(value).decode()
        return float(value)
    if type_code in BOOLEAN_TYPES:
        if value is None:
            return False
        if isinstance(value, (bytes, bytearray)):
            return int.from_bytes(value, "big") != 0
        return bool(int(value))
    if value is None:
        return ""
    return _to_text(value)


class RowCursor:
    """
    Buffered result set.

    Empty results are exhausted right away. Passing the last row marks the
    cursor exhausted and calls `on_end_of_cursor` once.
    """

    def __init__(self, column_types: Sequence[int], rows: Sequence[Sequence[Any]],
                 on_end_of_cursor: Optional[Callable[[], None]] = None):
        self.column_types = list(column_types)
        self._rows = list(rows)
        self._position = 0
        self._exhausted = False
        self._closed = False
        self._on_end_of_cursor = on_end_of_cursor
        if not self._rows:
            self._mark_exhausted()

    @property
    def exhausted(self) -> bool:
        return self._exhausted

    def is_row_available(self) -> bool:
        return not self._closed and not self._exhausted

    def fetch_row(self) -> List[Any]:
        """Next converted row, [] once exhausted or closed."""
        if not self.is_row_available():
            return []
        row = self._convert(self._rows[self._position])
        self._position += 1
        if self._position >= len(self._rows):
            self._mark_exhausted()
        return row

    def fetch_all(self) -> List[List[Any]]:
        """
        Every row from the first one on.

        The cursor is repositioned to the first row before draining, so rows
        already read with fetch_row are returned again.
        """
        if not self.is_row_available():
            return []
        self._position = 0
        rows = []
        while self.is_row_available():
            rows.append(self.fetch_row())
        return rows

    def close(self) -> None:
        self._closed = True
        self._rows = []

    def _convert(self, row: Sequence[Any]) -> List[Any]:
        return [convert_value(value, type_code) for value, type_code in zip(row, self.column_types)]

    def _mark_exhausted(self) -> None:
        self._exhausted = True
        if self._on_end_of_cursor is not None:
            self._on_end_of_cursor()


class StatementExecution:
    """
    One statement of a session.

    Holds either a RowCursor or a row count once executed. The driver cursor
    is fully read and closed before the coordinator hears about the result.
    """

    def __init__(self, session: "Session", sql: str, parameters: Optional[Sequence[Any]] = None):
        self.session = session
        self.sql = sql
        self.parameters = list(parameters or [])
        self.cursor: Optional[RowCursor] = None
        self.row_count = -1
        self._closed = False

        for parameter in self.parameters:
            if not isinstance(parameter, PARAMETER_TYPES):
                raise StatementError(
                    f"Unsupported parameter type {type(parameter).__name__}; "
                    "use strings, numbers, booleans or None"
                )

    @property
    def closed(self) -> bool:
        return self._closed

    def execute_direct(self) -> bool:
        """
        Executes the statement without parameters.

        Returns:
            True if a result set was produced (cursor available)
        """
        if self.parameters:
            self.close()
            raise StatementError("Direct execution does not take parameters; use a query or an update")
        return self._execute(prepared=False)

    def execute_query(self) -> RowCursor:
        """Executes a parameterised statement that must produce a result set."""
        self._execute(prepared=True, expect_result_set=True)
        return self.cursor

    def execute_update(self) -> int:
        """Executes a parameterised statement that must not produce a result set."""
        self._execute(prepared=True, expect_result_set=False)
        return self.row_count

    def is_row_available(self) -> bool:
        return self.cursor is not None and self.cursor.is_row_available()

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self.cursor is not None:
            self.cursor.close()

    def _execute(self, prepared: bool, expect_result_set: Optional[bool] = None) -> bool:
        if self._closed:
            raise StatementError("Statement has been closed")
        if self.cursor is not None:
            self.cursor.close()
            self.cursor = None
        self.row_count = -1

        connection = self.session.connection
        if connection is None:
            self.close()
            raise NoActiveConnection(f"No active connection for caller '{self.session.caller_id}'")

        driver_cursor = None
        try:
            if prepared:
                driver_cursor = connection.cursor(prepared=True)
                driver_cursor.execute(self.sql, tuple(self.parameters))
            else:
                driver_cursor = connection.cursor(buffered=True)
                driver_cursor.execute(self.sql)
            description = driver_cursor.description
            if description is not None:
                column_types = [column[1] for column in description]
                rows = driver_cursor.fetchall()
            else:
                row_count = driver_cursor.rowcount
        except Error as e:
            if driver_cursor is not None:
                close_quietly(driver_cursor, "driver cursor")
            self.close()
            logger.error("Error executing statement '%s': %s", self.sql, e)
            raise StatementError(f"Error executing statement: {e}") from e
        close_quietly(driver_cursor, "driver cursor")

        has_result_set = description is not None
        if expect_result_set is False and has_result_set:
            self.close()
            raise StatementError("Statement produced a result set; execute it as a query")
        if expect_result_set is True and not has_result_set:
            self.close()
            raise StatementError("Statement did not produce a result set; execute it as an update")

        coordinator = self.session.coordinator
        if has_result_set:
            self.cursor = RowCursor(column_types, rows, coordinator.end_of_cursor)
            return True
        self.row_count = row_count
        coordinator.no_result_set()
        return False
