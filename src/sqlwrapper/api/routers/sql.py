#
# SPDX-License-Identifier: AGPL-3.0-only
# Copyright (c) 2026 m2-eng
# Author: m2-eng
# Co-Author: GitHub Copilot
# License: GNU Affero General Public License v3.0 (AGPL-3.0-only)
# Purpose: Per-caller connection, statement and transaction endpoints.
#
"""
SQL API router - connection, statement and transaction commands of one caller.

Endpoints are plain functions so the blocking pool acquire runs in the
thread pool instead of the event loop.
"""

from fastapi import APIRouter, Depends, Query

from sqlwrapper.api.dependencies import get_caller_id, get_commands
from sqlwrapper.api.error_handling import handle_sql_errors
from sqlwrapper.api.models import (
    ConnectRequest,
    DatabaseRequest,
    DatabaseResponse,
    ExecuteRequest,
    ExecuteResponse,
    LogRequest,
    RowCountResponse,
    RowResponse,
    RowsResponse,
    StatusResponse,
)
from sqlwrapper.commands import SqlCommands

router = APIRouter(prefix="/sql", tags=["sql"])


@router.post("/connect", status_code=204)
@handle_sql_errors("connect")
def connect(request: ConnectRequest, caller_id: str = Depends(get_caller_id),
            commands: SqlCommands = Depends(get_commands)):
    """Open an explicit connection for the caller."""
    commands.connect(caller_id, request.settings)


@router.post("/disconnect", status_code=204)
@handle_sql_errors("disconnect")
def disconnect(caller_id: str = Depends(get_caller_id), commands: SqlCommands = Depends(get_commands)):
    commands.disconnect(caller_id)


@router.get("/connected", response_model=StatusResponse)
@handle_sql_errors("check connection")
def is_connected(debug: bool = Query(False, description="Report the physical connection state"),
                 caller_id: str = Depends(get_caller_id), commands: SqlCommands = Depends(get_commands)):
    if debug:
        return StatusResponse(value=commands.debug_is_connected(caller_id))
    return StatusResponse(value=commands.is_connected(caller_id))


@router.post("/execute", response_model=ExecuteResponse)
@handle_sql_errors("execute statement")
def execute(request: ExecuteRequest, caller_id: str = Depends(get_caller_id),
            commands: SqlCommands = Depends(get_commands)):
    """
    Execute a statement.
    `has_cursor` tells whether rows can be fetched with /fetch-row or /fetch-all.
    """
    has_cursor = commands.execute(caller_id, request.sql, request.params, request.mode)
    return ExecuteResponse(has_cursor=has_cursor, row_count=commands.row_count(caller_id))


@router.post("/fetch-row", response_model=RowResponse)
@handle_sql_errors("fetch row")
def fetch_row(caller_id: str = Depends(get_caller_id), commands: SqlCommands = Depends(get_commands)):
    return RowResponse(row=commands.fetch_row(caller_id))


@router.post("/fetch-all", response_model=RowsResponse)
@handle_sql_errors("fetch rows")
def fetch_all(caller_id: str = Depends(get_caller_id), commands: SqlCommands = Depends(get_commands)):
    """All rows from the first one on (rows already fetched are returned again)."""
    return RowsResponse(rows=commands.fetch_all(caller_id))


@router.get("/row-available", response_model=StatusResponse)
@handle_sql_errors("check row availability")
def row_available(caller_id: str = Depends(get_caller_id), commands: SqlCommands = Depends(get_commands)):
    return StatusResponse(value=commands.row_available(caller_id))


@router.get("/row-count", response_model=RowCountResponse)
@handle_sql_errors("get row count")
def row_count(caller_id: str = Depends(get_caller_id), commands: SqlCommands = Depends(get_commands)):
    return RowCountResponse(row_count=commands.row_count(caller_id))


@router.post("/transaction/start", status_code=204)
@handle_sql_errors("start transaction")
def start_transaction(caller_id: str = Depends(get_caller_id), commands: SqlCommands = Depends(get_commands)):
    commands.start_transaction(caller_id)


@router.post("/transaction/commit", status_code=204)
@handle_sql_errors("commit")
def commit(caller_id: str = Depends(get_caller_id), commands: SqlCommands = Depends(get_commands)):
    commands.commit(caller_id)


@router.post("/transaction/rollback", status_code=204)
@handle_sql_errors("rollback")
def rollback(caller_id: str = Depends(get_caller_id), commands: SqlCommands = Depends(get_commands)):
    commands.rollback(caller_id)


@router.get("/autocommit", response_model=StatusResponse)
@handle_sql_errors("read autocommit")
def autocommit_enabled(caller_id: str = Depends(get_caller_id), commands: SqlCommands = Depends(get_commands)):
    return StatusResponse(value=commands.autocommit_enabled(caller_id))


@router.post("/autocommit/on", status_code=204)
@handle_sql_errors("autocommit on")
def autocommit_on(caller_id: str = Depends(get_caller_id), commands: SqlCommands = Depends(get_commands)):
    commands.autocommit_on(caller_id)


@router.post("/autocommit/off", status_code=204)
@handle_sql_errors("autocommit off")
def autocommit_off(caller_id: str = Depends(get_caller_id), commands: SqlCommands = Depends(get_commands)):
    commands.autocommit_off(caller_id)


@router.post("/database/use", status_code=204)
@handle_sql_errors("use database")
def use_database(request: DatabaseRequest, caller_id: str = Depends(get_caller_id),
                 commands: SqlCommands = Depends(get_commands)):
    commands.use_database(caller_id, request.name)


@router.get("/database/current", response_model=DatabaseResponse)
@handle_sql_errors("current database")
def current_database(caller_id: str = Depends(get_caller_id), commands: SqlCommands = Depends(get_commands)):
    return DatabaseResponse(name=commands.current_database(caller_id))


@router.get("/database/exists", response_model=StatusResponse)
@handle_sql_errors("find database")
def find_database(name: str = Query(..., min_length=1), caller_id: str = Depends(get_caller_id),
                  commands: SqlCommands = Depends(get_commands)):
    return StatusResponse(value=commands.find_database(caller_id, name))


@router.post("/log", status_code=204)
@handle_sql_errors("log")
def log(request: LogRequest, commands: SqlCommands = Depends(get_commands)):
    commands.log(request.level, request.message)
