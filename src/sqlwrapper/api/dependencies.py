#
# SPDX-License-Identifier: AGPL-3.0-only
# Copyright (c) 2026 m2-eng
# Author: m2-eng
# Co-Author: GitHub Copilot
# License: GNU Affero General Public License v3.0 (AGPL-3.0-only)
# Purpose: FastAPI dependencies for the SQL environment and caller identity.
#
"""
FastAPI dependencies for the SQL environment and caller identity.
"""

from fastapi import Header, HTTPException, status

from sqlwrapper.commands import SqlCommands
from sqlwrapper.environment import SqlEnvironment

# Environment of the running application (set on startup)
_environment: SqlEnvironment | None = None
_commands: SqlCommands | None = None


def set_environment(environment: SqlEnvironment | None) -> None:
    """Set the environment used by all requests."""
    global _environment, _commands
    _environment = environment
    _commands = SqlCommands(environment) if environment is not None else None


def current_environment() -> SqlEnvironment | None:
    return _environment


def get_environment() -> SqlEnvironment:
    """
    Get the environment of the running application.

    Raises:
        HTTPException: If the environment is not initialized
    """
    if _environment is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="SQL environment not initialized"
        )
    return _environment


def get_commands() -> SqlCommands:
    get_environment()
    return _commands


def get_caller_id(x_caller_id: str = Header(..., min_length=1, max_length=128)) -> str:
    """Caller identity from the X-Caller-Id header."""
    return x_caller_id
