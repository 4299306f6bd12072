#
# SPDX-License-Identifier: AGPL-3.0-only
# Copyright (c) 2026 m2-eng
# Author: m2-eng
# Co-Author: GitHub Copilot
# License: GNU Affero General Public License v3.0 (AGPL-3.0-only)
# Purpose: Central error handling for the SQL wrapper API.
#
"""
Central error handling for the SQL wrapper API.

Translates SqlWrapperError subclasses into HTTP status codes consistently
for all routers.
"""

import asyncio
import logging
from functools import wraps
from typing import Any, Callable

from fastapi import HTTPException, status

from sqlwrapper.errors import (
    ConfigurationError,
    ConnectionFailure,
    NoActiveConnection,
    PoolTimeout,
    SqlWrapperError,
    StatementError,
    TransactionError,
    UnsupportedOperationForConnectionKind,
)

logger = logging.getLogger(__name__)

# First match wins, so subclasses must come before their bases.
STATUS_CODES = (
    (ConfigurationError, status.HTTP_400_BAD_REQUEST),
    (StatementError, status.HTTP_400_BAD_REQUEST),
    (TransactionError, status.HTTP_409_CONFLICT),
    (NoActiveConnection, status.HTTP_409_CONFLICT),
    (UnsupportedOperationForConnectionKind, status.HTTP_409_CONFLICT),
    (PoolTimeout, status.HTTP_503_SERVICE_UNAVAILABLE),
    (ConnectionFailure, status.HTTP_503_SERVICE_UNAVAILABLE),
)


def status_for(exc: SqlWrapperError) -> int:
    for error_type, status_code in STATUS_CODES:
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def _translate(exc: Exception, operation_name: str) -> HTTPException:
    if isinstance(exc, SqlWrapperError):
        status_code = status_for(exc)
        log = logger.error if status_code >= 500 else logger.warning
        log("%s in %s: %s", type(exc).__name__, operation_name, exc)
        return HTTPException(
            status_code=status_code,
            detail={"error": type(exc).__name__, "message": str(exc)},
        )
    logger.exception("Unexpected error in %s", operation_name)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Internal server error during {operation_name}",
    )


def handle_sql_errors(operation_name: str = "sql operation"):
    """
    Decorator for uniform error handling in API endpoints.

    Args:
        operation_name: Name of the operation for error messages

    Usage:
        @router.post("/execute")
        @handle_sql_errors("execute statement")
        def execute(...):
            ...
    """
    def decorator(func: Callable) -> Callable:
        @wraps(func)
        async def async_wrapper(*args, **kwargs) -> Any:
            try:
                return await func(*args, **kwargs)
            except HTTPException:
                raise
            except Exception as exc:
                raise _translate(exc, operation_name) from exc

        @wraps(func)
        def sync_wrapper(*args, **kwargs) -> Any:
            try:
                return func(*args, **kwargs)
            except HTTPException:
                raise
            except Exception as exc:
                raise _translate(exc, operation_name) from exc

        if asyncio.iscoroutinefunction(func):
            return async_wrapper
        return sync_wrapper

    return decorator
