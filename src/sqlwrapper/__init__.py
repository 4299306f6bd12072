#
# SPDX-License-Identifier: AGPL-3.0-only
# Copyright (c) 2026 m2-eng
# Author: m2-eng
# Co-Author: GitHub Copilot
# License: GNU Affero General Public License v3.0 (AGPL-3.0-only)
# Purpose: Per-caller SQL sessions over a shared MySQL connection pool.
#
"""
Per-caller SQL sessions over a shared MySQL connection pool.
"""

from .commands import SqlCommands
from .config import SqlConfiguration
from .environment import SqlEnvironment
from .errors import (
    ConfigurationError,
    ConnectionFailure,
    NoActiveConnection,
    PoolConfigurationError,
    PoolTimeout,
    SqlWrapperError,
    StatementError,
    TransactionError,
    UnsupportedOperationForConnectionKind,
)

__all__ = [
    'ConfigurationError',
    'ConnectionFailure',
    'NoActiveConnection',
    'PoolConfigurationError',
    'PoolTimeout',
    'SqlCommands',
    'SqlConfiguration',
    'SqlEnvironment',
    'SqlWrapperError',
    'StatementError',
    'TransactionError',
    'UnsupportedOperationForConnectionKind',
]
