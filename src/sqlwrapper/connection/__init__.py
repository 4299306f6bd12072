#
# SPDX-License-Identifier: AGPL-3.0-only
# Copyright (c) 2026 m2-eng
# Author: m2-eng
# Co-Author: GitHub Copilot
# License: GNU Affero General Public License v3.0 (AGPL-3.0-only)
# Purpose: Session and connection lifecycle.
#
"""
Session and connection lifecycle.
"""

from .partitioned_pool import PartitionedConnectionPool, PooledConnection
from .pool import ConnectionPool
from .registry import SessionRegistry
from .session import (
    AutodisconnectCoordinator,
    ConnectionEvent,
    ReleaseEvent,
    Session,
    should_autodisconnect,
)
from .statement import RowCursor, StatementExecution, convert_value, count_placeholders

__all__ = [
    'AutodisconnectCoordinator',
    'ConnectionEvent',
    'ConnectionPool',
    'PartitionedConnectionPool',
    'PooledConnection',
    'ReleaseEvent',
    'RowCursor',
    'Session',
    'SessionRegistry',
    'StatementExecution',
    'convert_value',
    'count_placeholders',
    'should_autodisconnect',
]
