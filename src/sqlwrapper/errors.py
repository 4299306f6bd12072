#
# SPDX-License-Identifier: AGPL-3.0-only
# Copyright (c) 2026 m2-eng
# Author: m2-eng
# Co-Author: GitHub Copilot
# License: GNU Affero General Public License v3.0 (AGPL-3.0-only)
# Purpose: Error taxonomy of the SQL session layer.
#
"""
Error taxonomy of the SQL session layer.

Resource-release failures (closing a cursor, statement or physical
connection) are never raised; everything else surfaces as one of the
exceptions below.
"""


class SqlWrapperError(Exception):
    """Base class for all errors raised by sqlwrapper."""
    pass


class ConfigurationError(SqlWrapperError):
    """Unknown aspect or key, or a required setting is still unset/invalid."""
    pass


class PoolConfigurationError(ConfigurationError):
    """Connection pool settings violate the pool invariants."""
    pass


class PoolTimeout(SqlWrapperError):
    """No pooled connection became available within the acquire timeout."""
    pass


class ConnectionFailure(SqlWrapperError):
    """The driver failed to open a physical connection."""
    pass


class StatementError(SqlWrapperError):
    """Statement could not be prepared or executed."""
    pass


class TransactionError(SqlWrapperError):
    """Commit, rollback or autocommit toggle was rejected."""
    pass


class UnsupportedOperationForConnectionKind(SqlWrapperError):
    """Operation is not allowed on this kind of connection (e.g. pooled)."""
    pass


class NoActiveConnection(SqlWrapperError):
    """Caller has no session, or the session has no physical connection."""
    pass
