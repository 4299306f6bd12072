#
# SPDX-License-Identifier: AGPL-3.0-only
# Copyright (c) 2026 m2-eng
# Author: m2-eng
# Co-Author: GitHub Copilot
# License: GNU Affero General Public License v3.0 (AGPL-3.0-only)
# Purpose: Session layer tests against a live MySQL server
#
import logging

import pytest

from sqlwrapper.errors import PoolTimeout, StatementError, UnsupportedOperationForConnectionKind

logger = logging.getLogger(__name__)

pytestmark = pytest.mark.integration

CALLER = "agent-1"
INSERT = "INSERT INTO wrapper_people (name, score, created) VALUES (?, ?, ?)"
SELECT_BY_NAME = "SELECT name, score, active, created FROM wrapper_people WHERE name = ?"
COUNT_BY_NAME = "SELECT COUNT(*) FROM wrapper_people WHERE name = ?"


class TestLiveStatements:
    """Test statements round trip through the real driver."""

    def test_insert_and_select(self, live_commands, marker):
        live_commands.execute(CALLER, INSERT, [marker, 12.5, "2024-01-02 03:04:05"], mode="update")
        assert live_commands.row_count(CALLER) == 1

        live_commands.execute(CALLER, SELECT_BY_NAME, [marker], mode="query")

        assert live_commands.fetch_all(CALLER) == [[marker, 12.5, True, "2024-01-02 03:04:05"]]
        logger.info("✓ Row inserted and read back")

    def test_null_values(self, live_commands, marker):
        live_commands.execute(CALLER, INSERT, [marker, None, None], mode="update")
        live_commands.execute(CALLER, SELECT_BY_NAME, [marker], mode="query")

        assert live_commands.fetch_row(CALLER) == [marker, 0.0, True, ""]

    def test_direct_statement(self, live_commands):
        assert live_commands.execute(CALLER, "SELECT 1 + 1") is True
        assert live_commands.fetch_row(CALLER) == [2.0]

    def test_syntax_error(self, live_commands):
        with pytest.raises(StatementError):
            live_commands.execute(CALLER, "SELEC 1")


class TestLivePooling:
    """Test autodisconnect and bounded waits on real connections."""

    def test_update_releases_connection(self, live_commands, marker):
        live_commands.execute(CALLER, INSERT, [marker, 1, None], mode="update")

        assert not live_commands.debug_is_connected(CALLER)
        assert live_commands.is_connected(CALLER)

    def test_rollback_discards_changes(self, live_commands, marker):
        live_commands.start_transaction(CALLER)
        live_commands.execute(CALLER, INSERT, [marker, 1, None], mode="update")
        assert live_commands.debug_is_connected(CALLER)
        live_commands.rollback(CALLER)

        live_commands.execute(CALLER, COUNT_BY_NAME, [marker], mode="query")
        assert live_commands.fetch_row(CALLER) == [0.0]

    def test_commit_keeps_changes(self, live_commands, marker):
        live_commands.start_transaction(CALLER)
        live_commands.execute(CALLER, INSERT, [marker, 1, None], mode="update")
        live_commands.commit(CALLER)

        live_commands.execute("observer", COUNT_BY_NAME, [marker], mode="query")
        assert live_commands.fetch_row("observer") == [1.0]

    @pytest.mark.slow
    def test_pool_timeout(self, live_commands):
        for i in range(5):
            live_commands.start_transaction(f"holder-{i}")

        with pytest.raises(PoolTimeout):
            live_commands.execute(CALLER, "SELECT 1")

        for i in range(5):
            live_commands.rollback(f"holder-{i}")

    def test_schema_operations(self, live_commands, live_database):
        assert live_commands.current_database(CALLER) == live_database
        assert live_commands.find_database(CALLER, live_database)
        assert not live_commands.find_database(CALLER, "no_such_schema_here")
        with pytest.raises(UnsupportedOperationForConnectionKind):
            live_commands.use_database(CALLER, live_database)


class TestLiveExplicitConnection:

    def test_use_database(self, live_commands, live_settings, live_database):
        live_commands.connect(CALLER, live_settings)

        live_commands.use_database(CALLER, "information_schema")
        assert live_commands.current_database(CALLER) == "information_schema"

        live_commands.use_database(CALLER, live_database)
        assert live_commands.current_database(CALLER) == live_database
