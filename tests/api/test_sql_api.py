#
# SPDX-License-Identifier: AGPL-3.0-only
# Copyright (c) 2026 m2-eng
# Author: m2-eng
# Co-Author: GitHub Copilot
# License: GNU Affero General Public License v3.0 (AGPL-3.0-only)
# Purpose: SQL command API tests
#
import logging

import pytest

from tests.api.conftest import caller
from tests.conftest import BROKEN_SQL, DB_SETTINGS, INSERT_DIRECT, PARAM_QUERY, PEOPLE_QUERY, RENAME_UPDATE

logger = logging.getLogger(__name__)

pytestmark = pytest.mark.api

AGENT = caller("agent-1")


class TestServiceEndpoints:

    def test_health(self, api_client, api):
        data = api.assert_response_success(api_client.get("/api/health"))

        assert data["status"] == "healthy"
        assert data["pooling"] is True

    def test_version(self, api_client, api):
        data = api.assert_response_success(api_client.get("/api/version"))
        assert data["version"]

    def test_missing_caller_header(self, api_client):
        response = api_client.post("/api/sql/execute", json={"sql": PEOPLE_QUERY})
        assert response.status_code == 422


class TestStatementAPI:
    """Test execute and fetch over HTTP."""

    def test_execute_and_fetch_rows(self, api_client, api):
        data = api.assert_response_success(
            api_client.post("/api/sql/execute", json={"sql": PEOPLE_QUERY}, headers=AGENT)
        )
        assert data["has_cursor"] is True

        row = api.assert_response_success(api_client.post("/api/sql/fetch-row", headers=AGENT))
        assert row["row"] == [1.0, "Ada", True]

        rows = api.assert_response_success(api_client.post("/api/sql/fetch-all", headers=AGENT))
        assert len(rows["rows"]) == 3

        available = api.assert_response_success(api_client.get("/api/sql/row-available", headers=AGENT))
        assert available["value"] is False
        logger.info("✓ Rows fetched over HTTP")

    def test_query_with_parameters(self, api_client, api):
        api.assert_response_success(api_client.post(
            "/api/sql/execute", json={"sql": PARAM_QUERY, "params": [1], "mode": "query"}, headers=AGENT
        ))

        rows = api.assert_response_success(api_client.post("/api/sql/fetch-all", headers=AGENT))
        assert rows["rows"] == [[1.0, "Ada", True]]

    def test_update(self, api_client, api):
        data = api.assert_response_success(api_client.post(
            "/api/sql/execute", json={"sql": RENAME_UPDATE, "params": ["Ada L.", 1], "mode": "update"},
            headers=AGENT,
        ))

        assert data == {"has_cursor": False, "row_count": 1}
        count = api.assert_response_success(api_client.get("/api/sql/row-count", headers=AGENT))
        assert count["row_count"] == 1

    def test_broken_sql(self, api_client, api):
        response = api_client.post("/api/sql/execute", json={"sql": BROKEN_SQL}, headers=AGENT)
        api.assert_sql_error(response, 400, "StatementError")

    def test_parameter_mismatch(self, api_client, api):
        response = api_client.post(
            "/api/sql/execute", json={"sql": PARAM_QUERY, "params": [], "mode": "query"}, headers=AGENT
        )
        api.assert_sql_error(response, 400, "StatementError")

    def test_unknown_mode(self, api_client):
        response = api_client.post("/api/sql/execute", json={"sql": PEOPLE_QUERY, "mode": "batch"}, headers=AGENT)
        assert response.status_code == 422

    def test_pool_exhausted(self, api_client, api):
        """Test the sixth caller gets 503 while five callers hold transactions."""
        for i in range(5):
            api.assert_response_success(
                api_client.post("/api/sql/transaction/start", headers=caller(f"holder-{i}")), 204
            )

        response = api_client.post("/api/sql/execute", json={"sql": PEOPLE_QUERY}, headers=AGENT)

        api.assert_sql_error(response, 503, "PoolTimeout")
        logger.info("✓ Pool exhaustion reported as 503")


class TestTransactionAPI:

    def test_commit_without_transaction(self, api_client, api):
        response = api_client.post("/api/sql/transaction/commit", headers=AGENT)
        api.assert_sql_error(response, 409, "TransactionError")

    def test_transaction(self, api_client, api):
        api.assert_response_success(api_client.post("/api/sql/transaction/start", headers=AGENT), 204)
        api.assert_response_success(
            api_client.post("/api/sql/execute", json={"sql": INSERT_DIRECT}, headers=AGENT)
        )

        held = api.assert_response_success(api_client.get("/api/sql/connected?debug=true", headers=AGENT))
        assert held["value"] is True

        api.assert_response_success(api_client.post("/api/sql/transaction/commit", headers=AGENT), 204)

        released = api.assert_response_success(api_client.get("/api/sql/connected?debug=true", headers=AGENT))
        assert released["value"] is False
        logical = api.assert_response_success(api_client.get("/api/sql/connected", headers=AGENT))
        assert logical["value"] is True

    def test_autocommit_toggle(self, api_client, api):
        api.assert_response_success(api_client.post("/api/sql/autocommit/off", headers=AGENT), 204)

        data = api.assert_response_success(api_client.get("/api/sql/autocommit", headers=AGENT))
        assert data["value"] is False

        api.assert_response_success(api_client.post("/api/sql/autocommit/on", headers=AGENT), 204)


class TestDatabaseAPI:

    def test_use_database_on_pooled_connection(self, api_client, api):
        response = api_client.post("/api/sql/database/use", json={"name": "information_schema"}, headers=AGENT)
        api.assert_sql_error(response, 409, "UnsupportedOperationForConnectionKind")

    def test_current_and_exists(self, api_client, api):
        current = api.assert_response_success(api_client.get("/api/sql/database/current", headers=AGENT))
        assert current["name"] == "sqlwrapper"

        found = api.assert_response_success(
            api_client.get("/api/sql/database/exists", params={"name": "missing"}, headers=AGENT)
        )
        assert found["value"] is False

    def test_explicit_connection_flow(self, explicit_api_client, api):
        api.assert_response_success(
            explicit_api_client.post("/api/sql/connect", json={"settings": DB_SETTINGS}, headers=AGENT), 204
        )
        api.assert_response_success(
            explicit_api_client.post("/api/sql/database/use", json={"name": "information_schema"}, headers=AGENT),
            204,
        )

        current = api.assert_response_success(explicit_api_client.get("/api/sql/database/current", headers=AGENT))
        assert current["name"] == "information_schema"

        api.assert_response_success(explicit_api_client.post("/api/sql/disconnect", headers=AGENT), 204)
        connected = api.assert_response_success(explicit_api_client.get("/api/sql/connected", headers=AGENT))
        assert connected["value"] is False

    def test_no_connection(self, explicit_api_client, api):
        response = explicit_api_client.post("/api/sql/execute", json={"sql": PEOPLE_QUERY}, headers=AGENT)
        api.assert_sql_error(response, 409, "NoActiveConnection")

    def test_connect_refused(self, explicit_api_client, api, fake_server):
        fake_server.refuse_connections = True

        response = explicit_api_client.post("/api/sql/connect", json={"settings": DB_SETTINGS}, headers=AGENT)

        api.assert_sql_error(response, 503, "ConnectionFailure")


class TestLogAPI:

    def test_log(self, api_client, api):
        api.assert_response_success(
            api_client.post("/api/sql/log", json={"level": "WARNING", "message": "from the caller"}), 204
        )

    def test_log_unknown_level(self, api_client, api):
        response = api_client.post("/api/sql/log", json={"level": "LOUD", "message": "nope"})
        api.assert_sql_error(response, 400, "ConfigurationError")
