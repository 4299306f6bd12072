"""
Pytest Configuration and Shared Fixtures for the SQL wrapper test suite.

This module provides:
- Fake driver server and environments wired to it
- Live database settings for the integration tests (.env.test / DB_TEST_*)
- Scripted statements shared by the unit tests
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict

import pytest
from dotenv import load_dotenv
from mysql.connector.constants import FieldType

from sqlwrapper.commands import SqlCommands
from sqlwrapper.config import CONNECTIONPOOL, DEFAULTCONNECTION, EXPLICITCONNECTION, SqlConfiguration
from sqlwrapper.database import MySqlDatabase
from sqlwrapper.environment import SqlEnvironment
from tests.fixtures.fake_driver import FakeServer

# Load test environment
env_file = Path(__file__).parent.parent / ".env.test"
if env_file.exists():
    load_dotenv(env_file)
else:
    load_dotenv()

# Configure logging
logging.basicConfig(
    level=logging.DEBUG,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

PEOPLE_QUERY = "SELECT id, name, active FROM people"
PEOPLE_ROWS = [(1, b"Ada", 1), (2, b"Grace", 0), (3, b"Linus", 1)]
PEOPLE_COLUMNS = [("id", FieldType.LONG), ("name", FieldType.VAR_STRING), ("active", FieldType.BIT)]
EMPTY_QUERY = "SELECT id FROM people WHERE id < 0"
PARAM_QUERY = "SELECT id, name, active FROM people WHERE id = ?"
RENAME_UPDATE = "UPDATE people SET name = ? WHERE id = ?"
INSERT_DIRECT = "INSERT INTO people (name) VALUES ('Barbara')"
BROKEN_SQL = "SELEC nonsense"

DB_SETTINGS = {
    "user": "tester",
    "password": "secret",
    "database": "sqlwrapper",
}


# ============================================================================
# FAKE DRIVER FIXTURES
# ============================================================================

@pytest.fixture
def fake_server() -> FakeServer:
    """Fake server with the statements used throughout the unit tests."""
    server = FakeServer()
    server.add_query(PEOPLE_QUERY, PEOPLE_COLUMNS, PEOPLE_ROWS)
    server.add_query(EMPTY_QUERY, [("id", FieldType.LONG)], [])
    server.add_query(PARAM_QUERY, PEOPLE_COLUMNS, PEOPLE_ROWS[:1])
    server.add_update(RENAME_UPDATE, rowcount=1)
    server.add_update(INSERT_DIRECT, rowcount=1)
    server.add_error(BROKEN_SQL)
    return server


@pytest.fixture
def environment(fake_server):
    """Environment without a default connection (pooling disabled)."""
    env = SqlEnvironment(partition_factory=fake_server.partition_factory, connect=fake_server.connect)
    yield env
    env.shutdown()


@pytest.fixture
def pooled_environment(environment):
    """Environment with a pool of 5 connections and a 1 second acquire timeout."""
    environment.configuration.configure(CONNECTIONPOOL, {"partitions": "1", "max-connections": "5", "timeout": "1"})
    environment.configuration.configure(DEFAULTCONNECTION, DB_SETTINGS)
    assert environment.pool.enabled
    return environment


@pytest.fixture
def commands(pooled_environment) -> SqlCommands:
    return SqlCommands(pooled_environment)


@pytest.fixture
def explicit_commands(environment) -> SqlCommands:
    return SqlCommands(environment)


@pytest.fixture
def mysql_dialect() -> MySqlDatabase:
    setting = SqlConfiguration().resolve(EXPLICITCONNECTION, DB_SETTINGS)
    return MySqlDatabase(setting)


# ============================================================================
# LIVE DATABASE SETTINGS
# ============================================================================

@pytest.fixture(scope='session')
def test_config() -> Dict[str, Any]:
    """Load live database settings from environment."""
    return {
        'db_host': os.getenv('DB_TEST_HOST', '127.0.0.1'),
        'db_port': os.getenv('DB_TEST_PORT', '3306'),
        'db_user': os.getenv('DB_TEST_USER'),
        'db_password': os.getenv('DB_TEST_PASSWORD', ''),
        'db_name': os.getenv('DB_TEST_NAME', 'sqlwrapper_test'),
    }


def pytest_configure(config):
    """Configure pytest."""
    logger.info("=" * 70)
    logger.info("SQL wrapper test suite")
    logger.info("=" * 70)
