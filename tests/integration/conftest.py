"""
Fixtures for the tests against a live MySQL server.

The server is configured through DB_TEST_HOST, DB_TEST_PORT, DB_TEST_USER,
DB_TEST_PASSWORD and DB_TEST_NAME (e.g. in .env.test). Without DB_TEST_USER
every test in this package is skipped.
"""

import logging
import uuid

import mysql.connector
import pytest

from sqlwrapper.commands import SqlCommands
from sqlwrapper.config import CONNECTIONPOOL, DEFAULTCONNECTION
from sqlwrapper.environment import SqlEnvironment

logger = logging.getLogger(__name__)


@pytest.fixture(scope='session')
def live_settings(test_config):
    """Connection settings of the live server."""
    if not test_config['db_user']:
        pytest.skip("DB_TEST_USER not set; live MySQL tests skipped")
    return {
        "host": test_config['db_host'],
        "port": test_config['db_port'],
        "user": test_config['db_user'],
        "password": test_config['db_password'],
        "database": test_config['db_name'],
    }


@pytest.fixture(scope='session')
def live_database(live_settings):
    """Create the test database and a scratch table once per session."""
    params = {key: value for key, value in live_settings.items() if key != "database"}
    connection = mysql.connector.connect(**params)
    cursor = connection.cursor()
    try:
        cursor.execute(f"CREATE DATABASE IF NOT EXISTS `{live_settings['database']}`")
        cursor.execute(f"USE `{live_settings['database']}`")
        cursor.execute(
            "CREATE TABLE IF NOT EXISTS wrapper_people ("
            " id INT AUTO_INCREMENT PRIMARY KEY,"
            " name VARCHAR(64) NOT NULL,"
            " score DECIMAL(6,2) NULL,"
            " active BIT(1) NOT NULL DEFAULT b'1',"
            " created DATETIME NULL"
            ")"
        )
        connection.commit()
        logger.info(f"✓ Live database {live_settings['database']} ready")
        yield live_settings['database']
        cursor.execute("DROP TABLE IF EXISTS wrapper_people")
        connection.commit()
    finally:
        cursor.close()
        connection.close()


@pytest.fixture
def live_environment(live_settings, live_database):
    """Environment pooling against the live server (5 connections, 2 second timeout)."""
    environment = SqlEnvironment()
    environment.configuration.configure(CONNECTIONPOOL, {"partitions": "1", "max-connections": "5", "timeout": "2"})
    environment.configuration.configure(DEFAULTCONNECTION, live_settings)
    yield environment
    environment.shutdown()


@pytest.fixture
def live_commands(live_environment) -> SqlCommands:
    return SqlCommands(live_environment)


@pytest.fixture
def marker() -> str:
    """Unique name so parallel runs never see each other's rows."""
    return f"wrapper-{uuid.uuid4().hex[:12]}"
