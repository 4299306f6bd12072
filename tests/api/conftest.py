"""
Fixtures for the HTTP API tests.

The application is served in-process with FastAPI's TestClient against the
fake driver environments from the top-level conftest.
"""

import pytest
from fastapi.testclient import TestClient

from sqlwrapper.api.main import create_app
from tests.fixtures.assertions import APIAssertions


def caller(caller_id: str) -> dict:
    """Headers identifying a caller."""
    return {"X-Caller-Id": caller_id}


@pytest.fixture
def api_client(pooled_environment):
    """Client for an application with pooling enabled."""
    with TestClient(create_app(pooled_environment)) as client:
        yield client


@pytest.fixture
def explicit_api_client(environment):
    """Client for an application without a default connection."""
    with TestClient(create_app(environment)) as client:
        yield client


@pytest.fixture
def api() -> APIAssertions:
    return APIAssertions()
