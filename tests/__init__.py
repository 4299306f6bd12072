"""
SQL wrapper test suite.

This package contains all test modules organized by test type:
- unit/ - Session layer tests against the in-memory fake driver
- api/ - HTTP API tests (FastAPI TestClient)
- integration/ - Tests against a live MySQL server (DB_TEST_* variables)
- fixtures/ - Fake driver and shared helpers
"""
