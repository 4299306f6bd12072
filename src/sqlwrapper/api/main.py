#
# SPDX-License-Identifier: AGPL-3.0-only
# Copyright (c) 2026 m2-eng
# Author: m2-eng
# Co-Author: GitHub Copilot
# License: GNU Affero General Public License v3.0 (AGPL-3.0-only)
# Purpose: FastAPI application exposing the SQL wrapper commands.
#
"""
FastAPI Main Application for the SQL wrapper API
"""

import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from sqlwrapper.api import dependencies
from sqlwrapper.api.models import VersionResponse
from sqlwrapper.api.routers import configuration, sql
from sqlwrapper.environment import SqlEnvironment

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "SQLWRAPPER_CONFIG"


def create_app(environment: SqlEnvironment | None = None) -> FastAPI:
    """
    Build the application.

    Args:
        environment: Environment to serve; without one it is created on
            startup from the file named by SQLWRAPPER_CONFIG (if set)
    """
    app = FastAPI(
        title="SQL Wrapper API",
        description="Per-caller SQL sessions over a shared MySQL connection pool",
        version=SqlEnvironment.version(),
        docs_url="/api/docs",
        redoc_url="/api/redoc"
    )

    # CORS middleware for browser clients
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(sql.router, prefix="/api")
    app.include_router(configuration.router, prefix="/api")

    @app.get("/api/health")
    def health_check():
        """Health check endpoint"""
        env = dependencies.current_environment()
        return {
            "status": "healthy",
            "service": "SQL Wrapper API",
            "pooling": bool(env and env.pool.enabled),
        }

    @app.get("/api/version", response_model=VersionResponse)
    def show_version():
        return VersionResponse(version=SqlEnvironment.version())

    @app.on_event("startup")
    def startup_event():
        """Initialize the SQL environment on startup"""
        env = environment
        if env is None:
            config_path = os.environ.get(CONFIG_ENV_VAR)
            if config_path:
                env = SqlEnvironment.from_config_file(config_path)
                logger.info("Configuration loaded from %s", config_path)
            else:
                env = SqlEnvironment()
        dependencies.set_environment(env)
        logger.info("✓ SQL environment ready")

    @app.on_event("shutdown")
    def shutdown_event():
        """Close all sessions and the pool on shutdown"""
        env = dependencies.current_environment()
        if env is not None:
            env.shutdown()
            dependencies.set_environment(None)
            logger.info("✓ SQL environment shut down")

    return app


app = create_app()
