#
# SPDX-License-Identifier: AGPL-3.0-only
# Copyright (c) 2026 m2-eng
# Author: m2-eng
# Co-Author: GitHub Copilot
# License: GNU Affero General Public License v3.0 (AGPL-3.0-only)
# Purpose: Database brand dependent features (dialect helpers).
#
"""
Database brand dependent features.

A DatabaseInfo knows how to reach one database engine and implements the
few engine specific operations the session layer offers (switching schema,
looking up schemas, reporting the current schema).
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, TYPE_CHECKING
from urllib.parse import urlsplit

from sqlwrapper.config import (
    OPT_AUTODISCONNECT,
    OPT_DATABASE,
    OPT_DRIVER,
    OPT_HOST,
    OPT_JDBC_URL,
    OPT_PASSWORD,
    OPT_PORT,
    OPT_USER,
)
from sqlwrapper.errors import ConfigurationError
from sqlwrapper.settings import Setting

if TYPE_CHECKING:
    from sqlwrapper.connection.session import Session


class DatabaseInfo(ABC):
    """Connection parameters plus the engine specific operations."""

    BRANDNAME = ""
    DEFAULT_PORT = 0
    URL_SCHEME = ""

    def __init__(self, setting: Setting):
        self._setting = setting.copy()
        self.driver = self._resolve_driver(setting)
        self.host = setting.get_string(OPT_HOST)
        self.port = setting.get_int(OPT_PORT) or self.DEFAULT_PORT
        self.database = setting.get_string(OPT_DATABASE) if setting.is_set(OPT_DATABASE) else None
        if setting.is_set(OPT_JDBC_URL):
            self._apply_url(setting.get_string(OPT_JDBC_URL))
        # Only the defaultconnection aspect carries the toggle; explicit
        # connections are never autodisconnected.
        self.autodisconnect = setting.get_toggle(OPT_AUTODISCONNECT) if OPT_AUTODISCONNECT in setting else False

    @property
    def brand(self) -> str:
        return self.BRANDNAME

    @property
    def user(self) -> str:
        return self._setting.get_string(OPT_USER)

    @property
    def password(self) -> str:
        return self._setting.get_string(OPT_PASSWORD)

    @classmethod
    def is_complete(cls, setting: Setting) -> bool:
        """True if the setting holds enough to open connections."""
        return setting.is_valid()

    def build_url(self) -> str:
        return f"{self.URL_SCHEME}://{self.host}:{self.port}/{self.database or ''}"

    def _resolve_driver(self, setting: Setting) -> str:
        if not setting.is_set(OPT_DRIVER):
            return self.default_driver()
        driver = setting.get_string(OPT_DRIVER)
        if driver != self.default_driver():
            raise ConfigurationError(f"Driver '{driver}' is not supported for brand {self.BRANDNAME}")
        return driver

    def _apply_url(self, url: str) -> None:
        if url.startswith("jdbc:"):
            url = url[len("jdbc:"):]
        parts = urlsplit(url)
        if parts.scheme != self.URL_SCHEME:
            raise ConfigurationError(f"Unsupported url '{url}' for brand {self.BRANDNAME}")
        try:
            self.host = parts.hostname or self.host
            self.port = parts.port or self.port
        except ValueError as e:
            raise ConfigurationError(f"Invalid url '{url}': {e}") from e
        database = parts.path.lstrip("/")
        if database:
            self.database = database

    @abstractmethod
    def default_driver(self) -> str:
        """Name of the driver module used to connect."""

    @abstractmethod
    def connect_params(self) -> Dict[str, Any]:
        """Keyword arguments for the driver's connect call."""

    @abstractmethod
    def use_database(self, session: "Session", schema_name: str) -> None:
        """Switches the active schema of the session's connection."""

    @abstractmethod
    def find_database(self, session: "Session", schema_name: str) -> bool:
        """Checks whether a schema exists."""

    @abstractmethod
    def current_database(self, session: "Session") -> str:
        """Name of the schema currently in use ("" if unknown)."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.build_url()!r}, user={self.user!r})"
