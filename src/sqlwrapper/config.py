#
# SPDX-License-Identifier: AGPL-3.0-only
# Copyright (c) 2026 m2-eng
# Author: m2-eng
# Co-Author: GitHub Copilot
# License: GNU Affero General Public License v3.0 (AGPL-3.0-only)
# Purpose: Configuration store for the configurable aspects.
#
"""
Configuration store for the configurable aspects.

Each aspect starts from a template of defaults. Required options without a
sensible default carry DEFAULT_INVALID so incomplete configurations are caught
before they are used.
"""

import logging
import threading
from typing import Any, Callable, Dict, List, Mapping

from cryptography.fernet import Fernet

from sqlwrapper.errors import ConfigurationError, SqlWrapperError
from sqlwrapper.settings import DEFAULT_INVALID, DEFAULT_UNSET, Setting
from sqlwrapper.utils import load_config

logger = logging.getLogger(__name__)

#
# configurable aspects
#
DEFAULTCONNECTION = "defaultconnection"
CONNECTIONPOOL = "connectionpool"
LOGGING = "logging"
EXPLICITCONNECTION = "explicit-connection"

#
# options of the aspects above
#
OPT_BRAND = "brand"
OPT_HOST = "host"
OPT_PORT = "port"
OPT_USER = "user"
OPT_PASSWORD = "password"
OPT_DATABASE = "database"
OPT_AUTODISCONNECT = "autodisconnect"
OPT_DRIVER = "driver"
OPT_JDBC_URL = "jdbc-url"
OPT_PARTITIONS = "partitions"
OPT_MAXCONNECTIONS = "max-connections"
OPT_TIMEOUT = "timeout"
OPT_LOG_PATH = "path"
OPT_FILE_LOGGING = "file-logging"
OPT_LOG_LEVEL = "level"
OPT_COPY_TO_STDERR = "copy-to-stderr"

_CONNECT_DEFAULTS = [
    (OPT_BRAND, "MySql"),
    (OPT_HOST, "localhost"),
    (OPT_PORT, "3306"),
    (OPT_DATABASE, DEFAULT_UNSET),
    (OPT_USER, DEFAULT_INVALID),
    (OPT_PASSWORD, DEFAULT_INVALID),
    (OPT_JDBC_URL, DEFAULT_UNSET),
    (OPT_DRIVER, DEFAULT_UNSET),
]

DEFAULTS = {
    DEFAULTCONNECTION: _CONNECT_DEFAULTS + [(OPT_AUTODISCONNECT, "on")],
    CONNECTIONPOOL: [
        (OPT_PARTITIONS, "1"),
        (OPT_MAXCONNECTIONS, "20"),
        (OPT_TIMEOUT, "5"),
    ],
    LOGGING: [
        (OPT_LOG_PATH, "%t"),
        (OPT_FILE_LOGGING, "off"),
        (OPT_LOG_LEVEL, "ALL"),
        (OPT_COPY_TO_STDERR, "off"),
    ],
    # Only used to validate the arguments of an explicit connect.
    EXPLICITCONNECTION: list(_CONNECT_DEFAULTS),
}

HIDDEN = frozenset({EXPLICITCONNECTION})

Listener = Callable[[Setting], Any]


class SqlConfiguration:
    """
    In-memory store of all aspects and the listeners interested in them.

    A candidate setting is pushed to the listeners of its aspect and only
    stored when all of them accept it.
    """

    def __init__(self):
        self._cipher = Fernet(Fernet.generate_key())
        self._available: Dict[str, Setting] = {
            name: Setting(name, defaults, visible=name not in HIDDEN, cipher=self._cipher)
            for name, defaults in DEFAULTS.items()
        }
        self._configured: Dict[str, Setting] = {}
        self._listeners: Dict[str, List[Listener]] = {}
        self._lock = threading.RLock()

    def add_listener(self, name: str, listener: Listener) -> None:
        """Registers a listener for an aspect (no initial push)."""
        self._template(name)
        with self._lock:
            self._listeners.setdefault(name, []).append(listener)

    def remove_listener(self, name: str, listener: Listener) -> None:
        with self._lock:
            if listener in self._listeners.get(name, []):
                self._listeners[name].remove(listener)

    def configure(self, name: str, key_values: Mapping[str, Any]) -> Setting:
        """
        Implementation of the configure command.

        Args:
            name: aspect to configure
            key_values: options to change

        Returns:
            The stored setting

        Raises:
            ConfigurationError: Unknown or hidden aspect, unknown key, or a
                listener rejected the setting
        """
        template = self._template(name)
        if not template.visible:
            message = f"Attempt to configure for unknown name ('{name}')"
            logger.error(message)
            raise ConfigurationError(message)

        with self._lock:
            candidate = self._configured.get(name, template).copy()
            self._assign(candidate, key_values, template)

            for listener in list(self._listeners.get(name, [])):
                try:
                    listener(candidate)
                except SqlWrapperError:
                    raise
                except Exception as e:
                    message = f"Problem while configuring '{name}': {e}"
                    logger.error(message)
                    raise ConfigurationError(message) from e

            self._configured[name] = candidate
            logger.debug("Configured %s", candidate)
            return candidate

    def resolve(self, name: str, key_values: Mapping[str, Any]) -> Setting:
        """Builds a setting from the aspect defaults plus key_values, without storing it."""
        template = self._template(name)
        candidate = template.copy()
        self._assign(candidate, key_values, template)
        return candidate

    def get_configuration(self, name: str) -> Setting:
        """Configured setting of an aspect, or a copy of its defaults."""
        template = self._template(name)
        with self._lock:
            return self._configured.get(name, template).copy()

    def get_full_configuration(self) -> Dict[str, List[List[str]]]:
        """All visible aspects as name -> [[key, value], ...] (secrets masked)."""
        return {
            name: [[key, value] for key, value in self.get_configuration(name).items()]
            for name in sorted(self._available)
            if self._available[name].visible
        }

    def names(self) -> List[str]:
        return sorted(name for name, setting in self._available.items() if setting.visible)

    def load_file(self, config_path: str) -> None:
        """Applies every aspect found in a YAML configuration file."""
        try:
            aspects = load_config(config_path)
        except RuntimeError as e:
            raise ConfigurationError(str(e)) from e

        # The pool has to be sized before the default connection opens it.
        order = [CONNECTIONPOOL, LOGGING, DEFAULTCONNECTION]
        for name in sorted(aspects, key=lambda n: order.index(n) if n in order else len(order)):
            options = aspects[name] or {}
            if not isinstance(options, Mapping):
                raise ConfigurationError(f"Aspect '{name}' in {config_path} must be a mapping")
            self.configure(name, {str(k): str(v) for k, v in options.items()})

    @staticmethod
    def parse_setting_list(name: str, setting_list) -> Dict[str, str]:
        """
        Turns a list of [key, value] pairs into a dict.

        A single [value] is accepted when it is the only element; it maps to
        the empty key.
        """
        key_values: Dict[str, str] = {}
        for pair in setting_list:
            if isinstance(pair, (list, tuple)) and len(pair) == 2:
                key_values[str(pair[0])] = str(pair[1])
            elif isinstance(pair, (list, tuple)) and len(pair) == 1 and len(setting_list) == 1:
                key_values[""] = str(pair[0])
            else:
                raise ConfigurationError(f"configure: invalid [key value] pair for name '{name}' ({pair!r})")
        return key_values

    def _template(self, name: str) -> Setting:
        if name not in self._available:
            message = f"Attempt to configure for unknown name ('{name}')"
            logger.error(message)
            raise ConfigurationError(message)
        return self._available[name]

    @staticmethod
    def _assign(setting: Setting, key_values: Mapping[str, Any], constraint: Setting) -> None:
        for key, value in key_values.items():
            if key not in constraint:
                message = f"Attempt to configure unknown key '{key}' for name '{constraint.name}'"
                logger.error(message)
                raise ConfigurationError(message)
            setting.put(key, value)
