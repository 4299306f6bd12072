#
# SPDX-License-Identifier: AGPL-3.0-only
# Copyright (c) 2026 m2-eng
# Author: m2-eng
# Co-Author: GitHub Copilot
# License: GNU Affero General Public License v3.0 (AGPL-3.0-only)
# Purpose: Applies the 'logging' aspect to the sqlwrapper logger.
#
"""
Applies the 'logging' aspect to the sqlwrapper logger.
"""

import logging
import os
import sys
import tempfile

from sqlwrapper.config import OPT_COPY_TO_STDERR, OPT_FILE_LOGGING, OPT_LOG_LEVEL, OPT_LOG_PATH
from sqlwrapper.errors import ConfigurationError
from sqlwrapper.settings import Setting

ROOT_LOGGER = "sqlwrapper"
LOG_FILE_NAME = "sqlwrapper.log"
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# java.util.logging names are accepted next to the Python ones
LEVELS = {
    "ALL": 1,
    "FINEST": 5,
    "FINER": 8,
    "FINE": logging.DEBUG,
    "DEBUG": logging.DEBUG,
    "CONFIG": 15,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "SEVERE": logging.ERROR,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
    "OFF": logging.CRITICAL + 10,
}

_installed_handlers: list[logging.Handler] = []


def parse_level(level: str) -> int:
    try:
        return LEVELS[str(level).strip().upper()]
    except KeyError:
        raise ConfigurationError(f"Unknown logging level '{level}'")


def resolve_log_path(path: str) -> str:
    """'%t' stands for the system temp directory, '%h' for the user's home."""
    path = path.replace("%t", tempfile.gettempdir()).replace("%h", os.path.expanduser("~"))
    if os.path.isdir(path) or not os.path.splitext(path)[1]:
        path = os.path.join(path, LOG_FILE_NAME)
    return path


def configure_logging(setting: Setting) -> logging.Logger:
    """Listener for the 'logging' aspect; replaces handlers installed earlier."""
    level = parse_level(setting.get_string(OPT_LOG_LEVEL))
    file_logging = setting.get_toggle(OPT_FILE_LOGGING)
    copy_to_stderr = setting.get_toggle(OPT_COPY_TO_STDERR)

    logger = logging.getLogger(ROOT_LOGGER)

    handlers: list[logging.Handler] = []
    if file_logging:
        log_path = resolve_log_path(setting.get_string(OPT_LOG_PATH))
        try:
            handlers.append(logging.FileHandler(log_path, encoding='utf-8'))
        except OSError as e:
            raise ConfigurationError(f"Cannot open log file '{log_path}': {e}") from e
    if copy_to_stderr:
        handlers.append(logging.StreamHandler(sys.stderr))

    # old handlers stay installed until every new one has opened
    while _installed_handlers:
        handler = _installed_handlers.pop()
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT)
    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        _installed_handlers.append(handler)

    logger.setLevel(level)
    logger.debug("Logging configured: level=%s file=%s stderr=%s", level, file_logging, copy_to_stderr)
    return logger
