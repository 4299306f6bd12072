#
# SPDX-License-Identifier: AGPL-3.0-only
# Copyright (c) 2026 m2-eng
# Author: m2-eng
# Co-Author: GitHub Copilot
# License: GNU Affero General Public License v3.0 (AGPL-3.0-only)
# Purpose: Dialect helpers per database brand.
#
"""
Dialect helpers per database brand.
"""

from sqlwrapper.config import OPT_BRAND
from sqlwrapper.errors import ConfigurationError
from sqlwrapper.settings import Setting

from .base import DatabaseInfo
from .mysql import BRANDS, MySqlDatabase


def get_brand(setting: Setting) -> type[DatabaseInfo]:
    brand = setting.get_string(OPT_BRAND)
    try:
        return BRANDS[brand.lower()]
    except KeyError:
        raise ConfigurationError(f"Unsupported database brand '{brand}'")


def create_database_info(setting: Setting) -> DatabaseInfo:
    """Builds the dialect helper for the brand named in the setting."""
    return get_brand(setting)(setting)


__all__ = [
    'DatabaseInfo',
    'MySqlDatabase',
    'create_database_info',
    'get_brand',
]
