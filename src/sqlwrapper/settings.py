#
# SPDX-License-Identifier: AGPL-3.0-only
# Copyright (c) 2026 m2-eng
# Author: m2-eng
# Co-Author: GitHub Copilot
# License: GNU Affero General Public License v3.0 (AGPL-3.0-only)
# Purpose: Key/value settings of one configurable aspect.
#
"""
Key/value settings of one configurable aspect.

Values are kept as strings, the way they arrive from the caller. Secret
values (passwords) are stored encrypted in memory.
"""

from typing import Dict, Iterable, Optional, Tuple

from cryptography.fernet import Fernet

from sqlwrapper.errors import ConfigurationError


DEFAULT_UNSET = "<default, unset>"
DEFAULT_INVALID = "<default, invalid>"
SECRET_KEYS = frozenset({"password"})
MASK = "********"


def toggle_value(toggle: str) -> bool:
    """
    Interprets an on/off toggle string.

    Args:
        toggle: "on", "off", "true" or "false" (case insensitive)

    Returns:
        Boolean interpretation of the toggle

    Raises:
        ConfigurationError: For any other value
    """
    value = str(toggle).strip().lower()
    if value in ("on", "true"):
        return True
    if value in ("off", "false"):
        return False
    raise ConfigurationError(f"Invalid toggle value: '{toggle}'")


class Setting:
    """
    Settings of one aspect (e.g. 'defaultconnection').

    A setting is invalid while any value still holds DEFAULT_INVALID.
    """

    def __init__(
        self,
        name: str,
        defaults: Iterable[Tuple[str, str]],
        visible: bool = True,
        cipher: Optional[Fernet] = None,
    ):
        self.name = name
        self.visible = visible
        self._cipher = cipher or Fernet(Fernet.generate_key())
        self._values: Dict[str, str] = {}
        for key, value in defaults:
            self.put(key, value)

    def put(self, key: str, value) -> None:
        value = str(value)
        if key in SECRET_KEYS and value not in (DEFAULT_UNSET, DEFAULT_INVALID):
            value = self._cipher.encrypt(value.encode()).decode()
        self._values[key] = value

    def get_string(self, key: str) -> str:
        if key not in self._values:
            raise ConfigurationError(f"Attempt to read setting for non-existent key '{key}' for name '{self.name}'")
        value = self._values[key]
        if key in SECRET_KEYS and value not in (DEFAULT_UNSET, DEFAULT_INVALID):
            return self._cipher.decrypt(value.encode()).decode()
        return value

    def get_int(self, key: str) -> int:
        value = self.get_string(key)
        try:
            return int(value.strip())
        except ValueError:
            raise ConfigurationError(f"Setting '{key}' for name '{self.name}' is not an integer: '{value}'")

    def get_toggle(self, key: str) -> bool:
        return toggle_value(self.get_string(key))

    def is_set(self, key: str) -> bool:
        """True if the key holds a real value (neither sentinel)."""
        return self._values.get(key, DEFAULT_UNSET) not in (DEFAULT_UNSET, DEFAULT_INVALID)

    def is_valid(self) -> bool:
        return DEFAULT_INVALID not in self._values.values()

    def __contains__(self, key: str) -> bool:
        return key in self._values

    def keys(self):
        return self._values.keys()

    def copy(self) -> "Setting":
        clone = Setting(self.name, (), visible=self.visible, cipher=self._cipher)
        clone._values = dict(self._values)
        return clone

    def items(self, mask_secrets: bool = True):
        """Yields (key, value) pairs, secrets masked unless asked otherwise."""
        for key in sorted(self._values):
            if mask_secrets and key in SECRET_KEYS and self.is_set(key):
                yield key, MASK
            else:
                yield key, self.get_string(key)

    def __repr__(self) -> str:
        return f"Setting({self.name!r}, {dict(self.items())!r})"
