#
# SPDX-License-Identifier: AGPL-3.0-only
# Copyright (c) 2026 m2-eng
# Author: m2-eng
# Co-Author: GitHub Copilot
# License: GNU Affero General Public License v3.0 (AGPL-3.0-only)
# Purpose: Setting value handling tests
#
import pytest

from sqlwrapper.errors import ConfigurationError
from sqlwrapper.settings import DEFAULT_INVALID, DEFAULT_UNSET, MASK, Setting, toggle_value

pytestmark = pytest.mark.unit


@pytest.fixture
def setting():
    return Setting("sample", [
        ("host", "localhost"),
        ("port", "3306"),
        ("database", DEFAULT_UNSET),
        ("user", DEFAULT_INVALID),
        ("password", DEFAULT_INVALID),
    ])


class TestToggle:

    @pytest.mark.parametrize("text, expected", [
        ("on", True), ("ON", True), ("true", True), (" True ", True),
        ("off", False), ("False", False),
    ])
    def test_valid(self, text, expected):
        assert toggle_value(text) is expected

    @pytest.mark.parametrize("text", ["yes", "1", ""])
    def test_invalid(self, text):
        with pytest.raises(ConfigurationError):
            toggle_value(text)


class TestSetting:
    """Test typed access and the sentinels."""

    def test_typed_access(self, setting):
        assert setting.get_string("host") == "localhost"
        assert setting.get_int("port") == 3306

    def test_get_int_rejects_text(self, setting):
        with pytest.raises(ConfigurationError):
            setting.get_int("host")

    @pytest.mark.parametrize("value", ["0.5", "5.0", "1e3"])
    def test_get_int_rejects_fractions(self, setting, value):
        setting.put("port", value)

        with pytest.raises(ConfigurationError):
            setting.get_int("port")

    def test_unknown_key(self, setting):
        with pytest.raises(ConfigurationError):
            setting.get_string("colour")

    def test_validity(self, setting):
        assert not setting.is_valid()
        assert not setting.is_set("database")

        setting.put("user", "tester")
        setting.put("password", "secret")

        assert setting.is_valid()
        assert not setting.is_set("database")

    def test_password_encrypted_in_memory(self, setting):
        setting.put("password", "secret")

        assert setting._values["password"] != "secret"
        assert setting.get_string("password") == "secret"

    def test_items_mask_password(self, setting):
        setting.put("password", "secret")

        assert dict(setting.items())["password"] == MASK
        assert dict(setting.items(mask_secrets=False))["password"] == "secret"
        assert "secret" not in repr(setting)

    def test_copy_is_independent(self, setting):
        setting.put("password", "secret")
        clone = setting.copy()
        clone.put("host", "db.example.org")

        assert setting.get_string("host") == "localhost"
        assert clone.get_string("password") == "secret"
