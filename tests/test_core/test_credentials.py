"""
Тесты для CredentialsManager и TsigCredentials.
"""

import pytest
from unittest.mock import patch

import dns.name

from zone_inventory.core.credentials import CredentialsManager, TsigCredentials
from zone_inventory.core.exceptions import ConfigError

SECRET = "c2VjcmV0LWtleS1mb3ItdGVzdHM="


class TestTsigCredentials:

    def test_keyring(self):
        keyring = TsigCredentials("update-key", SECRET).keyring()
        assert dns.name.from_text("update-key") in keyring

    def test_keyring_sha256(self):
        keyring = TsigCredentials("update-key", SECRET, "hmac-sha256").keyring()
        assert len(keyring) == 1

    def test_unknown_algorithm(self):
        with pytest.raises(ConfigError) as exc_info:
            TsigCredentials("update-key", SECRET, "hmac-foo").keyring()
        assert exc_info.value.key == "directory.tsig_algorithm"

    def test_bad_secret(self):
        with pytest.raises(ConfigError) as exc_info:
            TsigCredentials("update-key", "abc").keyring()
        assert exc_info.value.key == "directory.tsig_secret"

    def test_keyname(self):
        assert TsigCredentials("update-key", SECRET).keyname == dns.name.from_text("update-key.")

    def test_to_dict_hides_secret(self):
        data = TsigCredentials("update-key", SECRET).to_dict()
        assert SECRET not in data.values()
        assert data["key_name"] == "update-key"


class TestCredentialsManager:
    """Порядок источников ключа."""

    def test_explicit(self, clean_env):
        clean_env.setenv("ZONE_TSIG_KEY", "env-key")
        clean_env.setenv("ZONE_TSIG_SECRET", SECRET)

        creds = CredentialsManager("update-key", SECRET).get_credentials(interactive=False)
        assert creds.key_name == "update-key"

    def test_env(self, clean_env):
        clean_env.setenv("ZONE_TSIG_KEY", "env-key")
        clean_env.setenv("ZONE_TSIG_SECRET", SECRET)

        creds = CredentialsManager().get_credentials(
            interactive=False, config_key="cfg-key", config_secret=SECRET,
        )
        assert creds.key_name == "env-key"

    def test_config(self, clean_env):
        creds = CredentialsManager(algorithm="hmac-sha256").get_credentials(
            interactive=False, config_key="cfg-key", config_secret=SECRET,
        )

        assert creds.key_name == "cfg-key"
        assert creds.algorithm == "hmac-sha256"

    def test_cached(self, clean_env):
        manager = CredentialsManager()
        first = manager.get_credentials(interactive=False, config_key="cfg-key", config_secret=SECRET)

        assert manager.get_credentials(interactive=False) is first

    def test_prompt(self, clean_env):
        with patch("builtins.input", return_value="prompted-key"), \
                patch("zone_inventory.core.credentials.getpass", return_value=SECRET):
            creds = CredentialsManager().get_credentials(interactive=True)

        assert creds.key_name == "prompted-key"
        assert creds.secret == SECRET

    def test_prompt_uses_known_key_name(self, clean_env):
        """Имя ключа из конфигурации не запрашивается повторно."""
        with patch("builtins.input") as mock_input, \
                patch("zone_inventory.core.credentials.getpass", return_value=SECRET):
            creds = CredentialsManager().get_credentials(interactive=True, config_key="cfg-key")

        mock_input.assert_not_called()
        assert creds.key_name == "cfg-key"

    def test_prompt_empty(self, clean_env):
        with patch("builtins.input", return_value="prompted-key"), \
                patch("zone_inventory.core.credentials.getpass", return_value=""):
            with pytest.raises(ConfigError):
                CredentialsManager().get_credentials(interactive=True)

    def test_nothing_available(self, clean_env):
        with pytest.raises(ConfigError) as exc_info:
            CredentialsManager().get_credentials(interactive=False)
        assert "ZONE_TSIG_KEY" in exc_info.value.message
