"""Unit tests for config_manager module."""

import logging
import os
from unittest.mock import patch

import pytest

from sambal.config_manager import NO_PASSWORD, ConfigManager, ConnectionOptions
from sambal.exceptions import ConfigError


class TestConnectionOptions:
    """Tests for ConnectionOptions dataclass."""

    def test_default_values(self):
        """Test default connection values."""
        options = ConnectionOptions()
        assert options.domain == "WORKGROUP"
        assert options.host == "127.0.0.1"
        assert options.share == ""
        assert options.user == "guest"
        assert options.password == NO_PASSWORD
        assert options.port == 445
        assert options.timeout == 10
        assert options.client_binary == "smbclient"

    def test_spawn_arguments(self):
        options = ConnectionOptions(host="10.0.0.5", share="public", user="bob", port=139)
        assert options.spawn_arguments() == [
            "//10.0.0.5/public",
            "--no-pass",
            "-W",
            "WORKGROUP",
            "-U",
            "bob",
            "-p",
            "139",
        ]

    def test_display_command_masks_password(self):
        options = ConnectionOptions(password="hunter2")
        command = options.display_command()
        assert "hunter2" not in command
        assert command.startswith("smbclient //127.0.0.1/ ********")

    def test_display_command_keeps_no_pass_flag(self):
        assert "--no-pass" in ConnectionOptions().display_command()

    def test_merged_ignores_none(self):
        """Test that None overrides keep the current value."""
        options = ConnectionOptions(host="10.0.0.5").merged(host=None, share="docs", port=None)
        assert options.host == "10.0.0.5"
        assert options.share == "docs"
        assert options.port == 445

    def test_to_dict(self):
        data = ConnectionOptions(share="docs").to_dict()
        assert data["share"] == "docs"
        assert data["client_binary"] == "smbclient"

    def test_from_dict(self):
        """Test creation from dictionary."""
        options = ConnectionOptions.from_dict({"host": "nas", "share": "media", "timeout": 30})
        assert options.host == "nas"
        assert options.share == "media"
        assert options.timeout == 30.0
        assert options.user == "guest"  # Default

    def test_from_dict_coerces_numbers(self):
        options = ConnectionOptions.from_dict({"port": "1445", "timeout": "2.5"})
        assert options.port == 1445
        assert options.timeout == 2.5

    def test_from_dict_rejects_bad_numbers(self):
        with pytest.raises(ConfigError, match="Invalid numeric value"):
            ConnectionOptions.from_dict({"port": "smb"})

    def test_from_dict_ignores_unknown_keys(self, caplog):
        with caplog.at_level(logging.WARNING, logger="sambal.config_manager"):
            options = ConnectionOptions.from_dict({"host": "nas", "colour": "blue"})
        assert options.host == "nas"
        assert "colour" in caplog.text


class TestConfigManager:
    """Tests for ConfigManager class."""

    def test_get_config_path_default(self):
        assert ConfigManager.get_config_path() == ConfigManager.DEFAULT_CONFIG_FILE

    def test_get_config_path_custom_missing(self, tmp_path):
        with pytest.raises(ConfigError, match="Config file not found"):
            ConfigManager.get_config_path(str(tmp_path / "missing.toml"))

    def test_load_config_missing_default_returns_defaults(self, tmp_path):
        with patch.object(ConfigManager, "DEFAULT_CONFIG_FILE", tmp_path / "config.toml"):
            options = ConfigManager.load_config()
        assert options == ConnectionOptions()

    def test_load_config_from_file(self, tmp_path):
        config_file = tmp_path / "config.toml"
        config_file.write_text('host = "192.168.1.20"\nshare = "public"\nport = 1445\n')
        config_file.chmod(0o600)

        options = ConfigManager.load_config(str(config_file))

        assert options.host == "192.168.1.20"
        assert options.share == "public"
        assert options.port == 1445

    def test_load_config_fixes_permissions(self, tmp_path):
        """Test that group/world readable config is tightened to 0600."""
        config_file = tmp_path / "config.toml"
        config_file.write_text('share = "public"\n')
        config_file.chmod(0o644)

        ConfigManager.load_config(str(config_file))

        assert os.stat(config_file).st_mode & 0o777 == 0o600

    def test_load_config_invalid_toml(self, tmp_path):
        config_file = tmp_path / "config.toml"
        config_file.write_text("host = \n")
        config_file.chmod(0o600)

        with pytest.raises(ConfigError, match="Failed to load config"):
            ConfigManager.load_config(str(config_file))
