"""Configuration management module.

Connection options are read from ~/.sambal/config.toml (or a custom path).
Every key is optional; missing keys fall back to the smbclient defaults.

Example config.toml:

    host = "192.168.1.20"
    share = "public"
    user = "guest"
    timeout = 15

Security:
- Config file permissions: 0600 (owner read/write only)
- Password is never logged
"""

import logging
import os
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Any

import tomli

from .exceptions import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_CLIENT_BINARY = "smbclient"
NO_PASSWORD = "--no-pass"


@dataclass(frozen=True)
class ConnectionOptions:
    """Parameters for spawning smbclient."""

    domain: str = "WORKGROUP"
    host: str = "127.0.0.1"
    share: str = ""
    user: str = "guest"
    password: str = NO_PASSWORD
    port: int = 445
    timeout: float = 10
    client_binary: str = DEFAULT_CLIENT_BINARY

    @property
    def service(self) -> str:
        """UNC-style service name, e.g. //127.0.0.1/public."""
        return f"//{self.host}/{self.share}"

    def spawn_arguments(self) -> list[str]:
        """Arguments for smbclient, in the order smbclient expects them."""
        return [
            self.service,
            self.password,
            "-W",
            self.domain,
            "-U",
            self.user,
            "-p",
            str(self.port),
        ]

    def display_command(self) -> str:
        """Spawn command with the password masked, for logs."""
        arguments = self.spawn_arguments()
        if self.password != NO_PASSWORD:
            arguments[1] = "********"
        return " ".join([self.client_binary, *arguments])

    def merged(self, **overrides: Any) -> "ConnectionOptions":
        """Return a copy with the non-None overrides applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ConnectionOptions":
        """Create from dictionary, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            logger.warning(f"Ignoring unknown config keys: {', '.join(unknown)}")

        values = {k: v for k, v in data.items() if k in known}
        try:
            if "port" in values:
                values["port"] = int(values["port"])
            if "timeout" in values:
                values["timeout"] = float(values["timeout"])
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid numeric value in config: {e}") from e
        return cls(**values)


class ConfigManager:
    """Load sambal configuration.

    Configuration is stored at ~/.sambal/config.toml.
    """

    DEFAULT_CONFIG_DIR = Path.home() / ".sambal"
    DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.toml"

    @classmethod
    def get_config_path(cls, custom_path: str | None = None) -> Path:
        """Get configuration file path.

        Args:
            custom_path: Custom config file path (optional)

        Returns:
            Path to config file

        Raises:
            ConfigError: If a custom path was given and does not exist
        """
        if custom_path:
            path = Path(custom_path).expanduser().resolve()
            if not path.exists():
                raise ConfigError(f"Config file not found: {path}")
            return path

        return cls.DEFAULT_CONFIG_FILE

    @classmethod
    def load_config(cls, custom_path: str | None = None) -> ConnectionOptions:
        """Load connection options from file.

        Args:
            custom_path: Custom config file path (optional)

        Returns:
            ConnectionOptions (defaults when no config file exists)

        Raises:
            ConfigError: If loading fails
        """
        config_path = cls.get_config_path(custom_path)

        if not config_path.exists():
            logger.debug("Config file not found, using defaults")
            return ConnectionOptions()

        try:
            mode = config_path.stat().st_mode & 0o777
            if mode & 0o077:
                logger.warning(
                    f"Config file has insecure permissions: {oct(mode)}. Fixing to 0600..."
                )
                os.chmod(config_path, 0o600)

            with open(config_path, "rb") as f:
                data = tomli.load(f)
        except (OSError, tomli.TOMLDecodeError) as e:
            raise ConfigError(f"Failed to load config: {e}") from e

        logger.debug(f"Loaded config from: {config_path}")
        return ConnectionOptions.from_dict(data)


__all__ = ["ConfigManager", "ConnectionOptions", "DEFAULT_CLIENT_BINARY", "NO_PASSWORD"]
