"""Custom exceptions for smbclient session automation."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .response import Response


class SambalError(Exception):
    """Base exception for sambal errors."""

    pass


class SMBConnectionError(SambalError, ConnectionError):
    """smbclient could not be started or the handshake failed."""

    pass


class CommandTimeout(SambalError):
    """No prompt appeared within the timeout after sending a command."""

    def __init__(self, command: str, timeout: float | None = None):
        self.command = command
        self.timeout = timeout
        if timeout is None:
            super().__init__(f"Failed to do {command}")
        else:
            super().__init__(f"Failed to do {command} (no prompt after {timeout}s)")


class SessionClosedError(SambalError):
    """The smbclient channel is closed or the session never connected."""

    pass


class CommandInProgressError(SambalError):
    """A command was sent while another one was still waiting for its prompt."""

    pass


class OperationFailure(SambalError):
    """A remote operation completed but smbclient reported a failure."""

    def __init__(self, response: "Response"):
        self.response = response
        super().__init__(response.message)


class ConfigError(SambalError):
    """Configuration could not be loaded."""

    pass
