"""smbclient process lifecycle and the expect primitive.

SMBSession spawns smbclient attached to a pseudo-terminal (pexpect), waits for
the interactive prompt, and then exchanges one command at a time: write the
command line, read until the next prompt or the timeout. Every command sent to
smbclient goes through SMBSession.ask.

Session states:

    DISCONNECTED -> CONNECTING -> CONNECTED -> CLOSED
                         |                       ^
                         +-----------------------+  (handshake failed)

CLOSED is terminal. close() may be called any number of times.
"""

import logging
import os
import threading
from enum import Enum
from typing import Any

import pexpect

from .commands import QUIT
from .config_manager import ConnectionOptions
from .exceptions import (
    CommandInProgressError,
    CommandTimeout,
    SessionClosedError,
    SMBConnectionError,
)
from .response import PROMPT_PATTERN


# Markers smbclient prints when the handshake went wrong but a prompt still showed
HANDSHAKE_FAILURE_MARKERS = {
    "timed out": "smbclient: timed out",
    "Server stopped": "smbclient: server stopped",
}

# Wide enough that readline never wraps an echoed command line
PTY_DIMENSIONS = (24, 1024)


class SessionState(Enum):
    """Lifecycle state of an SMBSession."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    CLOSED = "closed"


def _spawn_env() -> dict[str, str]:
    # A dumb terminal keeps readline from emitting escape sequences before the prompt
    env = dict(os.environ)
    env["TERM"] = "dumb"
    return env


class SMBSession:
    """An interactive smbclient process driven through a pseudo-terminal.

    The session is connected as soon as the constructor returns; a failed
    handshake raises SMBConnectionError after the child has been torn down.

    Only one command may be outstanding at a time. There is no queue: callers
    that need concurrent remote operations must use separate sessions.

    Attributes:
        options: Connection options used to spawn smbclient
        timeout: Seconds to wait for the prompt (handshake and each command)
        state: Current SessionState
    """

    prompt = PROMPT_PATTERN

    def __init__(
        self,
        options: ConnectionOptions | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        """Spawn smbclient and wait for its prompt.

        Args:
            options: Connection options (defaults when omitted)
            logger: Logger for lifecycle and I/O traces (module logger by default)

        Raises:
            SMBConnectionError: smbclient could not be started, no prompt appeared
                before the timeout, or the banner reported a timeout or a stopped server
        """
        self.options = options or ConnectionOptions()
        self.timeout = self.options.timeout
        self._logger = logger or logging.getLogger(__name__)
        self._process: pexpect.spawn | None = None
        self._in_flight = threading.Lock()
        self.state = SessionState.DISCONNECTED
        self._connect()

    @property
    def connected(self) -> bool:
        return self.state is SessionState.CONNECTED

    def _connect(self) -> None:
        self.state = SessionState.CONNECTING
        self._logger.info(f"Connecting: {self.options.display_command()}")

        try:
            self._process = pexpect.spawn(
                self.options.client_binary,
                self.options.spawn_arguments(),
                timeout=self.timeout,
                encoding="utf-8",
                codec_errors="replace",
                env=_spawn_env(),
                dimensions=PTY_DIMENSIONS,
            )
        except (pexpect.ExceptionPexpect, OSError) as e:
            self.close()
            raise SMBConnectionError(
                f"smbclient: could not start {self.options.client_binary}: {e}"
            ) from e

        try:
            banner = self._read_until_prompt()
        except (pexpect.TIMEOUT, pexpect.EOF) as e:
            self.close()
            raise SMBConnectionError("smbclient: connection failed or timed out") from e

        for marker, message in HANDSHAKE_FAILURE_MARKERS.items():
            if marker in banner:
                self.close()
                raise SMBConnectionError(message)

        self.state = SessionState.CONNECTED
        self._logger.info(f"Connected to {self.options.service}")

    def _read_until_prompt(self) -> str:
        """Block until the prompt appears; return everything read including it."""
        if self._process is None:
            raise SessionClosedError("smbclient process is not running")
        self._process.expect(self.prompt, timeout=self.timeout)
        return f"{self._process.before}{self._process.after}"

    def ask(self, command: str) -> str:
        """Send a command line and collect output up to the next prompt.

        Args:
            command: Complete command line (see commands.wrap_arguments)

        Returns:
            Raw output: the echoed command, whatever smbclient printed, and the prompt

        Raises:
            SessionClosedError: Session not connected, or smbclient went away
            CommandInProgressError: Another command is still waiting for its prompt
            CommandTimeout: Prompt did not appear within the timeout
        """
        if not self.connected or self._process is None:
            raise SessionClosedError(f"Cannot send {command!r}: session is not connected")

        if not self._in_flight.acquire(blocking=False):
            raise CommandInProgressError(
                f"Cannot send {command!r}: previous command has not finished"
            )

        try:
            self._logger.debug(f"Sending: {command!r}")
            try:
                self._process.sendline(command)
                output = self._read_until_prompt()
            except pexpect.TIMEOUT as e:
                self._logger.warning(f"Failed to do {command}: no prompt within {self.timeout}s")
                raise CommandTimeout(command, self.timeout) from e
            except (pexpect.EOF, OSError, ValueError) as e:
                raise SessionClosedError(f"smbclient exited while running {command!r}") from e
        finally:
            self._in_flight.release()

        self._logger.debug(f"Got output: {output!r}")
        return output

    def close(self) -> None:
        """Send quit and release the child process.

        A channel that is already closed is not an error. The session is CLOSED
        afterwards in every case.
        """
        process = self._process
        try:
            if process is not None and not process.closed:
                process.sendline(QUIT)
                process.close(force=True)
        except (pexpect.ExceptionPexpect, OSError, ValueError) as e:
            self._logger.debug(f"smbclient already disconnected: {e}")
        finally:
            if self.state is not SessionState.CLOSED:
                self._logger.info(f"Closed session to {self.options.service}")
            self.state = SessionState.CLOSED

    def __enter__(self) -> "SMBSession":
        return self

    def __exit__(self, *_: Any) -> None:
        self.close()


__all__ = ["SMBSession", "SessionState"]
