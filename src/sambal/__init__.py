"""sambal - drive smbclient from Python

Philosophy:
- smbclient does the SMB work; sambal only types commands and reads output
- One session, one command in flight
- Remote failures are values (Response), not exceptions

Public API:
    SambalClient: Remote file operations (ls, cd, get, put, put_content, delete, rmdir)
    SMBSession: smbclient process and expect primitive
    ConnectionOptions: Connection parameters
    Response, Listing, Entry, EntryKind: Operation results
"""

from .client import SambalClient
from .config_manager import ConfigManager, ConnectionOptions
from .exceptions import (
    CommandInProgressError,
    CommandTimeout,
    ConfigError,
    OperationFailure,
    SambalError,
    SessionClosedError,
    SMBConnectionError,
)
from .listing import Entry, EntryKind, Listing
from .response import Response
from .session import SessionState, SMBSession

__version__ = "0.1.0"
__all__ = [
    "CommandInProgressError",
    "CommandTimeout",
    "ConfigError",
    "ConfigManager",
    "ConnectionOptions",
    "Entry",
    "EntryKind",
    "Listing",
    "OperationFailure",
    "Response",
    "SMBConnectionError",
    "SMBSession",
    "SambalClient",
    "SambalError",
    "SessionClosedError",
    "SessionState",
    "__version__",
]
