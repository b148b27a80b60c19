"""High-level smbclient operations.

SambalClient turns smbclient's interactive commands into calls returning
Response values. Operations never raise for remote failures: timeouts, a
closed session and smbclient errors all come back as a failed Response, so
callers branch on ``response.success``. Only constructing the client raises
(SMBConnectionError), since there is no session to return.

Paths with several components ("a/b/c.txt") are handled by entering each
parent directory, acting on the leaf name, and leaving the same number of
directories afterwards.

Example:
    >>> with SambalClient(ConnectionOptions(host="10.0.0.5", share="public")) as client:
    ...     listing = client.ls()
    ...     response = client.get("reports/q1.pdf", "/tmp/q1.pdf")
"""

import logging
import tempfile
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any

from .commands import (
    CHANGE_DIRECTORY,
    DELETE,
    GET,
    LIST,
    PARENT_DIRECTORY,
    PUT,
    REMOVE_DIRECTORY,
    wrap_arguments,
)
from .config_manager import ConnectionOptions
from .exceptions import SambalError
from .listing import Listing, parse_listing
from .response import (
    Response,
    classify_get,
    classify_listing,
    classify_navigation,
    classify_put,
    classify_structural,
)
from .session import SMBSession

REMOTE_PATH_SEPARATOR = "/"

FileOperation = Callable[[str], Response]


def split_remote_path(path: str) -> tuple[list[str], str]:
    """Split a remote path into parent directories and the leaf name.

    Examples:
        "c.txt" -> ([], "c.txt")
        "a/b/c.txt" -> (["a", "b"], "c.txt")
    """
    parts = [part for part in path.split(REMOTE_PATH_SEPARATOR) if part]
    if len(parts) <= 1:
        return [], parts[0] if parts else path
    return parts[:-1], parts[-1]


class SambalClient:
    """Remote file operations over one smbclient session."""

    def __init__(
        self,
        options: ConnectionOptions | None = None,
        logger: logging.Logger | None = None,
        session: SMBSession | None = None,
    ) -> None:
        """Connect to the share.

        Args:
            options: Connection options (defaults when omitted)
            logger: Logger for operation traces (module logger by default)
            session: Already connected session to use instead of spawning one

        Raises:
            SMBConnectionError: smbclient failed to connect
        """
        self._logger = logger or logging.getLogger(__name__)
        if session is None:
            session = SMBSession(options, logger=self._logger)
        self.session = session

    @property
    def connected(self) -> bool:
        return self.session.connected

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "SambalClient":
        return self

    def __exit__(self, *_: Any) -> None:
        self.close()

    def _ask(self, command: str, arguments: str | Sequence[str]) -> str:
        return self.session.ask(wrap_arguments(command, arguments))

    def _failed(self, operation: str, error: SambalError) -> Response:
        self._logger.warning(f"{operation} failed: {error}")
        return Response.from_error(error)

    # Navigation

    def cd(self, path: str) -> Response:
        """Change the remote working directory."""
        try:
            return classify_navigation(self._ask(CHANGE_DIRECTORY, path))
        except SambalError as e:
            return self._failed(f"cd {path}", e)

    def with_file_context(self, path: str, operation: FileOperation) -> Response:
        """Run operation on the leaf of path from inside its parent directory.

        Parent directories are entered one at a time. If one cannot be entered,
        its failed response is returned and operation is not run. However the
        operation ends (result, failure or exception), one "cd .." is issued for
        every directory that was entered.
        """
        directories, leaf = split_remote_path(path)
        entered = 0
        try:
            for directory in directories:
                response = self.cd(directory)
                if response.failure:
                    return response
                entered += 1
            return operation(leaf)
        finally:
            for _ in range(entered):
                response = self.cd(PARENT_DIRECTORY)
                if response.failure:
                    self._logger.warning(f"Could not leave directory: {response.message}")

    # Listing

    def ls(self, qualifier: str = "*") -> Listing:
        """List the current remote directory.

        Args:
            qualifier: smbclient mask, e.g. "*" or "*.txt"

        Returns:
            Listing mapping names to entries; empty with a failed response on error
        """
        try:
            output = self._ask(LIST, qualifier)
        except SambalError as e:
            return Listing({}, self._failed(f"ls {qualifier}", e))
        return Listing(parse_listing(output), classify_listing(output))

    # Transfers

    def get(self, remote_path: str, local_path: str | Path) -> Response:
        """Download remote_path to local_path."""

        def download(name: str) -> Response:
            return classify_get(self._ask(GET, [name, str(local_path)]))

        try:
            return self.with_file_context(remote_path, download)
        except SambalError as e:
            return self._failed(f"get {remote_path}", e)

    def put(self, local_path: str | Path, destination: str) -> Response:
        """Upload local_path to destination (relative to the remote working directory)."""
        try:
            return classify_put(self._ask(PUT, [str(local_path), destination]))
        except SambalError as e:
            return self._failed(f"put {destination}", e)

    def put_content(self, content: str | bytes, destination: str) -> Response:
        """Upload in-memory content to destination.

        The content is staged in a temporary file that is removed whatever the
        outcome of the transfer.
        """
        data = content.encode("utf-8") if isinstance(content, str) else content
        with tempfile.TemporaryDirectory(prefix="sambal-upload-") as staging_dir:
            staged = Path(staging_dir) / "content"
            staged.write_bytes(data)
            return self.put(staged, destination)

    # Removal

    def _delete_name(self, name: str) -> Response:
        return classify_structural(self._ask(DELETE, name))

    def delete(self, path: str) -> Response:
        """Delete a remote file."""
        try:
            return self.with_file_context(path, self._delete_name)
        except SambalError as e:
            return self._failed(f"del {path}", e)

    def rmdir(self, path: str) -> Response:
        """Delete a remote directory and everything below it.

        Removal is depth first and stops at the first entry that cannot be
        removed; that entry's failure is returned and its siblings are left
        untouched.
        """
        try:
            return self.with_file_context(path, self._remove_tree)
        except SambalError as e:
            return self._failed(f"rmdir {path}", e)

    def _remove_tree(self, directory: str) -> Response:
        response = self.cd(directory)
        if response.failure:
            return response

        try:
            failure = self._remove_entries(directory)
        finally:
            left = self.cd(PARENT_DIRECTORY)

        if failure is not None:
            return failure
        # rmdir must be sent from the parent
        if left.failure:
            self._logger.warning(f"Could not leave {directory}: {left.message}")
            return left
        return classify_structural(self._ask(REMOVE_DIRECTORY, directory))

    def _remove_entries(self, directory: str) -> Response | None:
        """Empty the current directory; return the first failure, if any."""
        listing = self.ls()
        if listing.failure:
            return listing.response

        for entry in listing.values():
            if entry.is_file:
                response = self._delete_name(entry.name)
            elif entry.is_placeholder:
                continue
            else:
                response = self._remove_tree(entry.name)

            if response.failure:
                self._logger.warning(
                    f"Stopped emptying {directory} at {entry.name}: {response.message}"
                )
                return response
        return None


__all__ = ["SambalClient", "split_remote_path"]
