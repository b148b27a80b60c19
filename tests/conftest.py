"""
Shared test fixtures for sambal tests.

This module provides:
- FakeSMBServer: an in-memory stand-in for an smbclient session that answers
  commands with smbclient-shaped output (echo line, messages, prompt)
- Sample listing text
- A patched pexpect.spawn for session lifecycle tests
"""

import re
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from sambal.exceptions import CommandTimeout, SessionClosedError

COMMAND_PATTERN = re.compile(r"^(\w+)")
ARGUMENT_PATTERN = re.compile(r'"([^"]*)"')

LISTING_DATE = "Mon Jan  1 00:00:00 2020"

SAMPLE_LISTING = (
    'ls "*"\r\n'
    "  .                                   D        0  Mon Jan  1 00:00:00 2020\r\n"
    "  ..                                  D        0  Mon Jan  1 00:00:00 2020\r\n"
    "  my docs                             D        0  Tue Feb  4 10:11:12 2020\r\n"
    "  note.txt                            A      120  Mon Jan  1 00:00:00 2020\r\n"
    "\r\n"
    "\t\t48356 blocks of size 1024. 23712 blocks available\r\n"
    "smb: \\> "
)


class FakeSMBServer:
    """In-memory smbclient session.

    The share is a nested dict: directories are dicts, files are their sizes.
    Names in ``denied`` cannot be deleted or removed; commands in
    ``timeouts`` raise CommandTimeout.
    """

    def __init__(self, tree: dict | None = None):
        self.tree = tree if tree is not None else {}
        self.cwd: list[str] = []
        self.commands: list[str] = []
        self.denied: set[str] = set()
        self.timeouts: set[str] = set()
        self.uploads: dict[str, bytes] = {}
        self.connected = True
        self.close_calls = 0

    # session interface

    def ask(self, command: str) -> str:
        if not self.connected:
            raise SessionClosedError(f"Cannot send {command!r}: session is not connected")
        self.commands.append(command)
        if command in self.timeouts:
            raise CommandTimeout(command, 10)

        verb = COMMAND_PATTERN.match(command).group(1)
        arguments = ARGUMENT_PATTERN.findall(command)
        body = getattr(self, f"_do_{verb}")(*arguments)
        return f"{command}\r\n{body}{self.prompt}"

    def close(self) -> None:
        self.close_calls += 1
        self.connected = False

    # helpers

    @property
    def prompt(self) -> str:
        path = "".join(f"{name}\\" for name in self.cwd)
        return f"smb: \\{path}> "

    @property
    def current(self) -> dict:
        node = self.tree
        for name in self.cwd:
            node = node[name]
        return node

    def _remote(self, name: str) -> str:
        return "\\" + "\\".join([*self.cwd, name])

    def _do_cd(self, name: str) -> str:
        if name == "..":
            if self.cwd:
                self.cwd.pop()
            return ""
        if isinstance(self.current.get(name), dict):
            self.cwd.append(name)
            return ""
        return f"cd {self._remote(name)}\\: NT_STATUS_OBJECT_NAME_NOT_FOUND\r\n"

    def _do_ls(self, qualifier: str) -> str:
        rows = [(".", "D", 0), ("..", "D", 0)]
        for name, node in self.current.items():
            if isinstance(node, dict):
                rows.append((name, "D", 0))
            else:
                rows.append((name, "A", node))
        lines = [
            f"  {name:<34}  {flag:>5}  {size:>7}  {LISTING_DATE}\r\n" for name, flag, size in rows
        ]
        lines.append("\r\n\t\t48356 blocks of size 1024. 23712 blocks available\r\n")
        return "".join(lines)

    def _do_del(self, name: str) -> str:
        node = self.current.get(name)
        if name in self.denied:
            return f"NT_STATUS_ACCESS_DENIED deleting remote file {self._remote(name)}\r\n"
        if node is None or isinstance(node, dict):
            return f"NT_STATUS_NO_SUCH_FILE listing {self._remote(name)}\r\n"
        del self.current[name]
        return ""

    def _do_rmdir(self, name: str) -> str:
        node = self.current.get(name)
        if name in self.denied:
            return f"NT_STATUS_ACCESS_DENIED removing remote directory file {self._remote(name)}\r\n"
        if not isinstance(node, dict):
            return f"NT_STATUS_OBJECT_NAME_NOT_FOUND removing remote directory file {self._remote(name)}\r\n"
        if node:
            return f"NT_STATUS_DIRECTORY_NOT_EMPTY removing remote directory file {self._remote(name)}\r\n"
        del self.current[name]
        return ""

    def _do_get(self, name: str, local: str) -> str:
        node = self.current.get(name)
        if node is None or isinstance(node, dict):
            return f"NT_STATUS_OBJECT_NAME_NOT_FOUND opening remote file {self._remote(name)}\r\n"
        Path(local).write_bytes(b"x" * node)
        return f"getting file {self._remote(name)} of size {node} as {local} (1.0 KiloBytes/sec)\r\n"

    def _do_put(self, local: str, destination: str) -> str:
        source = Path(local)
        if not source.exists():
            return f"{local} does not exist\r\n"
        data = source.read_bytes()
        self.uploads[destination] = data
        self.current[destination] = len(data)
        return f"putting file {local} as {self._remote(destination)} (1.0 kb/s) (average 1.0 kb/s)\r\n"


@pytest.fixture
def fake_server():
    """Empty fake share."""
    return FakeSMBServer()


@pytest.fixture
def nested_server():
    """Fake share with a small directory tree.

    /
      top/
        a.txt
        sub/
          b.txt
          deeper/
        z.txt
      readme.md
    """
    return FakeSMBServer(
        {
            "top": {
                "a.txt": 3,
                "sub": {"b.txt": 5, "deeper": {}},
                "z.txt": 7,
            },
            "readme.md": 11,
        }
    )


@pytest.fixture
def mock_spawn():
    """Patch pexpect.spawn with a scripted child process.

    The returned child answers expect() with a prompt by default; tests set
    ``child.expect.side_effect`` or ``child.before`` to script other output.
    """
    with patch("sambal.session.pexpect.spawn") as spawn:
        child = MagicMock()
        child.closed = False
        child.before = "Try \"help\" to get a list of possible commands.\r\n"
        child.after = "smb: \\>"
        child.expect.return_value = 0
        spawn.return_value = child
        yield spawn


@pytest.fixture
def sample_listing():
    """Raw output of ``ls "*"`` in a directory with one file and one subdirectory."""
    return SAMPLE_LISTING
