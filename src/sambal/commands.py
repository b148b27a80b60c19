"""smbclient command line construction.

Arguments are wrapped in double quotes so names containing spaces survive
smbclient's own tokenizer. Embedded double quotes are NOT escaped; smbclient
has no escape syntax for them, so such names cannot be addressed.
"""

from collections.abc import Sequence

# smbclient verbs used by the client
LIST = "ls"
CHANGE_DIRECTORY = "cd"
GET = "get"
PUT = "put"
DELETE = "del"
REMOVE_DIRECTORY = "rmdir"
QUIT = "quit"

PARENT_DIRECTORY = ".."


def quote(argument: str) -> str:
    """Wrap a single argument in double quotes."""
    return f'"{argument}"'


def wrap_arguments(command: str, arguments: str | Sequence[str]) -> str:
    """Build a command line from a verb and its quoted arguments.

    Args:
        command: smbclient verb (e.g. "del")
        arguments: One name or an ordered sequence of names

    Returns:
        Command line with each argument quoted, joined by single spaces

    Examples:
        wrap_arguments("del", ["a b"]) -> 'del "a b"'
        wrap_arguments("get", ["x.txt", "/tmp/x.txt"]) -> 'get "x.txt" "/tmp/x.txt"'
    """
    if isinstance(arguments, str):
        arguments = [arguments]
    return " ".join([command, *(quote(argument) for argument in arguments)])


__all__ = [
    "CHANGE_DIRECTORY",
    "DELETE",
    "GET",
    "LIST",
    "PARENT_DIRECTORY",
    "PUT",
    "QUIT",
    "REMOVE_DIRECTORY",
    "quote",
    "wrap_arguments",
]
