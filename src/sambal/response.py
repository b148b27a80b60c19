"""Classification of raw smbclient output into success/failure responses.

smbclient prints human-oriented text with no framing, so outcomes are
inferred per command family:

- transfers (get/put) succeed when smbclient reports "getting file" or
  "putting file"
- structural commands (del/rmdir) succeed when the line right after the
  echoed command is already the next prompt, i.e. nothing was printed in
  between. This is a heuristic tied to smbclient's line layout, not a
  documented contract of the tool.
- cd succeeds unless an NT_STATUS not-found code is printed

The diagnostic message of every response is the first NT_STATUS line when one
is present, otherwise the whole raw text.
"""

import re
from dataclasses import dataclass

from .exceptions import SambalError

# Idle prompt, e.g. "smb: \dir\> "
PROMPT_PATTERN = re.compile(r"^smb:.*\\>", re.MULTILINE)

# Status code lines, e.g. "NT_STATUS_NO_SUCH_FILE listing \missing"
STATUS_LINE_PATTERN = re.compile(r"^NT_[A-Z0-9_]+(\s|$)")

NOT_FOUND_STATUSES = (
    "NT_STATUS_OBJECT_NAME_NOT_FOUND",
    "NT_STATUS_OBJECT_PATH_NOT_FOUND",
)

GET_SUCCESS_PATTERN = re.compile(r"^getting\sfile", re.MULTILINE)
PUT_SUCCESS_PATTERN = re.compile(r"^putting\sfile", re.MULTILINE)

EMPTY_OUTPUT_MESSAGE = "<no output from smbclient>"


def has_status_line(output: str) -> bool:
    return any(STATUS_LINE_PATTERN.match(line) for line in output.splitlines())


def extract_message(output: str) -> str:
    """Return the first status-code line of output, or the whole output."""
    for line in output.splitlines():
        if STATUS_LINE_PATTERN.match(line):
            return line.strip()
    return output or EMPTY_OUTPUT_MESSAGE


@dataclass(frozen=True)
class Response:
    """Outcome of one remote operation."""

    success: bool
    message: str
    output: str = ""

    @classmethod
    def from_output(cls, output: str, success: bool) -> "Response":
        """Build a response from raw smbclient output."""
        return cls(success=success, message=extract_message(output), output=output)

    @classmethod
    def from_error(cls, error: SambalError) -> "Response":
        """Build a failed response from an internally raised error."""
        return cls.from_output(str(error), success=False)

    @property
    def failure(self) -> bool:
        return not self.success


def classify_transfer(output: str, pattern: re.Pattern[str]) -> Response:
    """Classify get/put output using the verb smbclient prints on success."""
    return Response.from_output(output, success=bool(pattern.search(output)))


def classify_get(output: str) -> Response:
    return classify_transfer(output, GET_SUCCESS_PATTERN)


def classify_put(output: str) -> Response:
    return classify_transfer(output, PUT_SUCCESS_PATTERN)


def classify_structural(output: str) -> Response:
    """Classify del/rmdir output.

    Line 0 is the pty echo of the command. Success requires line 1 to be the
    next prompt.
    """
    lines = output.splitlines()
    success = len(lines) > 1 and bool(PROMPT_PATTERN.match(lines[1]))
    return Response.from_output(output, success=success)


def classify_listing(output: str) -> Response:
    """Classify ls output: a listing fails when smbclient printed a status line."""
    return Response.from_output(output, success=not has_status_line(output))


def classify_navigation(output: str) -> Response:
    """Classify cd output."""
    flattened = output.replace("\r", "").replace("\n", "")
    success = not any(status in flattened for status in NOT_FOUND_STATUSES)
    return Response.from_output(output, success=success)


__all__ = [
    "PROMPT_PATTERN",
    "Response",
    "classify_get",
    "classify_listing",
    "classify_navigation",
    "classify_put",
    "classify_structural",
    "classify_transfer",
    "extract_message",
    "has_status_line",
]
