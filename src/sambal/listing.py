"""Parsing of smbclient directory listings.

A listing from ``ls`` looks like::

    ls "*"
      .                                   D        0  Mon Jan  1 00:00:00 2020
      ..                                  D        0  Mon Jan  1 00:00:00 2020
      my docs                             D        0  Tue Feb  4 10:11:12 2020
      note.txt                            A      120  Mon Jan  1 00:00:00 2020

                    48356 blocks of size 1024. 23712 blocks available
    smb: \\>

Columns are separated by runs of at least two spaces while names may contain
single spaces, so rows are split on whitespace runs rather than fixed widths.
"""

import logging
import re
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from .response import Response

logger = logging.getLogger(__name__)

# name (any printable text, spaces and punctuation included), optional
# attribute flag, size, date
ENTRY_LINE_PATTERN = re.compile(r"^\s*([^\x00-\x1f\x7f]+?)\s+([DAH]?)\s+(\d+)\s+(.+)$")

COLUMN_SEPARATOR = re.compile(r"\s{2,}")
FLAG_PATTERN = re.compile(r"^[A-Za-z]+$")
# flag and size glued by one space when the size is wider than its column
FLAG_AND_SIZE_PATTERN = re.compile(r"^([A-Za-z]+)\s(\d+)$")

# smbclient prints modification times in ctime layout
DATE_FORMAT = "%a %b %d %H:%M:%S %Y"

UNPARSED_DATE_MARKER = "!!"


class EntryKind(str, Enum):
    """Kind of a listing entry."""

    FILE = "file"
    DIRECTORY = "directory"


@dataclass(frozen=True)
class Entry:
    """One row of a remote directory listing."""

    name: str
    kind: EntryKind
    size: int
    modified: datetime | str

    @property
    def is_directory(self) -> bool:
        return self.kind is EntryKind.DIRECTORY

    @property
    def is_file(self) -> bool:
        return self.kind is EntryKind.FILE

    @property
    def is_placeholder(self) -> bool:
        """True for "." and ".." style names."""
        return bool(self.name) and set(self.name) == {"."}

    @property
    def modified_parsed(self) -> bool:
        return isinstance(self.modified, datetime)


class Listing(Mapping[str, Entry]):
    """Entries of one ``ls`` call keyed by name, plus the call's response."""

    def __init__(self, entries: dict[str, Entry], response: Response):
        self._entries = dict(entries)
        self.response = response

    def __getitem__(self, name: str) -> Entry:
        return self._entries[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"Listing(success={self.success}, entries={list(self._entries)})"

    @property
    def success(self) -> bool:
        return self.response.success

    @property
    def failure(self) -> bool:
        return self.response.failure

    def files(self) -> list[Entry]:
        return [entry for entry in self._entries.values() if entry.is_file]

    def directories(self) -> list[Entry]:
        return [entry for entry in self._entries.values() if entry.is_directory]


def parse_date(text: str) -> datetime | str:
    """Parse a listing timestamp, or return it tagged as unparsed."""
    normalized = " ".join(text.split())
    try:
        return datetime.strptime(normalized, DATE_FORMAT)
    except ValueError:
        return f"{UNPARSED_DATE_MARKER}{text}"


def parse_entry(line: str) -> Entry | None:
    """Parse one listing row.

    Returns:
        Entry, or None when the line is not a listing row
    """
    if not ENTRY_LINE_PATTERN.search(line):
        return None

    columns = COLUMN_SEPARATOR.split(line.rstrip())
    if columns and not columns[0].strip():
        columns.pop(0)
    if len(columns) < 3:
        return None

    name = columns.pop(0).strip()

    flag = ""
    merged = FLAG_AND_SIZE_PATTERN.match(columns[0])
    if merged:
        flag = merged.group(1)
        columns[0] = merged.group(2)
    elif FLAG_PATTERN.match(columns[0]):
        flag = columns.pop(0)

    if not columns or not columns[0].isdigit():
        logger.debug(f"Skipping listing row without size: {line!r}")
        return None
    size = int(columns.pop(0))

    date_text = " ".join(columns)
    kind = EntryKind.DIRECTORY if flag.startswith("D") else EntryKind.FILE

    return Entry(name=name, kind=kind, size=size, modified=parse_date(date_text))


def parse_listing(text: str) -> dict[str, Entry]:
    """Parse raw ``ls`` output into a name -> Entry mapping.

    Lines that are not listing rows (the echoed command, the blocks footer,
    the prompt) are ignored. A later row with the same name replaces an
    earlier one.
    """
    entries: dict[str, Entry] = {}
    for line in text.splitlines():
        entry = parse_entry(line)
        if entry is None:
            continue
        if not entry.modified_parsed:
            logger.debug(f"Unparsed modification time for {entry.name}: {entry.modified}")
        entries[entry.name] = entry
    return entries


__all__ = [
    "Entry",
    "EntryKind",
    "Listing",
    "UNPARSED_DATE_MARKER",
    "parse_date",
    "parse_entry",
    "parse_listing",
]
