"""Parsing of raw ``LIST`` lines into directory entries."""
from __future__ import annotations

import logging
import re
from datetime import datetime
from typing import Iterable, Optional

from ftpweb.services.utils.types import DirectoryEntry, EntryKind

logger = logging.getLogger(__name__)

# -rw-r--r--   1 owner group   1234 Jan  1 12:00 name
# drwxr-xr-x   2 owner          512 Mar 14  2021 name   (group column omitted)
_UNIX_RE = re.compile(
    r"^(?P<perms>[bcdlps-][rwxsStTl-]{9})[+@.]?\s+"
    r"(?P<links>\d+)\s+"
    r"(?P<owner>\S+)\s+"
    r"(?:(?P<group>\S+)\s+)?"
    r"(?P<size>\d+)\s+"
    r"(?P<month>[A-Za-z]{3})\s+(?P<day>\d{1,2})\s+(?P<time>\d{1,2}:\d{2}|\d{4})\s+"
    r"(?P<name>.+)$"
)

# 03-14-21  09:26AM       <DIR>          name
# 03-14-2021  09:26PM             1234 name
_DOS_RE = re.compile(
    r"^(?P<month>\d{2})-(?P<day>\d{2})-(?P<year>\d{2}|\d{4})\s+"
    r"(?P<time>\d{1,2}:\d{2})\s*(?P<ampm>[AaPp][Mm])\s+"
    r"(?P<size><DIR>|[\d,]+)\s+"
    r"(?P<name>.+)$"
)


def _parse_unix(match: re.Match) -> DirectoryEntry:
    perms = match.group("perms")
    name = match.group("name")
    if perms.startswith("l") and " -> " in name:
        name = name.split(" -> ", 1)[0]
    is_dir = perms.startswith("d")
    modified = f"{match.group('month')} {match.group('day')} {match.group('time')}"
    return DirectoryEntry(
        name=name,
        kind=EntryKind.DIRECTORY if is_dir else EntryKind.FILE,
        last_modified=modified,
        size=None if is_dir else int(match.group("size")),
    )


def _parse_dos(match: re.Match) -> Optional[DirectoryEntry]:
    size_or_dir = match.group("size")
    is_dir = size_or_dir == "<DIR>"
    year = int(match.group("year"))
    if year < 100:
        year += 2000 if year < 70 else 1900
    try:
        modified_dt = datetime.strptime(
            f"{match.group('month')}-{match.group('day')}-{year} {match.group('time')}{match.group('ampm').upper()}",
            "%m-%d-%Y %I:%M%p",
        )
    except ValueError:
        return None
    return DirectoryEntry(
        name=match.group("name"),
        kind=EntryKind.DIRECTORY if is_dir else EntryKind.FILE,
        last_modified=modified_dt.strftime("%Y-%m-%d %H:%M"),
        size=None if is_dir else int(size_or_dir.replace(",", "")),
    )


def parse_list_line(line: str) -> Optional[DirectoryEntry]:
    """Parse one ``LIST`` line; return ``None`` when the line is not an entry."""
    line = line.rstrip("\r\n")
    if not line.strip():
        return None

    match = _UNIX_RE.match(line)
    if match:
        return _parse_unix(match)

    match = _DOS_RE.match(line.strip())
    if match:
        return _parse_dos(match)

    return None


def parse_listing(lines: Iterable[str]) -> list[DirectoryEntry]:
    """Parse every line, keeping server order and dropping lines that are not entries."""
    entries: list[DirectoryEntry] = []
    for line in lines:
        entry = parse_list_line(line)
        if entry is None:
            logger.debug("Skipping unparsable LIST line: %r", line)
            continue
        entries.append(entry)
    return entries
