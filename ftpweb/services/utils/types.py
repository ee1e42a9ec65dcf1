# ftpweb/services/utils/types.py
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class EntryKind(str, Enum):
    DIRECTORY = "dir"
    FILE = "file"


@dataclass(frozen=True, slots=True)
class DirectoryEntry:
    name: str
    kind: EntryKind
    last_modified: str
    size: Optional[int] = None

    @property
    def is_directory(self) -> bool:
        return self.kind is EntryKind.DIRECTORY


@dataclass(frozen=True, slots=True)
class ResolvedListing:
    """Outcome of one browse request; ``canonical_path`` is what was actually listed."""

    canonical_path: str
    entries: tuple[DirectoryEntry, ...]
    parent_path: str
    requested_path: str = ""
    is_fallback: bool = False


@dataclass(frozen=True, slots=True)
class DownloadResult:
    content: bytes
    filename: str

    @property
    def size(self) -> int:
        return len(self.content)
