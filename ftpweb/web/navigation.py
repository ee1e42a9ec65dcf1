"""Breadcrumb and listing rows built from a resolved listing.

Pure functions: nothing here talks to the FTP server.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional
from urllib.parse import quote

from ftpweb.services.utils.ftp_helpers import format_size
from ftpweb.services.utils.paths import join, segments
from ftpweb.services.utils.types import ResolvedListing

BROWSE_PREFIX = "/ftp"
DOWNLOAD_PREFIX = "/file"
PARENT_LABEL = ".."


@dataclass(frozen=True, slots=True)
class Crumb:
    label: str
    path: str
    href: str


@dataclass(frozen=True, slots=True)
class ListingRow:
    name: str
    path: str
    href: str
    is_directory: bool
    modified: str = ""
    size: Optional[str] = None
    is_parent: bool = False


def _quoted(path: str) -> str:
    return quote("/".join(segments(path)), safe="/")


def browse_href(path: str) -> str:
    return f"{BROWSE_PREFIX}/{_quoted(path)}"


def download_href(path: str) -> str:
    return f"{DOWNLOAD_PREFIX}/{_quoted(path)}"


def display_path(path: str) -> str:
    return path or "/"


def render_breadcrumb(canonical_path: str) -> list[Crumb]:
    """Root first, then one crumb per segment pointing at the accumulated prefix."""
    crumbs = [Crumb(label="/", path="", href="/")]
    prefix = ""
    for segment in segments(canonical_path):
        prefix = f"{prefix}/{segment}"
        crumbs.append(Crumb(label=segment, path=prefix, href=browse_href(prefix)))
    return crumbs


def render_listing(resolved: ResolvedListing) -> list[ListingRow]:
    """Synthesized parent row followed by one row per entry, in listing order."""
    rows = [
        ListingRow(
            name=PARENT_LABEL,
            path=resolved.parent_path,
            href=browse_href(resolved.parent_path),
            is_directory=True,
            is_parent=True,
        )
    ]
    for entry in resolved.entries:
        path = join(resolved.canonical_path, entry.name)
        if entry.is_directory:
            rows.append(
                ListingRow(
                    name=entry.name,
                    path=path,
                    href=browse_href(path),
                    is_directory=True,
                    modified=entry.last_modified,
                )
            )
        else:
            rows.append(
                ListingRow(
                    name=entry.name,
                    path=path,
                    href=download_href(path),
                    is_directory=False,
                    modified=entry.last_modified,
                    size=format_size(entry.size),
                )
            )
    return rows
