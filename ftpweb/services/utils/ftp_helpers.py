"""Helper functions for presenting FTP entries."""
from typing import Optional
from urllib.parse import quote


def format_size(size_bytes: Optional[int]) -> str:
    """Human readable size in decimal units (``1.5 KB`` is 1500 bytes)."""
    if size_bytes is None:
        return ""

    units = ["B", "KB", "MB", "GB", "TB", "PB"]
    index = 0
    size = float(size_bytes)

    while size >= 1000 and index < len(units) - 1:
        size /= 1000.0
        index += 1

    if index == 0:
        return f"{size_bytes} B"
    return f"{size:.1f} {units[index]}"


def suggested_name(path: str, default: str = "download") -> str:
    """Last ``/``-separated segment of ``path``, or ``default`` when it is empty."""
    return path.split("/")[-1] or default


def content_disposition(filename: str) -> str:
    """``attachment`` header value; non-ASCII names also get an RFC 5987 ``filename*``."""
    filename = "".join(ch for ch in filename if ch.isprintable()) or "download"
    escaped = filename.replace("\\", "\\\\").replace('"', '\\"')
    try:
        escaped.encode("ascii")
    except UnicodeEncodeError:
        fallback = escaped.encode("ascii", errors="replace").decode("ascii")
        return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename, safe='')}"
    return f'attachment; filename="{escaped}"'
