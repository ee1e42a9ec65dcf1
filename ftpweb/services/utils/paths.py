"""Browse path helpers.

Browse paths use ``/`` as separator and ``""`` for the root. The HTTP layer
hands paths in with a leading separator; the server sees them relative to the
login directory (see :func:`to_remote`).
"""

SEPARATOR = "/"
_DOUBLE = SEPARATOR * 2


def normalize(raw: str) -> str:
    """Collapse every run of separators into one. Nothing else is touched."""
    path = raw or ""
    while _DOUBLE in path:
        path = path.replace(_DOUBLE, SEPARATOR)
    return path


def parent_of(path: str) -> str:
    """Return the path one level up; a single segment is its own parent.

    ``parent_of("/a/b/") == "/a"``, ``parent_of("/a") == ""``, ``parent_of("") == ""``.
    """
    parts = path.rstrip(SEPARATOR).split(SEPARATOR)
    if len(parts) > 1:
        parts.pop()
    return SEPARATOR.join(parts)


def segments(path: str) -> list[str]:
    return [segment for segment in path.split(SEPARATOR) if segment]


def join(parent: str, name: str) -> str:
    """Child path of ``parent``; always starts with a separator."""
    return SEPARATOR + SEPARATOR.join([*segments(parent), name])


def to_remote(path: str) -> str:
    """Path as sent to the server: relative to the login directory, ``""`` for the root."""
    return normalize(path).lstrip(SEPARATOR)
