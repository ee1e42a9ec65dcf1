import pytest

from ftpweb.services.utils.paths import join, normalize, parent_of, segments, to_remote


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("/a//b/", "/a/b/"),
        ("//a///b////", "/a/b/"),
        ("a/b", "a/b"),
        ("", ""),
        ("////", "/"),
    ],
)
def test_normalize_collapses_doubled_separators(raw, expected):
    assert normalize(raw) == expected
    assert "//" not in normalize(raw)


def test_normalize_does_not_escape_or_validate():
    assert normalize("/a b/../c%20") == "/a b/../c%20"


@pytest.mark.parametrize(
    "path, expected",
    [
        ("/a/b/", "/a"),
        ("/a/b", "/a"),
        ("/a", ""),
        ("", ""),
        ("/", ""),
        ("a", "a"),
    ],
)
def test_parent_of(path, expected):
    assert parent_of(path) == expected


def test_to_remote_is_relative_to_login_directory():
    assert to_remote("/docs//2024/") == "docs/2024/"
    assert to_remote("/") == ""
    assert to_remote("") == ""


def test_join_and_segments():
    assert join("", "docs") == "/docs"
    assert join("/docs/2024/", "q1") == "/docs/2024/q1"
    assert segments("/docs//2024/") == ["docs", "2024"]
