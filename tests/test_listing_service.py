import pytest

from ftpweb.core.exceptions import ListingUnavailableError
from ftpweb.core.ftp_client import FTPConnectionError
from ftpweb.services.listing_service import ListingService


@pytest.fixture
def listing_service(session):
    return ListingService(session)


async def test_resolves_normalized_path(listing_service, ftp_server):
    resolved = await listing_service.resolve_listing("/docs//2024/")
    assert resolved.canonical_path == "/docs/2024/"
    assert resolved.parent_path == "/docs"
    assert not resolved.is_fallback
    assert [entry.name for entry in resolved.entries] == ["q1", "report.pdf"]
    assert ftp_server.calls == [("LIST", "docs/2024/")]


async def test_falls_back_to_root_listing(listing_service, ftp_server):
    resolved = await listing_service.resolve_listing("/missing")
    assert resolved.canonical_path == ""
    assert resolved.parent_path == ""
    assert resolved.is_fallback
    assert resolved.requested_path == "/missing"
    assert [entry.name for entry in resolved.entries] == ["docs", "readme.txt"]
    assert ftp_server.calls == [("LIST", "missing"), ("LIST", None)]


async def test_root_is_listed_unqualified(listing_service, ftp_server):
    resolved = await listing_service.resolve_listing("")
    assert resolved.canonical_path == ""
    assert not resolved.is_fallback
    assert ftp_server.calls == [("LIST", None)]


async def test_malformed_lines_are_dropped_in_order(listing_service, ftp_server):
    ftp_server.listings["mixed"] = [
        "-rw-r--r-- 1 ftp ftp 3 Jan 1 2020 c.txt",
        "?? corrupted ??",
        "-rw-r--r-- 1 ftp ftp 1 Jan 1 2020 a.txt",
        "drwxr-xr-x 2 ftp ftp 4096 Jan 1 2020 b",
    ]
    resolved = await listing_service.resolve_listing("/mixed")
    assert [entry.name for entry in resolved.entries] == ["c.txt", "a.txt", "b"]


async def test_listing_with_only_garbage_is_empty_not_an_error(listing_service, ftp_server):
    ftp_server.listings["junk"] = ["total 0", "???"]
    resolved = await listing_service.resolve_listing("/junk")
    assert resolved.entries == ()
    assert resolved.canonical_path == "/junk"


async def test_root_failure_is_reported(listing_service, ftp_server):
    ftp_server.listings[None] = FTPConnectionError("Connection closed by server")
    with pytest.raises(ListingUnavailableError):
        await listing_service.resolve_listing("/missing")
