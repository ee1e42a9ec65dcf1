import re

import pytest
from fastapi.testclient import TestClient

from ftpweb.core.config import Settings
from ftpweb.core.exceptions import StartupAuthError, StartupConnectionError
from ftpweb.main import create_app


def test_root_listing(http_client):
    response = http_client.get("/")
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/html")
    assert "<title>Index of /</title>" in response.text
    assert 'href="/ftp/docs"' in response.text
    assert 'href="/file/readme.txt"' in response.text
    assert response.headers["cache-control"] == "no-store"
    assert response.headers["x-request-id"]


def test_ftp_prefix_root_matches_home(http_client):
    assert "<title>Index of /</title>" in http_client.get("/ftp/").text


def test_browse_normalizes_path_and_renders_navigation(http_client):
    response = http_client.get("/ftp/docs//2024/")
    assert response.status_code == 200
    body = response.text
    assert "<title>Index of /docs/2024/</title>" in body

    header = body.split("</header>")[0]
    assert re.findall(r'<a href="([^"]*)"', header) == ["/", "/ftp/docs", "/ftp/docs/2024"]
    assert header.rstrip().endswith("</h3>")

    table = body.split("<table>")[1]
    assert table.index('<a href="/ftp/docs">..</a>') < table.index("q1")
    assert '<a href="/ftp/docs/2024/q1">q1</a>' in table
    assert '<a download href="/file/docs/2024/report.pdf">report.pdf</a>' in table
    assert "1.0 MB" in table


def test_missing_path_falls_back_to_root(http_client, ftp_server):
    response = http_client.get("/ftp/missing")
    assert response.status_code == 200
    assert "<title>Index of /</title>" in response.text
    assert ("LIST", "missing") in ftp_server.calls
    assert ("LIST", None) in ftp_server.calls


def test_unknown_route_shows_root_listing(http_client):
    response = http_client.get("/some/other/page")
    assert response.status_code == 200
    assert "<title>Index of /</title>" in response.text


def test_entry_names_are_escaped(http_client, ftp_server):
    ftp_server.listings["evil"] = [
        '-rw-r--r-- 1 ftp ftp 10 Jan 1 2020 a<b>&"c.txt',
    ]
    body = http_client.get("/ftp/evil").text
    assert "a<b>" not in body
    assert "a&lt;b&gt;&amp;&#34;c.txt" in body
    assert 'href="/file/evil/a%3Cb%3E%26%22c.txt"' in body


def test_download_returns_file_bytes(http_client):
    response = http_client.get("/file/docs/report.pdf")
    assert response.status_code == 200
    assert response.headers["content-disposition"] == 'attachment; filename="report.pdf"'
    assert response.headers["content-type"] == "application/octet-stream"
    assert response.content == b"%PDF-1.7 fake report"


def test_download_of_missing_file_is_an_error_page(http_client):
    response = http_client.get("/file/docs/missing.pdf")
    assert response.status_code == 404
    assert "Error 404" in response.text


def test_download_failure_does_not_block_later_requests(http_client, ftp_server):
    from ftpweb.core.ftp_client import FTPConnectionError

    ftp_server.files["flaky.bin"] = FTPConnectionError("Connection closed by server")
    assert http_client.get("/file/flaky.bin").status_code == 503
    assert http_client.get("/ftp/docs").status_code == 200
    assert ftp_server.connects == 2


def test_root_listing_failure_is_bad_gateway(http_client, ftp_server):
    from ftpweb.core.ftp_client import FTPResponseError

    ftp_server.listings[None] = FTPResponseError("451", "451 Local error in processing")
    ftp_server.listings.pop("docs")
    response = http_client.get("/ftp/docs")
    assert response.status_code == 502
    assert "Error 502" in response.text


def test_streamed_download(ftp_server):
    settings = Settings(upstream="ftp.test", stream_downloads=True)
    with TestClient(create_app(settings, client_factory=ftp_server.client)) as client:
        response = client.get("/file/docs/report.pdf")
        assert response.status_code == 200
        assert response.headers["content-disposition"] == 'attachment; filename="report.pdf"'
        assert response.content == b"%PDF-1.7 fake report"
        assert client.get("/file/docs/missing.pdf").status_code == 404


def test_plain_theme_has_no_breadcrumb_or_icons(ftp_server):
    settings = Settings(upstream="ftp.test", theme="plain")
    with TestClient(create_app(settings, client_factory=ftp_server.client)) as client:
        body = client.get("/ftp/docs").text
    assert "<svg" not in body
    assert "<style>" not in body
    header = body.split("</header>")[0]
    assert "/docs" in header
    assert "<a href" not in header


@pytest.mark.parametrize(
    "flag, error",
    [("fail_connect", StartupConnectionError), ("reject_login", StartupAuthError)],
)
def test_startup_failure_aborts(ftp_server, settings, flag, error):
    setattr(ftp_server, flag, True)
    app = create_app(settings, client_factory=ftp_server.client)
    with pytest.raises(error):
        with TestClient(app):
            pass
