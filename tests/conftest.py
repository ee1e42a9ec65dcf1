import asyncio
from typing import Optional

import pytest
from fastapi.testclient import TestClient

from ftpweb.core.config import Settings
from ftpweb.core.ftp_client import FTPAuthenticationError, FTPConnectionError, FTPResponseError
from ftpweb.main import create_app
from ftpweb.services.session_manager import SessionManager

ROOT_LISTING = [
    "total 12",
    "drwxr-xr-x   2 ftp ftp       4096 Jan 10 12:00 docs",
    "-rw-r--r--   1 ftp ftp       2048 Mar  3  2023 readme.txt",
]

DOCS_2024_LISTING = [
    "drwxr-xr-x   2 ftp ftp       4096 Feb  1 09:30 q1",
    "-rw-r--r--   1 ftp ftp    1048576 Feb  2 10:00 report.pdf",
]


class FakeFtpServer:
    """Scripted FTP server state shared by every fake client it hands out."""

    def __init__(self) -> None:
        self.listings: dict[Optional[str], list[str] | Exception] = {
            None: list(ROOT_LISTING),
            "docs": list(ROOT_LISTING[1:]),
            "docs/2024/": list(DOCS_2024_LISTING),
        }
        self.files: dict[str, bytes | Exception] = {
            "docs/report.pdf": b"%PDF-1.7 fake report",
        }
        self.calls: list[tuple[str, Optional[str]]] = []
        self.connects = 0
        self.closes = 0
        self.fail_connect = False
        self.reject_login = False
        self.connect_error: Optional[BaseException] = None
        self.connect_started: Optional[asyncio.Event] = None
        self.connect_release: Optional[asyncio.Event] = None
        self.retr_started: Optional[asyncio.Event] = None
        self.retr_release: Optional[asyncio.Event] = None
        self.chunk_size = 4

    def client(self, settings: Settings) -> "FakeFtpClient":
        return FakeFtpClient(self)


class FakeFtpClient:
    def __init__(self, server: FakeFtpServer) -> None:
        self.server = server
        self._connected = False

    async def connect(self, host: str, port: int = 21) -> str:
        self.server.connects += 1
        if self.server.fail_connect:
            raise FTPConnectionError(f"connect to {host}:{port} failed: refused")
        if self.server.connect_error is not None:
            raise self.server.connect_error
        if self.server.connect_started is not None:
            self.server.connect_started.set()
        if self.server.connect_release is not None:
            await self.server.connect_release.wait()
        self._connected = True
        return "220 fake ftp ready"

    async def login(self, username: str, password: str):
        if self.server.reject_login:
            raise FTPAuthenticationError("530 Login incorrect.")
        return "331 Password required", "230 Login successful"

    def is_connected(self) -> bool:
        return self._connected

    def _check(self) -> None:
        if not self._connected:
            raise FTPConnectionError("Not connected")

    async def list(self, path: Optional[str] = None) -> list[str]:
        self._check()
        self.server.calls.append(("LIST", path))
        await asyncio.sleep(0)
        listing = self.server.listings.get(path)
        if listing is None:
            raise FTPResponseError("550", "550 No such file or directory")
        if isinstance(listing, FTPConnectionError):
            self._connected = False
            raise listing
        if isinstance(listing, Exception):
            raise listing
        return list(listing)

    async def _lookup(self, remote_path: str) -> bytes:
        self._check()
        self.server.calls.append(("RETR", remote_path))
        if self.server.retr_started is not None:
            self.server.retr_started.set()
        if self.server.retr_release is not None:
            await self.server.retr_release.wait()
        data = self.server.files.get(remote_path)
        if data is None:
            raise FTPResponseError("550", "550 Failed to open file")
        if isinstance(data, FTPConnectionError):
            self._connected = False
            raise data
        if isinstance(data, Exception):
            raise data
        return data

    async def retr(self, remote_path: str) -> bytes:
        data = await self._lookup(remote_path)
        self.server.calls.append(("RETR-DONE", remote_path))
        return data

    async def stream_retr(self, remote_path: str, chunk_size: Optional[int] = None):
        data = await self._lookup(remote_path)
        size = chunk_size or self.server.chunk_size
        for offset in range(0, len(data), size):
            await asyncio.sleep(0)
            yield data[offset:offset + size]
        self.server.calls.append(("RETR-DONE", remote_path))

    async def close(self) -> None:
        self._connected = False
        self.server.closes += 1


@pytest.fixture
def ftp_server() -> FakeFtpServer:
    return FakeFtpServer()


@pytest.fixture
def settings() -> Settings:
    return Settings(upstream="ftp.test:2121", username="alice", password="secret")


@pytest.fixture
async def session(ftp_server, settings):
    manager = SessionManager(settings, client_factory=ftp_server.client)
    await manager.start()
    try:
        yield manager
    finally:
        await manager.stop()


@pytest.fixture
def http_client(ftp_server, settings):
    app = create_app(settings, client_factory=ftp_server.client)
    with TestClient(app) as client:
        yield client
