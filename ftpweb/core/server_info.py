"""Bind-port discovery and the URLs printed at startup."""
from __future__ import annotations

import socket

from ftpweb.core.exceptions import PortBindError

PORT_SEARCH_LIMIT = 100


def is_port_free(host: str, port: int) -> bool:
    family = socket.AF_INET6 if ":" in host else socket.AF_INET
    with socket.socket(family, socket.SOCK_STREAM) as sock:
        try:
            sock.bind((host, port))
        except OSError:
            return False
    return True


def find_free_port(host: str, preferred: int, *, attempts: int = PORT_SEARCH_LIMIT) -> int:
    """Return ``preferred`` if it can be bound, otherwise the next free port above it."""

    for port in range(preferred, min(preferred + attempts, 65536)):
        if is_port_free(host, port):
            return port
    raise PortBindError(f"No free port in {preferred}-{preferred + attempts - 1} on {host}")


def local_ip() -> str | None:
    """Best-effort LAN address of this machine; nothing is sent on the wire."""

    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
        try:
            sock.connect(("10.255.255.255", 1))
            return sock.getsockname()[0]
        except OSError:
            return None


def server_urls(host: str, port: int) -> list[str]:
    urls = [f"http://localhost:{port}/"]
    lan = local_ip()
    if lan:
        urls.append(f"http://{lan}:{port}/")
    if host not in {"0.0.0.0", "localhost", "127.0.0.1", lan}:
        urls.append(f"http://{host}:{port}/")
    return urls
