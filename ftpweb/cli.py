"""Command line entry-point: parse options, pick a port and run uvicorn."""
from __future__ import annotations

import argparse
import sys
from typing import Sequence, TextIO

import segno
import uvicorn
from pydantic import ValidationError

from ftpweb import __version__
from ftpweb.core.config import Settings
from ftpweb.core.exceptions import PortBindError
from ftpweb.core.logging import configure_logging
from ftpweb.core.server_info import find_free_port, local_ip, server_urls
from ftpweb.main import create_app
from ftpweb.web.themes import THEMES


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ftp-web",
        description="Browse and download files from an FTP server over HTTP.",
    )
    parser.add_argument("ftp", help="FTP server address: host, host:port or ftp://host:port")
    parser.add_argument("-u", "--username", default=None, help="FTP username (default: anonymous)")
    parser.add_argument("-p", "--password", default=None, help="FTP password")
    parser.add_argument("--host", default=None, help="HTTP bind address (default: 0.0.0.0)")
    parser.add_argument("--port", type=int, default=None, help="Preferred HTTP port (default: 8080)")
    parser.add_argument("--log-level", dest="log_level", default=None, help="Logging level (default: INFO)")
    parser.add_argument("--timeout", type=float, default=None, help="FTP read timeout in seconds")
    parser.add_argument("--tls", action="store_true", default=None, help="Use implicit FTPS")
    parser.add_argument("--theme", choices=sorted(THEMES), default=None, help="Listing page theme")
    parser.add_argument(
        "--stream",
        dest="stream_downloads",
        action="store_true",
        default=None,
        help="Stream downloads instead of buffering whole files",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def print_banner(host: str, port: int, *, out: TextIO | None = None) -> None:
    """Print the reachable URLs and a QR code of the LAN address."""

    out = out or sys.stdout
    urls = server_urls(host, port)
    print("ftp-web:", file=out)
    for url in urls:
        print(url, file=out)
    lan = local_ip()
    target = f"http://{lan}:{port}/" if lan else urls[0]
    segno.make_qr(target, error="h").terminal(out=out)


def parse_settings(argv: Sequence[str] | None = None) -> Settings:
    parser = build_parser()
    args = parser.parse_args(argv)
    values = {key: value for key, value in vars(args).items() if value is not None}
    values["upstream"] = values.pop("ftp")
    try:
        return Settings(**values)
    except ValidationError as exc:
        parser.error(str(exc))


def main(argv: Sequence[str] | None = None) -> int:
    settings = parse_settings(argv)
    logger = configure_logging(settings)

    try:
        port = find_free_port(settings.host, settings.port)
    except PortBindError as exc:
        logger.error("%s", exc.detail)
        return 1
    if port != settings.port:
        logger.warning("Port %s is busy, using %s instead", settings.port, port)
        settings = settings.model_copy(update={"port": port})

    app = create_app(settings)
    print_banner(settings.host, port)

    uvicorn.run(
        app,
        host=settings.host,
        port=port,
        log_level=settings.log_level.lower(),
        timeout_graceful_shutdown=2,
        access_log=False,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
