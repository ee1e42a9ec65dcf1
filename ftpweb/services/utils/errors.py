"""Service error normalization helpers."""
from __future__ import annotations

from ftpweb.core.exceptions import (
    BadGatewayError,
    DomainError,
    NotFoundError,
    ServiceUnavailableError,
)
from ftpweb.core.ftp_client import FTPAuthenticationError, FTPError, FTPResponseError


def normalize_ftp_error(exc: Exception, *, fallback: str = "FTP operation failed") -> DomainError:
    if isinstance(exc, DomainError):
        return exc
    if isinstance(exc, FTPResponseError):
        if exc.code == "550":
            return NotFoundError(str(exc))
        if exc.code.startswith("4"):
            return ServiceUnavailableError(str(exc))
        return BadGatewayError(str(exc))
    if isinstance(exc, FTPAuthenticationError):
        return ServiceUnavailableError(f"FTP session not authenticated: {exc}")
    if isinstance(exc, FTPError):
        return ServiceUnavailableError(str(exc) or fallback)
    return BadGatewayError(str(exc) or fallback)
