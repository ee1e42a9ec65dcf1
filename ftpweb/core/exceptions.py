"""Exception hierarchy shared by the gateway services and HTTP handlers."""
from __future__ import annotations

from typing import Any


class AppError(Exception):
    """Base exception for application specific errors."""

    status_code = 500
    error_code = "app_error"
    default_detail = "An unexpected error occurred."

    def __init__(self, detail: str | None = None, *, extra: dict[str, Any] | None = None) -> None:
        super().__init__(detail or self.default_detail)
        self.detail = detail or self.default_detail
        self.extra = extra or {}


class StartupError(AppError):
    """Fatal condition detected before the server starts accepting requests."""

    error_code = "startup_error"


class StartupConnectionError(StartupError):
    error_code = "startup_connection"
    default_detail = "Could not connect to the FTP server."


class StartupAuthError(StartupError):
    error_code = "startup_auth"
    default_detail = "The FTP server rejected the configured credentials."


class PortBindError(StartupError):
    error_code = "port_bind"
    default_detail = "No free port available to bind the HTTP server."


class SessionClosedError(AppError):
    """Raised for operations submitted after the FTP session was stopped."""

    status_code = 503
    error_code = "session_closed"
    default_detail = "FTP session is not running."


class DomainError(AppError):
    """Normalized domain error surfaced to HTTP handlers."""


class NotFoundError(DomainError):
    status_code = 404
    error_code = "not_found"
    default_detail = "Resource not found."


class ServiceUnavailableError(DomainError):
    status_code = 503
    error_code = "service_unavailable"
    default_detail = "Service unavailable."


class BadGatewayError(DomainError):
    status_code = 502
    error_code = "bad_gateway"
    default_detail = "Upstream service failed."


class ListingUnavailableError(BadGatewayError):
    error_code = "listing_unavailable"
    default_detail = "The FTP server did not return a directory listing."
