"""Shared FastAPI exception handlers rendering HTML error pages."""
from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.status import HTTP_500_INTERNAL_SERVER_ERROR

from ftpweb.core.exceptions import AppError
from ftpweb.core.logging import LOGGER_NAME
from ftpweb.web.routes import TEMPLATES
from ftpweb.web.themes import THEMES, Theme


def _theme_for(request: Request) -> Theme:
    registry = getattr(request.app.state, "services", None)
    return getattr(registry, "theme", None) or THEMES["default"]


def _error_page(request: Request, status_code: int, error_code: str, detail: str) -> HTMLResponse:
    return TEMPLATES.TemplateResponse(
        request,
        "error.html",
        {
            "theme": _theme_for(request),
            "status_code": status_code,
            "error_code": error_code,
            "detail": detail,
        },
        status_code=status_code,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach global exception handlers to the FastAPI app."""

    logger = logging.getLogger(LOGGER_NAME)

    @app.exception_handler(AppError)
    async def handle_app_error(request: Request, exc: AppError) -> HTMLResponse:
        if exc.status_code >= 500:
            logger.error(
                "Request failed (%s %s): %s",
                request.method,
                request.url.path,
                exc.detail,
                exc_info=exc.__cause__ or exc,
            )
        else:
            logger.warning(
                "Request failed (%s %s): %s",
                request.method,
                request.url.path,
                exc.detail,
            )
        return _error_page(request, exc.status_code, exc.error_code, exc.detail)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(request: Request, exc: StarletteHTTPException) -> HTMLResponse:
        logger.warning("HTTP error (%s %s): %s", request.method, request.url.path, exc.detail)
        return _error_page(request, exc.status_code, "http_error", str(exc.detail))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception) -> HTMLResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return _error_page(request, HTTP_500_INTERNAL_SERVER_ERROR, "internal_error", "Internal server error")
