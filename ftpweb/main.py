"""FastAPI application factory."""
from __future__ import annotations

from contextlib import asynccontextmanager
import logging
import time
from uuid import uuid4

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.datastructures import MutableHeaders
from starlette.requests import Request

from ftpweb import __version__
from ftpweb.api.error_handlers import register_exception_handlers
from ftpweb.core.config import Settings, get_settings
from ftpweb.core.logging import LOGGER_NAME
from ftpweb.core.request_context import request_context
from ftpweb.services.registry import ServiceRegistry
from ftpweb.services.session_manager import ClientFactory
from ftpweb.web.routes import router as web_router

logger = logging.getLogger(LOGGER_NAME)


class RequestIdMiddleware:
    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request = Request(scope, receive=receive)
        request_id = request.headers.get("X-Request-ID") or uuid4().hex
        start = time.perf_counter()
        status_code = 500

        async def send_wrapper(message):
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message.get("status", 500)
                headers = MutableHeaders(scope=message)
                headers["X-Request-ID"] = request_id
            await send(message)

        with request_context(request_id):
            try:
                await self.app(scope, receive, send_wrapper)
            finally:
                duration_ms = int((time.perf_counter() - start) * 1000)
                logger.info(
                    "%s %s -> %s (%d ms)",
                    scope.get("method", "GET"),
                    scope.get("path") or "",
                    status_code,
                    duration_ms,
                )


def create_app(settings: Settings | None = None, *, client_factory: ClientFactory | None = None) -> FastAPI:
    """Build the gateway application; without ``settings`` they come from the environment."""

    settings = settings or get_settings()
    registry = ServiceRegistry(settings, client_factory=client_factory)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Open the FTP session before serving and close it on shutdown."""

        app.state.services = registry
        await registry.startup()
        try:
            yield
        finally:
            await registry.shutdown()

    app = FastAPI(
        title="ftp-web",
        description="Browse and download files from an FTP server over HTTP",
        version=__version__,
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestIdMiddleware)

    app.include_router(web_router)
    register_exception_handlers(app)
    return app
