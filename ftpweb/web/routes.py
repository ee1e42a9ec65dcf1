"""Routes serving the HTML listings and file downloads."""
from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, Response, StreamingResponse
from fastapi.templating import Jinja2Templates

from ftpweb.api.dependencies import get_download_service, get_listing_service, get_service_registry
from ftpweb.services.download_service import DownloadService
from ftpweb.services.listing_service import ListingService
from ftpweb.services.registry import ServiceRegistry
from ftpweb.services.utils.ftp_helpers import content_disposition
from ftpweb.web.navigation import display_path, render_breadcrumb, render_listing

logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent
TEMPLATES = Jinja2Templates(directory=str(BASE_DIR / "templates"))

router = APIRouter()


async def _listing_page(request: Request, browse_path: str, listing_service: ListingService, registry: ServiceRegistry) -> HTMLResponse:
    resolved = await listing_service.resolve_listing(browse_path)
    response = TEMPLATES.TemplateResponse(
        request,
        "listing.html",
        {
            "theme": registry.theme,
            "title_path": display_path(resolved.canonical_path),
            "breadcrumb": render_breadcrumb(resolved.canonical_path),
            "rows": render_listing(resolved),
            "is_fallback": resolved.is_fallback,
        },
    )
    response.headers["Cache-Control"] = "no-store"
    return response


@router.get("/", response_class=HTMLResponse)
@router.get("/ftp/", response_class=HTMLResponse)
async def browse_root(
    request: Request,
    listing_service: ListingService = Depends(get_listing_service),
    registry: ServiceRegistry = Depends(get_service_registry),
) -> HTMLResponse:
    """Render the listing of the server's root directory."""

    return await _listing_page(request, "", listing_service, registry)


@router.get("/ftp/{path:path}", response_class=HTMLResponse)
async def browse(
    path: str,
    request: Request,
    listing_service: ListingService = Depends(get_listing_service),
    registry: ServiceRegistry = Depends(get_service_registry),
) -> HTMLResponse:
    """Render the listing for ``path``; unknown paths fall back to the root."""

    return await _listing_page(request, f"/{path}", listing_service, registry)


@router.get("/file/{path:path}")
async def download(
    path: str,
    download_service: DownloadService = Depends(get_download_service),
    registry: ServiceRegistry = Depends(get_service_registry),
) -> Response:
    """Send the file at ``path`` as an attachment."""

    if registry.settings.stream_downloads:
        filename, chunks = await download_service.open_stream(path)

        async def stream():
            try:
                async for chunk in chunks:
                    yield chunk
            except asyncio.CancelledError:
                logger.info("Download stream cancelled by client: %s", path)
                raise
            finally:
                await chunks.aclose()

        return StreamingResponse(
            stream(),
            media_type="application/octet-stream",
            headers={"Content-Disposition": content_disposition(filename)},
        )

    result = await download_service.download_file(path)
    return Response(
        content=result.content,
        media_type="application/octet-stream",
        headers={"Content-Disposition": content_disposition(result.filename)},
    )


@router.get("/{rest:path}", response_class=HTMLResponse, include_in_schema=False)
async def fallback(
    rest: str,
    request: Request,
    listing_service: ListingService = Depends(get_listing_service),
    registry: ServiceRegistry = Depends(get_service_registry),
) -> HTMLResponse:
    logger.debug("No route for /%s, showing root listing", rest)
    return await _listing_page(request, "", listing_service, registry)
