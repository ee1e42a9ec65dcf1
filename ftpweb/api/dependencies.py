"""FastAPI dependency providers."""
from fastapi import Depends, Request

from ftpweb.core.exceptions import ServiceUnavailableError
from ftpweb.services.download_service import DownloadService
from ftpweb.services.listing_service import ListingService
from ftpweb.services.registry import ServiceRegistry


def get_service_registry(request: Request) -> ServiceRegistry:
    """Return the service registry stored on the FastAPI application state."""

    registry = getattr(request.app.state, "services", None)
    if not isinstance(registry, ServiceRegistry):
        raise ServiceUnavailableError("FTP gateway not initialised")
    return registry


def get_listing_service(registry: ServiceRegistry = Depends(get_service_registry)) -> ListingService:
    return registry.listing_service


def get_download_service(registry: ServiceRegistry = Depends(get_service_registry)) -> DownloadService:
    return registry.download_service
