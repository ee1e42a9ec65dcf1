"""Service registry that wires the gateway services together."""
import logging
from typing import Optional

from ftpweb.core.config import Settings
from ftpweb.core.exceptions import StartupError
from ftpweb.core.request_context import request_context
from ftpweb.services.download_service import DownloadService
from ftpweb.services.listing_service import ListingService
from ftpweb.services.session_manager import ClientFactory, SessionManager
from ftpweb.web.themes import Theme, get_theme

logger = logging.getLogger(__name__)


class ServiceRegistry:
    """Container object for dependency injection."""

    def __init__(self, settings: Settings, *, client_factory: Optional[ClientFactory] = None) -> None:
        self.settings = settings
        self.theme: Theme = get_theme(settings.theme)
        self.session = SessionManager(settings, client_factory=client_factory)
        self.listing_service = ListingService(self.session)
        self.download_service = DownloadService(self.session)

    async def startup(self) -> None:
        with request_context("bg:startup"):
            try:
                await self.session.start()
            except StartupError as exc:
                logger.error("Cannot start FTP gateway: %s", exc.detail)
                raise
            logger.info("FTP gateway ready for %s", self.settings.upstream)

    async def shutdown(self) -> None:
        with request_context("bg:shutdown"):
            await self.session.stop()
