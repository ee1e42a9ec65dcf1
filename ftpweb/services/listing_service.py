"""
Directory listings for browse requests.

- Path normalized, then listed through the FTP session
- A listing the server refuses falls back to the unqualified (root) listing
- Lines that are not entries are dropped, server order is kept
"""

import logging
from typing import List, Tuple

from ftpweb.core.exceptions import ListingUnavailableError
from ftpweb.core.ftp_client import FtpClient, FTPError
from ftpweb.services.session_manager import SessionManager
from ftpweb.services.utils.listing_parser import parse_listing
from ftpweb.services.utils.paths import normalize, parent_of, to_remote
from ftpweb.services.utils.types import ResolvedListing

logger = logging.getLogger(__name__)


class ListingService:
	def __init__(self, session: SessionManager):
		self._session = session

	async def resolve_listing(self, requested_path: str) -> ResolvedListing:
		path = normalize(requested_path)
		remote = to_remote(path)

		async def _list(client: FtpClient) -> Tuple[str, List[str], bool]:
			if remote:
				try:
					return path, await client.list(remote), False
				except FTPError as exc:
					logger.warning("ListingService: listing %r failed (%s), falling back to root", remote, exc)
			return ("" if remote else path), await client.list(None), bool(remote)

		try:
			canonical, lines, is_fallback = await self._session.with_session(_list)
		except FTPError as exc:
			logger.warning("ListingService: root listing failed: %s", exc)
			raise ListingUnavailableError(str(exc)) from exc

		entries = parse_listing(lines)
		logger.debug(
			"ListingService: %s -> %d entries from %d lines (fallback=%s)",
			canonical or "/",
			len(entries),
			len(lines),
			is_fallback,
		)
		return ResolvedListing(
			canonical_path=canonical,
			entries=tuple(entries),
			parent_path=parent_of(canonical),
			requested_path=requested_path,
			is_fallback=is_fallback,
		)
