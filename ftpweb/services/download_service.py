"""
File downloads through the shared FTP session.

The default path buffers the whole file before answering. Streaming keeps the
session busy for the whole transfer and hands chunks to the response as they
arrive.
"""

import asyncio
import logging
from typing import AsyncGenerator, Optional, Tuple

from ftpweb.core.exceptions import NotFoundError
from ftpweb.core.ftp_client import FtpClient, FTPError
from ftpweb.core.tasks import cancel_and_wait
from ftpweb.services.session_manager import SessionManager
from ftpweb.services.utils.errors import normalize_ftp_error
from ftpweb.services.utils.ftp_helpers import format_size, suggested_name
from ftpweb.services.utils.paths import to_remote
from ftpweb.services.utils.types import DownloadResult

logger = logging.getLogger(__name__)


class DownloadService:
	def __init__(self, session: SessionManager, *, buffer_chunks: int = 8):
		self._session = session
		self._buffer_chunks = max(1, buffer_chunks)

	@staticmethod
	def _remote_path(path: str) -> str:
		remote = to_remote(path)
		if not remote or remote.endswith("/"):
			raise NotFoundError(f"Not a file: '{path or '/'}'")
		return remote

	async def download_file(self, path: str) -> DownloadResult:
		"""Retrieve the complete file; nothing is returned unless the transfer finished."""
		filename = suggested_name(path)
		remote = self._remote_path(path)

		async def _retr(client: FtpClient) -> bytes:
			return await client.retr(remote)

		try:
			content = await self._session.with_session(_retr)
		except FTPError as exc:
			logger.warning("DownloadService: download of %s failed: %s", remote, exc)
			raise normalize_ftp_error(exc) from exc
		logger.info("DownloadService: retrieved %s (%s)", remote, format_size(len(content)))
		return DownloadResult(content=content, filename=filename)

	async def open_stream(self, path: str) -> Tuple[str, AsyncGenerator[bytes, None]]:
		"""Start a streamed retrieval and return ``(filename, chunks)``.

		The first chunk is awaited here so that a refused RETR still surfaces as an
		error before any response is started.
		"""
		filename = suggested_name(path)
		remote = self._remote_path(path)
		chunks: asyncio.Queue = asyncio.Queue(maxsize=self._buffer_chunks)

		async def _transfer(client: FtpClient) -> None:
			async for chunk in client.stream_retr(remote):
				await chunks.put(chunk)
			await chunks.put(None)

		transfer = asyncio.create_task(self._session.with_session(_transfer))
		try:
			first = await self._next_chunk(chunks, transfer)
		except FTPError as exc:
			logger.warning("DownloadService: stream of %s failed: %s", remote, exc)
			raise normalize_ftp_error(exc) from exc
		except BaseException:
			await cancel_and_wait(transfer)
			raise

		async def _body() -> AsyncGenerator[bytes, None]:
			sent = 0
			completed = False
			try:
				chunk = first
				while chunk is not None:
					sent += len(chunk)
					yield chunk
					chunk = await self._next_chunk(chunks, transfer)
				completed = True
				logger.info("DownloadService: streamed %s (%s)", remote, format_size(sent))
			except FTPError as exc:
				logger.warning("DownloadService: stream of %s broke after %s: %s", remote, format_size(sent), exc)
				raise
			finally:
				if completed:
					await transfer
				else:
					if not transfer.done():
						logger.info("DownloadService: stream of %s aborted after %s", remote, format_size(sent))
					await cancel_and_wait(transfer)

		return filename, _body()

	@staticmethod
	async def _next_chunk(chunks: asyncio.Queue, transfer: asyncio.Task) -> Optional[bytes]:
		if not chunks.empty():
			return chunks.get_nowait()
		getter = asyncio.ensure_future(chunks.get())
		try:
			await asyncio.wait({getter, transfer}, return_when=asyncio.FIRST_COMPLETED)
		finally:
			if not getter.done():
				getter.cancel()
		if getter.done() and not getter.cancelled():
			return getter.result()
		# Raises the transfer error, if any.
		transfer.result()
		if not chunks.empty():
			return chunks.get_nowait()
		return None
