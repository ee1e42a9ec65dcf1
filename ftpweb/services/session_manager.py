"""
Single-owner FTP session.

- One worker task holds the control connection and runs submitted operations one at a time
- Operations are queued on a bounded asyncio.Queue and answered through futures
- A failing or cancelled operation only fails its own future; the worker keeps serving
- Connection-level failures drop the client, the next operation reconnects
"""

import asyncio
import contextvars
import logging
from typing import Awaitable, Callable, Optional, TypeVar

from ftpweb.core.config import Settings
from ftpweb.core.exceptions import SessionClosedError, StartupAuthError, StartupConnectionError
from ftpweb.core.ftp_client import (
	FtpClient,
	FTPAuthenticationError,
	FTPConnectionError,
	FTPError,
	FTPResponseError,
)
from ftpweb.core.request_context import request_context
from ftpweb.core.tasks import cancel_and_wait, monitor_task

logger = logging.getLogger(__name__)

T = TypeVar("T")
Operation = Callable[[FtpClient], Awaitable[T]]
ClientFactory = Callable[[Settings], FtpClient]


def default_client_factory(settings: Settings) -> FtpClient:
	return FtpClient(timeout=settings.timeout, use_tls=settings.tls)


class SessionManager:
	def __init__(self, settings: Settings, *, client_factory: Optional[ClientFactory] = None):
		self._settings = settings
		self._client_factory = client_factory or default_client_factory
		self._client: Optional[FtpClient] = None
		self._queue: Optional[asyncio.Queue] = None
		self._worker: Optional[asyncio.Task] = None
		self._running = False

	@property
	def is_running(self) -> bool:
		return self._running

	@property
	def is_connected(self) -> bool:
		return self._client is not None and self._client.is_connected()

	# -------------------------
	# lifecycle
	# -------------------------
	async def start(self) -> None:
		"""Connect and authenticate once; any failure here is fatal for the process."""
		if self._running:
			return
		host, port = self._settings.upstream_address()
		try:
			client = await self._open_client()
		except FTPAuthenticationError as exc:
			raise StartupAuthError(f"Login to {host}:{port} failed: {exc}") from exc
		except FTPError as exc:
			raise StartupConnectionError(f"Cannot connect to {host}:{port}: {exc}") from exc

		self._client = client
		self._queue = asyncio.Queue(maxsize=self._settings.queue_size)
		self._running = True
		self._worker = monitor_task(
			asyncio.create_task(self._serve(), name="ftp-session"),
			name="ftp-session",
			logger=logger,
			on_error=self._handle_worker_crash,
		)

	async def stop(self) -> None:
		"""Stop the worker, fail whatever is still queued and close the connection."""
		if not self._running:
			return
		self._running = False
		await cancel_and_wait(self._worker)
		self._worker = None
		self._fail_pending()
		await self._discard_client()
		logger.info("FTP session: closed")

	def _handle_worker_crash(self, exc: BaseException) -> None:
		self._running = False
		self._fail_pending()

	def _fail_pending(self) -> None:
		if self._queue is None:
			return
		while not self._queue.empty():
			_, future, _ = self._queue.get_nowait()
			self._queue.task_done()
			if not future.done():
				future.set_exception(SessionClosedError())

	async def _open_client(self) -> FtpClient:
		host, port = self._settings.upstream_address()
		client = self._client_factory(self._settings)
		try:
			await client.connect(host, port)
			await client.login(self._settings.username, self._settings.password)
		except (Exception, asyncio.CancelledError):
			await self._close_quietly(client)
			raise
		logger.info(
			"FTP session: connected to %s:%s as %s",
			host,
			port,
			self._settings.username or "anonymous",
		)
		return client

	async def _ensure_client(self) -> FtpClient:
		if self._client is not None and self._client.is_connected():
			return self._client
		await self._discard_client()
		logger.info("FTP session: reconnecting to %s", self._settings.upstream)
		self._client = await self._open_client()
		return self._client

	async def _discard_client(self) -> None:
		client, self._client = self._client, None
		if client is not None:
			await self._close_quietly(client)

	@staticmethod
	async def _close_quietly(client: FtpClient) -> None:
		try:
			await client.close()
		except Exception:
			logger.debug("FTP session: error while closing client", exc_info=True)

	# -------------------------
	# operations
	# -------------------------
	async def with_session(self, operation: Operation[T]) -> T:
		"""Run ``operation(client)`` on the session worker and return its result.

		Operations never overlap on the control connection. Cancelling the caller
		cancels the running operation and releases the session for the next one.
		"""
		if not self._running or self._queue is None:
			raise SessionClosedError()
		loop = asyncio.get_running_loop()
		future: asyncio.Future = loop.create_future()
		await self._queue.put((operation, future, contextvars.copy_context()))
		if not self._running and not future.done():
			future.set_exception(SessionClosedError())
		return await future

	async def _serve(self) -> None:
		with request_context("bg:ftp-session"):
			while True:
				operation, future, context = await self._queue.get()
				try:
					if future.done():
						continue
					await self._execute(operation, future, context)
				except asyncio.CancelledError:
					if not future.done():
						future.set_exception(SessionClosedError())
					raise
				except Exception as exc:
					logger.exception("FTP session: unexpected worker error, resetting connection")
					await self._discard_client()
					if not future.done():
						future.set_exception(exc)
				finally:
					self._queue.task_done()

	async def _execute(self, operation: Operation, future: asyncio.Future, context: contextvars.Context) -> None:
		try:
			client = await self._ensure_client()
		except Exception as exc:
			logger.warning("FTP session: reconnect failed: %s", exc)
			await self._discard_client()
			error = exc
			if not isinstance(exc, FTPError):
				error = FTPConnectionError(f"Reconnect failed: {exc}")
				error.__cause__ = exc
			if not future.done():
				future.set_exception(error)
			return

		task = asyncio.create_task(operation(client), context=context)

		def _cancel_task(fut: asyncio.Future) -> None:
			if fut.cancelled() and not task.done():
				task.cancel()

		future.add_done_callback(_cancel_task)

		try:
			await asyncio.wait({task})
		except asyncio.CancelledError:
			task.cancel()
			raise

		if task.cancelled():
			logger.info("FTP session: operation cancelled, resetting connection")
			await self._discard_client()
			if not future.done():
				future.cancel()
			return

		exc = task.exception()
		if exc is None:
			if not future.done():
				future.set_result(task.result())
			return
		# The server answered; the control channel is still in a known state.
		if not isinstance(exc, FTPResponseError):
			logger.warning("FTP session: operation failed (%s), resetting connection", exc)
			await self._discard_client()
		if not future.done():
			future.set_exception(exc)


__all__ = ["SessionManager", "Operation", "ClientFactory", "default_client_factory"]
