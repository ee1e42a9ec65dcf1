import asyncio
import ssl
import re
import socket
import logging
from enum import Enum
from typing import Optional, Tuple, List, AsyncIterator

logger = logging.getLogger(__name__)

class FTPError(Exception):
	"""Base class for FTP-related errors."""
	pass


class FTPAuthenticationError(FTPError):
	"""Raised when authentication fails."""
	pass


class FTPConnectionError(FTPError):
	"""Raised when the underlying connection fails."""
	pass


class FTPResponseError(FTPError):
	"""Raised for non-success server replies."""

	def __init__(self, code: str, message: str):
		super().__init__(f"{code} {message}" if not message.startswith(code) else message)
		self.code = code
		self.message = message


class FTPCommand(Enum):
	USER = "USER"
	PASS = "PASS"
	PASV = "PASV"
	EPSV = "EPSV"
	TYPE = "TYPE"
	PBSZ = "PBSZ"
	PROT = "PROT"
	LIST = "LIST"
	RETR = "RETR"
	QUIT = "QUIT"


_REPLY_RE = re.compile(r"^(\d{3})([ -])")


class FtpClient:
	"""
	Async FTP client speaking the read-only subset the gateway needs.

	A single instance owns one control connection. It is not safe for concurrent
	use: callers must make sure only one command is in flight at a time.
	"""

	def __init__(
		self,
		timeout: float = 30.0,
		chunk_size: int = 64 * 1024,
		use_tls: bool = False,
	):
		self.timeout = timeout
		self.chunk_size = chunk_size
		self.use_tls = use_tls

		self.host: str = ""
		self.port: int = 21
		self.user: str = ""

		self.reader: Optional[asyncio.StreamReader] = None
		self.writer: Optional[asyncio.StreamWriter] = None

		self.data_reader: Optional[asyncio.StreamReader] = None
		self.data_writer: Optional[asyncio.StreamWriter] = None

		self._ssl_ctx = self._create_ssl_context() if use_tls else None
		self._connected = False

	# -------------------------
	# SSL / socket helpers
	# -------------------------
	def _create_ssl_context(self) -> ssl.SSLContext:
		ctx = ssl.create_default_context()
		ctx.check_hostname = False
		ctx.verify_mode = ssl.CERT_NONE
		ctx.options |= ssl.OP_NO_COMPRESSION
		return ctx

	@staticmethod
	def _set_tcp_nodelay(writer: asyncio.StreamWriter):
		sock = writer.get_extra_info("socket")
		if sock is None:
			return
		try:
			sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
		except OSError:
			logger.debug("TCP_NODELAY not supported on this socket")

	def _open_kwargs(self) -> dict:
		if self._ssl_ctx is None:
			return {}
		return {"ssl": self._ssl_ctx, "server_hostname": self.host}

	# -------------------------
	# Connection lifecycle
	# -------------------------
	async def connect(self, host: str, port: int = 21) -> str:
		"""Open the control connection and return the server greeting."""
		self.host = host
		self.port = port
		try:
			self.reader, self.writer = await asyncio.wait_for(
				asyncio.open_connection(host, port, **self._open_kwargs()),
				timeout=self.timeout,
			)
			self._set_tcp_nodelay(self.writer)
			self._connected = True
			greeting = await self._read_response()
		except FTPError:
			self._connected = False
			raise
		except (OSError, asyncio.TimeoutError) as e:
			self._connected = False
			raise FTPConnectionError(f"connect to {host}:{port} failed: {e}") from e
		if not greeting.startswith("2"):
			self._connected = False
			raise FTPConnectionError(f"Unexpected greeting from {host}:{port}: {greeting}")
		logger.debug("Connected to %s:%s", host, port)
		return greeting

	async def login(self, username: str, password: str) -> Tuple[str, str]:
		if not self._connected:
			raise FTPConnectionError("Not connected")
		username = username or "anonymous"
		self.user = username
		try:
			user_resp = await self._send_command(FTPCommand.USER, username)
			pass_resp = user_resp
			if user_resp.startswith("331") or user_resp.startswith("332"):
				pass_resp = await self._send_command(FTPCommand.PASS, password)
		except FTPResponseError as exc:
			raise FTPAuthenticationError(str(exc)) from exc
		if not pass_resp.startswith("230"):
			raise FTPAuthenticationError(pass_resp or "PASS command returned empty response")
		if self.use_tls:
			try:
				await self._send_command(FTPCommand.PBSZ, "0")
				await self._send_command(FTPCommand.PROT, "P")
			except FTPResponseError as exc:
				logger.warning("PBSZ/PROT negotiation failed: %s", exc)
		logger.debug("Authenticated as %s", username)
		return user_resp, pass_resp

	def is_connected(self) -> bool:
		return self._connected and self.writer is not None and not self.writer.is_closing()

	# -------------------------
	# Low-level command send/read
	# -------------------------
	async def _send_command(self, cmd: FTPCommand, arg: str = "") -> str:
		if not self.is_connected():
			raise FTPConnectionError("Not connected")

		line = f"{cmd.value} {arg}".strip() + "\r\n"
		if cmd is FTPCommand.PASS:
			logger.debug("SENDING: PASS ****")
		else:
			logger.debug("SENDING: %s", line.strip())
		try:
			self.writer.write(line.encode("utf-8"))
			await self.writer.drain()
		except OSError as exc:
			self._connected = False
			raise FTPConnectionError(f"Failed to send {cmd.value}: {exc}") from exc
		resp = await self._read_response()
		logger.debug("RESPONSE: %s", resp)

		code = resp[:3]
		if code == "421":
			self._connected = False
			raise FTPConnectionError(f"Server closed connection: {resp}")
		if code == "530":
			raise FTPAuthenticationError(resp)
		if code.startswith(("4", "5")):
			raise FTPResponseError(code, resp)

		return resp

	async def _read_line(self) -> str:
		if not self.reader:
			raise FTPConnectionError("No control reader")
		try:
			line = await asyncio.wait_for(self.reader.readline(), timeout=self.timeout)
		except asyncio.TimeoutError as exc:
			self._connected = False
			logger.debug("Timeout reading response after %s s", self.timeout)
			raise FTPConnectionError("Timeout reading response from server") from exc
		except OSError as exc:
			self._connected = False
			raise FTPConnectionError(f"Control connection failed: {exc}") from exc
		except ValueError as exc:
			self._connected = False
			raise FTPConnectionError(f"Reply line too long: {exc}") from exc
		if not line:
			self._connected = False
			raise FTPConnectionError("Connection closed by server")
		return line.decode("utf-8", errors="replace").rstrip("\r\n")

	async def _read_response(self) -> str:
		"""Read one reply, folding multi-line replies (``123-...`` up to ``123 ...``)."""
		first = await self._read_line()
		match = _REPLY_RE.match(first)
		if not match:
			raise FTPConnectionError(f"Malformed reply from server: {first!r}")
		code, sep = match.groups()
		if sep == " ":
			return first
		lines = [first]
		while True:
			line = await self._read_line()
			lines.append(line)
			if line.startswith(f"{code} "):
				break
		logger.debug("_read_response (multi-line): %s", lines)
		return lines[-1]

	# -------------------------
	# PASV & data helpers
	# -------------------------
	async def _enter_pasv(self) -> Tuple[str, int]:
		try:
			resp = await self._send_command(FTPCommand.PASV)
		except FTPResponseError as exc:
			logger.debug("PASV refused (%s), trying EPSV", exc)
			return await self._enter_epsv()
		m = re.search(r"(\d+),(\d+),(\d+),(\d+),(\d+),(\d+)", resp)
		if not m:
			logger.warning("Invalid PASV response: %s", resp)
			return await self._enter_epsv()
		ip = ".".join(m.groups()[:4])
		port = int(m.group(5)) * 256 + int(m.group(6))
		if ip.startswith("0."):
			ip = self.host
		return ip, port

	async def _enter_epsv(self) -> Tuple[str, int]:
		resp = await self._send_command(FTPCommand.EPSV)
		m = re.search(r"\(\|\|\|(\d+)\|\)", resp)
		if not m:
			raise FTPConnectionError(f"Invalid EPSV response: {resp}")
		return self.host, int(m.group(1))

	async def _open_data_connection(self, ip: str, port: int):
		try:
			self.data_reader, self.data_writer = await asyncio.wait_for(
				asyncio.open_connection(ip, port, **self._open_kwargs()),
				timeout=self.timeout,
			)
			self._set_tcp_nodelay(self.data_writer)
		except (OSError, asyncio.TimeoutError) as e:
			raise FTPConnectionError(f"Failed to open data connection: {e}") from e

	async def _close_data_connection(self):
		try:
			if self.data_writer:
				self.data_writer.close()
				try:
					await asyncio.wait_for(self.data_writer.wait_closed(), timeout=2.0)
				except (asyncio.TimeoutError, OSError):
					transport = getattr(self.data_writer, "transport", None)
					if transport:
						transport.abort()
		finally:
			self.data_reader = None
			self.data_writer = None

	async def _read_data_chunk(self, size: int) -> bytes:
		try:
			return await asyncio.wait_for(self.data_reader.read(size), timeout=self.timeout)
		except asyncio.TimeoutError as exc:
			self._connected = False
			raise FTPConnectionError("Timeout reading data chunk") from exc
		except OSError as exc:
			self._connected = False
			raise FTPConnectionError(f"Data connection failed: {exc}") from exc
		except ValueError as exc:
			self._connected = False
			raise FTPConnectionError(f"Data connection failed: {exc}") from exc

	async def _expect_transfer_start(self, cmd: FTPCommand, arg: str) -> str:
		resp = await self._send_command(cmd, arg)
		if not resp.startswith("1"):
			raise FTPResponseError(resp[:3] or "150", resp or f"{cmd.value} returned empty response")
		return resp

	async def _expect_transfer_end(self, cmd: FTPCommand) -> str:
		final = await self._read_response()
		if not final.startswith("2"):
			code = final[:3]
			if code == "421":
				self._connected = False
				raise FTPConnectionError(f"Server closed connection: {final}")
			raise FTPResponseError(code or "226", final or f"{cmd.value} final response empty")
		return final

	# -------------------------
	# LIST
	# -------------------------
	async def list(self, path: Optional[str] = None) -> List[str]:
		"""Return the raw ``LIST`` lines for ``path``; ``None`` lists the current directory."""
		await self._send_command(FTPCommand.TYPE, "A")
		ip, port = await self._enter_pasv()
		await self._open_data_connection(ip, port)
		try:
			await self._expect_transfer_start(FTPCommand.LIST, path or "")
			parts: List[bytes] = []
			while True:
				chunk = await self._read_data_chunk(self.chunk_size)
				if not chunk:
					break
				parts.append(chunk)
		finally:
			await self._close_data_connection()
		await self._expect_transfer_end(FTPCommand.LIST)

		raw = b"".join(parts)
		return [line for line in raw.decode("utf-8", errors="replace").splitlines() if line.strip()]

	# -------------------------
	# RETR
	# -------------------------
	async def retr(self, remote_path: str) -> bytes:
		"""Retrieve the whole file into memory."""
		parts: List[bytes] = []
		async for chunk in self.stream_retr(remote_path):
			parts.append(chunk)
		return b"".join(parts)

	async def stream_retr(self, remote_path: str, chunk_size: Optional[int] = None) -> AsyncIterator[bytes]:
		"""Yield the file in chunks; the final reply is checked after the last chunk."""
		if chunk_size is None:
			chunk_size = self.chunk_size

		await self._send_command(FTPCommand.TYPE, "I")
		ip, port = await self._enter_pasv()
		await self._open_data_connection(ip, port)
		try:
			await self._expect_transfer_start(FTPCommand.RETR, remote_path)
			while True:
				chunk = await self._read_data_chunk(chunk_size)
				if not chunk:
					break
				yield chunk
		finally:
			await self._close_data_connection()
		await self._expect_transfer_end(FTPCommand.RETR)

	# -------------------------
	# Control close
	# -------------------------
	async def close(self):
		logger.debug("FTP client closing...")

		await self._close_data_connection()

		if self._connected and self.writer and not self.writer.is_closing():
			try:
				self.writer.write(b"QUIT\r\n")
				await asyncio.wait_for(self.writer.drain(), timeout=0.3)
			except (OSError, asyncio.TimeoutError):
				logger.debug("QUIT could not be sent", exc_info=True)

		if self.writer:
			try:
				self.writer.close()
				await asyncio.wait_for(self.writer.wait_closed(), timeout=0.5)
			except (asyncio.TimeoutError, OSError):
				transport = getattr(self.writer, "transport", None)
				if transport:
					transport.abort()

		self.reader = None
		self.writer = None
		self._connected = False

		logger.debug("FTP client closed")


__all__ = [
	"FtpClient",
	"FTPError",
	"FTPAuthenticationError",
	"FTPConnectionError",
	"FTPResponseError",
]
