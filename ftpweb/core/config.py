"""Application configuration management."""
from functools import lru_cache
from typing import Literal
from urllib.parse import urlsplit

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_FTP_PORT = 21
DEFAULT_FTPS_PORT = 990
DEFAULT_HTTP_PORT = 8080


class Settings(BaseSettings):
    """Resolved application settings used by FastAPI dependencies."""

    model_config = SettingsConfigDict(env_prefix="FTP_WEB_", extra="ignore")

    upstream: str = Field(..., description="FTP server address: host, host:port or ftp://host:port")
    username: str = Field("", description="FTP username (anonymous when empty)")
    password: str = Field("", description="FTP password")
    tls: bool = Field(False, description="Use implicit TLS for control and data channels")

    host: str = Field("0.0.0.0", description="Application bind address")
    port: int = Field(DEFAULT_HTTP_PORT, description="Preferred application bind port")
    log_level: str = Field("INFO", description="Root logging level")

    timeout: float = Field(30.0, gt=0, description="Read timeout for FTP control/data channels in seconds")
    queue_size: int = Field(64, ge=1, description="Pending operations accepted by the FTP session worker")
    stream_downloads: bool = Field(False, description="Stream downloads instead of buffering whole files")
    theme: Literal["default", "emoji", "plain"] = Field("default", description="Listing page theme")

    @field_validator("upstream")
    @classmethod
    def _check_upstream(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("upstream address must not be empty")
        parse_upstream(value)
        return value

    def upstream_address(self) -> tuple[str, int]:
        """Return the (host, port) pair of the FTP server."""

        return parse_upstream(self.upstream, tls=self.tls)


def parse_upstream(value: str, *, tls: bool = False) -> tuple[str, int]:
    """Split ``host``, ``host:port`` or ``ftp://host:port`` into host and port."""

    default_port = DEFAULT_FTPS_PORT if tls else DEFAULT_FTP_PORT
    candidate = value.strip()
    if "://" not in candidate:
        candidate = f"ftp://{candidate}"
    parts = urlsplit(candidate)
    if parts.scheme not in {"ftp", "ftps"}:
        raise ValueError(f"Unsupported upstream scheme '{parts.scheme}'")
    if not parts.hostname:
        raise ValueError(f"Missing host in upstream address '{value}'")
    try:
        port = parts.port
    except ValueError as exc:
        raise ValueError(f"Invalid port in upstream address '{value}'") from exc
    if port is None and parts.scheme == "ftps":
        port = DEFAULT_FTPS_PORT
    return parts.hostname, port or default_port


@lru_cache(maxsize=None)
def get_settings() -> Settings:
    """Return settings resolved from the environment (used by the app factory)."""

    return Settings()
