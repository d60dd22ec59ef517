"""
Configuration helpers for the Mina archive MCP server.

This module centralizes the server name, archive endpoint selection, default
timeouts, logging and rate-limit settings. Values come from the environment and
can be overridden from the command line through ``load_config``.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Optional
from urllib.parse import urlsplit

DEFAULT_SERVER_NAME = "mcp-mina-archive-node"
DEFAULT_ENDPOINT = "http://archive-node-api.gcp.o1test.net/"
DEFAULT_RATE_LIMIT_QPS = 5.0


def _load_server_name() -> str:
    return os.getenv("MINA_MCP_SERVER_NAME", DEFAULT_SERVER_NAME)


def _load_endpoint() -> str:
    return os.getenv("MINA_ARCHIVE_ENDPOINT", DEFAULT_ENDPOINT)


def _load_timeout() -> float:
    raw_timeout = os.getenv("MINA_MCP_HTTP_TIMEOUT")
    if raw_timeout:
        try:
            return float(raw_timeout)
        except ValueError:
            return 10.0
    return 10.0


def _load_rate_limit() -> float:
    raw_rate = os.getenv("MINA_MCP_RATE_LIMIT_QPS")
    if raw_rate:
        try:
            return float(raw_rate)
        except ValueError:
            return DEFAULT_RATE_LIMIT_QPS
    return DEFAULT_RATE_LIMIT_QPS


DEFAULT_TIMEOUT = _load_timeout()
LOG_LEVEL = os.getenv("MINA_MCP_LOG_LEVEL", "INFO")
LOG_FORMAT = os.getenv("MINA_MCP_LOG_FORMAT", "json")  # json or plain


class ConfigError(ValueError):
    """Raised when the server name or archive endpoint is unusable."""


def validate_endpoint(url: Optional[str]) -> str:
    """Return the endpoint unchanged if it is an absolute http(s) URL."""
    if not url or not isinstance(url, str):
        raise ConfigError("endpoint: Required")
    parts = urlsplit(url.strip())
    if parts.scheme not in {"http", "https"} or not parts.netloc:
        raise ConfigError(f"endpoint: Invalid url {url!r}")
    return url.strip()


@dataclass(slots=True)
class ArchiveConfig:
    """Runtime configuration for archive node access."""

    server_name: str = field(default_factory=_load_server_name)
    endpoint: str = field(default_factory=_load_endpoint)
    timeout: float = DEFAULT_TIMEOUT
    rate_limit_qps: float = field(default_factory=_load_rate_limit)
    log_level: str = LOG_LEVEL
    log_format: str = LOG_FORMAT
    per_tool_rate_limits: dict[str, float] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not isinstance(self.server_name, str) or not self.server_name.strip():
            raise ConfigError("name: Required")
        self.endpoint = validate_endpoint(self.endpoint)


def load_config(*, name: Optional[str] = None, endpoint: Optional[str] = None) -> ArchiveConfig:
    """Build a config from the environment, applying command-line overrides."""
    overrides = {}
    if name is not None:
        overrides["server_name"] = name
    if endpoint is not None:
        overrides["endpoint"] = endpoint
    return ArchiveConfig(**overrides)


_default_config: Optional[ArchiveConfig] = None


def get_default_config() -> ArchiveConfig:
    """Return the process-wide config, built from the environment on first use."""
    global _default_config
    if _default_config is None:
        _default_config = ArchiveConfig()
    return _default_config


def set_default_config(config: ArchiveConfig) -> None:
    global _default_config
    _default_config = config
