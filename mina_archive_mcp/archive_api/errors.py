"""Exceptions raised by the archive node GraphQL client."""

from __future__ import annotations

from typing import Optional


class ArchiveApiError(Exception):
    """Base exception for archive node API errors."""

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class TransportError(ArchiveApiError):
    """Raised when the endpoint cannot be reached or answers with a non-2xx status."""


class ProtocolError(ArchiveApiError):
    """Raised when a response does not match the expected GraphQL result shape."""
