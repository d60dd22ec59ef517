"""
Thin GraphQL client for the Mina archive node API.

Every public method issues exactly one POST to the configured endpoint and maps
failures to ``TransportError`` or ``ProtocolError`` so the tool layer can name
the failing operation.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from mina_archive_mcp.archive_api.errors import ArchiveApiError, ProtocolError, TransportError
from mina_archive_mcp.archive_api.models import (
    ActionFilterOptions,
    ActionOutput,
    EventFilterOptions,
    EventOutput,
    NetworkStateOutput,
)
from mina_archive_mcp.archive_api.queries import (
    build_actions_query,
    build_events_query,
    build_network_state_query,
)
from mina_archive_mcp.config import ArchiveConfig, get_default_config

logger = logging.getLogger(__name__)

__all__ = [
    "ArchiveApiError",
    "ArchiveGraphQLClient",
    "ProtocolError",
    "TransportError",
    "get_default_client",
    "set_default_client",
]


def _format_graphql_errors(errors: List[Any]) -> str:
    messages = []
    for error in errors:
        if isinstance(error, dict) and isinstance(error.get("message"), str):
            messages.append(error["message"])
        else:
            messages.append(str(error))
    return "; ".join(messages) or "Unknown GraphQL error"


class ArchiveGraphQLClient:
    """Async client for the archive node's ``networkState``, ``events`` and ``actions`` queries."""

    def __init__(
        self,
        config: ArchiveConfig | None = None,
        *,
        async_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.config = config or get_default_config()
        self._client: Optional[httpx.AsyncClient] = async_client
        self._owns_client = async_client is None

    @property
    def endpoint(self) -> str:
        return self.config.endpoint

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.config.timeout)
            self._owns_client = True
        return self._client

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    def _process_response(self, response: httpx.Response) -> Dict[str, Any]:
        try:
            body = response.json()
        except ValueError:
            body = None

        # GraphQL servers report query errors in the body, often with a 4xx status.
        if isinstance(body, dict) and body.get("errors"):
            errors = body["errors"]
            detail = _format_graphql_errors(errors if isinstance(errors, list) else [errors])
            raise ProtocolError(f"GraphQL error: {detail}", status_code=response.status_code)

        if not 200 <= response.status_code < 300:
            raise TransportError(
                f"Archive node returned HTTP {response.status_code}.",
                status_code=response.status_code,
            )

        if not isinstance(body, dict):
            raise ProtocolError("Unexpected response from archive node.", status_code=response.status_code)

        data = body.get("data")
        if not isinstance(data, dict):
            raise ProtocolError("Response is missing the data object.", status_code=response.status_code)
        return data

    async def _request(self, query: str) -> Dict[str, Any]:
        client = await self._get_client()
        try:
            response = await client.post(
                self.endpoint,
                json={"query": query},
                headers={"Content-Type": "application/json", "Accept": "application/json"},
            )
        except httpx.RequestError as exc:
            logger.warning("Archive node unreachable at %s", self.endpoint)
            raise TransportError(f"Archive node unreachable: {exc}") from exc
        return self._process_response(response)

    async def query_network_state(self) -> NetworkStateOutput:
        """Return the canonical and pending max block heights."""
        data = await self._request(build_network_state_query())
        return NetworkStateOutput.from_dict(data.get("networkState"))

    async def query_events(self, filter_options: EventFilterOptions) -> List[EventOutput]:
        """Return events matching ``filter_options`` in server order."""
        data = await self._request(build_events_query(filter_options))
        events = data.get("events")
        if not isinstance(events, list):
            raise ProtocolError("Expected a list for events.")
        return [EventOutput.from_dict(item) for item in events]

    async def query_actions(self, filter_options: ActionFilterOptions) -> List[ActionOutput]:
        """Return actions matching ``filter_options`` in server order."""
        data = await self._request(build_actions_query(filter_options))
        actions = data.get("actions")
        if not isinstance(actions, list):
            raise ProtocolError("Expected a list for actions.")
        return [ActionOutput.from_dict(item) for item in actions]


_default_client: Optional[ArchiveGraphQLClient] = None


def get_default_client() -> ArchiveGraphQLClient:
    global _default_client
    if _default_client is None:
        _default_client = ArchiveGraphQLClient()
    return _default_client


def set_default_client(client: ArchiveGraphQLClient) -> Optional[ArchiveGraphQLClient]:
    """Replace the process-wide client; returns the previous one so callers can close it."""
    global _default_client
    previous = _default_client
    _default_client = client
    return previous
