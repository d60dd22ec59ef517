"""Network state tool."""

from __future__ import annotations

import logging
from typing import Any, Dict

from mina_archive_mcp.archive_api import ArchiveApiError, get_default_client
from mina_archive_mcp.tools.errors import ToolExecutionError

logger = logging.getLogger(__name__)

OPERATION = "get network state"


async def get_network_state(*, client=None) -> Dict[str, Any]:
    """
    Return the archive node's canonical and pending max block heights.

    Args:
        client: Archive GraphQL client (override for testing).

    Returns:
        ``{"networkState": {"maxBlockHeight": {...}}}``.

    Raises:
        ToolExecutionError: the query failed at the transport or protocol level.
    """
    client = client or get_default_client()
    try:
        state = await client.query_network_state()
    except ArchiveApiError as exc:
        logger.warning("%s failed: %s", OPERATION, exc)
        raise ToolExecutionError(OPERATION, exc) from exc
    except Exception as exc:
        logger.exception("Unexpected error during %s", OPERATION)
        raise ToolExecutionError(OPERATION, exc) from exc
    return {"networkState": state.to_dict()}
