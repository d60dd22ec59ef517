"""Event query tool."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from mina_archive_mcp.archive_api import (
    ArchiveApiError,
    EventFilterOptions,
    get_default_client,
)
from mina_archive_mcp.tools.errors import ToolExecutionError
from mina_archive_mcp.tools.validators import (
    validate_address,
    validate_block_height,
    validate_optional_string,
    validate_status,
)

logger = logging.getLogger(__name__)

OPERATION = "query events"


def build_event_filter(
    address: Any,
    *,
    token_id: Any = None,
    status: Any = None,
    to: Any = None,
    from_height: Any = None,
) -> EventFilterOptions:
    """Validate raw tool arguments into an ``EventFilterOptions``; raises ValidationError."""
    return EventFilterOptions(
        address=validate_address(address),
        token_id=validate_optional_string(token_id, "tokenId"),
        status=validate_status(status),
        to=validate_block_height(to, "to"),
        from_=validate_block_height(from_height, "from"),
    )


async def query_events(
    address: Any,
    *,
    token_id: Optional[str] = None,
    status: Optional[str] = None,
    to: Optional[int] = None,
    from_height: Optional[int] = None,
    client=None,
) -> Dict[str, Any]:
    """
    Query events emitted for an account, with optional filters.

    Input is validated before the client is touched. The full result is
    returned as ``{"events": [...]}`` with events in server order.
    """
    filter_options = build_event_filter(
        address, token_id=token_id, status=status, to=to, from_height=from_height
    )
    client = client or get_default_client()
    try:
        events = await client.query_events(filter_options)
    except ArchiveApiError as exc:
        logger.warning("%s failed: %s", OPERATION, exc)
        raise ToolExecutionError(OPERATION, exc) from exc
    except Exception as exc:
        logger.exception("Unexpected error during %s for %s", OPERATION, address)
        raise ToolExecutionError(OPERATION, exc) from exc
    return {"events": [event.to_dict() for event in events]}
