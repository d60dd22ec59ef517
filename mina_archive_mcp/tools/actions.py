"""Action query tool."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from mina_archive_mcp.archive_api import (
    ActionFilterOptions,
    ArchiveApiError,
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

OPERATION = "query actions"


def build_action_filter(
    address: Any,
    *,
    token_id: Any = None,
    status: Any = None,
    to: Any = None,
    from_height: Any = None,
    from_action_state: Any = None,
    end_action_state: Any = None,
) -> ActionFilterOptions:
    return ActionFilterOptions(
        address=validate_address(address),
        token_id=validate_optional_string(token_id, "tokenId"),
        status=validate_status(status),
        to=validate_block_height(to, "to"),
        from_=validate_block_height(from_height, "from"),
        from_action_state=validate_optional_string(from_action_state, "fromActionState"),
        end_action_state=validate_optional_string(end_action_state, "endActionState"),
    )


async def query_actions(
    address: Any,
    *,
    token_id: Optional[str] = None,
    status: Optional[str] = None,
    to: Optional[int] = None,
    from_height: Optional[int] = None,
    from_action_state: Optional[str] = None,
    end_action_state: Optional[str] = None,
    client=None,
) -> Dict[str, Any]:
    """Query actions dispatched to an account; returns ``{"actions": [...]}``."""
    filter_options = build_action_filter(
        address,
        token_id=token_id,
        status=status,
        to=to,
        from_height=from_height,
        from_action_state=from_action_state,
        end_action_state=end_action_state,
    )
    client = client or get_default_client()
    try:
        actions = await client.query_actions(filter_options)
    except ArchiveApiError as exc:
        logger.warning("%s failed: %s", OPERATION, exc)
        raise ToolExecutionError(OPERATION, exc) from exc
    except Exception as exc:
        logger.exception("Unexpected error during %s for %s", OPERATION, address)
        raise ToolExecutionError(OPERATION, exc) from exc
    return {"actions": [action.to_dict() for action in actions]}
