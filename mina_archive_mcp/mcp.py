"""
Tool registry and dispatch for the MCP surface.

This keeps a small mapping of wire tool names to the tool implementations,
with the JSON input schemas advertised to clients. Wire arguments use the
archive API's camelCase names and are mapped onto Python keyword arguments.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional

from mina_archive_mcp.tools import get_network_state, query_actions, query_events
from mina_archive_mcp.tools.validators import (
    ADDRESS_MAX_LENGTH,
    ADDRESS_MIN_LENGTH,
    ADDRESS_REGEX,
    BLOCK_STATUS_VALUES,
    ValidationError,
)

ADDRESS_PATTERN = ADDRESS_REGEX.pattern

ToolCallable = Callable[..., Awaitable[Any]]


class UnknownToolError(LookupError):
    """Raised when a caller names a tool that is not registered."""


def _address_schema() -> Dict[str, Any]:
    return {
        "type": "string",
        "description": "Mina address (Base58 public key)",
        "pattern": ADDRESS_PATTERN,
        "minLength": ADDRESS_MIN_LENGTH,
        "maxLength": ADDRESS_MAX_LENGTH,
    }


def _height_schema(description: str) -> Dict[str, Any]:
    return {"type": "integer", "minimum": 0, "description": description}


FILTER_PROPERTIES: Dict[str, Any] = {
    "address": _address_schema(),
    "tokenId": {"type": "string", "description": "Token ID to filter by"},
    "status": {
        "type": "string",
        "enum": BLOCK_STATUS_VALUES,
        "description": "Block status to filter by",
    },
    "to": _height_schema("Upper block height bound"),
    "from": _height_schema("Lower block height bound"),
}

FILTER_ARGUMENTS = {
    "address": "address",
    "tokenId": "token_id",
    "status": "status",
    "to": "to",
    "from": "from_height",
}


@dataclass(slots=True)
class ToolDefinition:
    name: str
    description: str
    input_schema: Dict[str, Any]
    callable: ToolCallable
    # wire argument name -> keyword argument name
    arguments: Dict[str, str] = field(default_factory=dict)

    def bind(self, params: Dict[str, Any]) -> Dict[str, Any]:
        unknown = sorted(set(params) - set(self.arguments))
        if unknown:
            raise ValidationError(f"Unexpected parameters: {', '.join(unknown)}")
        missing = [name for name in self.input_schema.get("required", []) if params.get(name) is None]
        if missing:
            raise ValidationError(f"Missing required parameters: {', '.join(missing)}")
        return {self.arguments[key]: value for key, value in params.items()}


TOOL_REGISTRY: Dict[str, ToolDefinition] = {
    "query-actions": ToolDefinition(
        name="query-actions",
        description="Query actions from the Mina blockchain with optional filters",
        input_schema={
            "type": "object",
            "properties": {
                **FILTER_PROPERTIES,
                "fromActionState": {"type": "string", "description": "Action state to start from"},
                "endActionState": {"type": "string", "description": "Action state to end at"},
            },
            "required": ["address"],
            "additionalProperties": False,
        },
        callable=query_actions,
        arguments={
            **FILTER_ARGUMENTS,
            "fromActionState": "from_action_state",
            "endActionState": "end_action_state",
        },
    ),
    "query-events": ToolDefinition(
        name="query-events",
        description="Query events from the Mina blockchain with optional filters",
        input_schema={
            "type": "object",
            "properties": dict(FILTER_PROPERTIES),
            "required": ["address"],
            "additionalProperties": False,
        },
        callable=query_events,
        arguments=dict(FILTER_ARGUMENTS),
    ),
    "get-network-state": ToolDefinition(
        name="get-network-state",
        description="Get the current state of the Mina network",
        input_schema={
            "type": "object",
            "properties": {},
            "required": [],
            "additionalProperties": False,
        },
        callable=get_network_state,
    ),
}


def list_tools() -> List[Dict[str, Any]]:
    """Return the advertised tool list."""
    return [
        {
            "name": tool.name,
            "description": tool.description,
            "inputSchema": tool.input_schema,
        }
        for tool in TOOL_REGISTRY.values()
    ]


async def call_tool(tool_name: str, params: Optional[Dict[str, Any]] = None) -> Any:
    """
    Dispatch to a tool by name.

    Raises UnknownToolError, ValidationError (bad arguments, no network call made)
    or ToolExecutionError (the archive query failed).
    """
    tool = TOOL_REGISTRY.get(tool_name)
    if tool is None:
        raise UnknownToolError(f"Unknown tool: {tool_name}")
    kwargs = tool.bind(params or {})
    return await tool.callable(**kwargs)
