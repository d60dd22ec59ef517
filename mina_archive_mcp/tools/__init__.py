"""LLM-facing tool implementations."""

from .actions import query_actions
from .errors import ToolExecutionError
from .events import query_events
from .network import get_network_state
from .validators import ValidationError
from . import validators

__all__ = [
    "query_actions",
    "query_events",
    "get_network_state",
    "ToolExecutionError",
    "ValidationError",
    "validators",
]
