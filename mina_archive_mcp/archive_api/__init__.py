"""GraphQL client wrappers for the Mina archive node API."""

from .client import ArchiveGraphQLClient, get_default_client, set_default_client
from .errors import ArchiveApiError, ProtocolError, TransportError
from .models import (
    ActionData,
    ActionFilterOptions,
    ActionOutput,
    ActionStates,
    BlockInfo,
    BlockStatusFilter,
    EventData,
    EventFilterOptions,
    EventOutput,
    NetworkStateOutput,
    TransactionInfo,
)

__all__ = [
    "ArchiveGraphQLClient",
    "ArchiveApiError",
    "TransportError",
    "ProtocolError",
    "get_default_client",
    "set_default_client",
    "BlockStatusFilter",
    "EventFilterOptions",
    "ActionFilterOptions",
    "BlockInfo",
    "TransactionInfo",
    "EventData",
    "ActionData",
    "ActionStates",
    "EventOutput",
    "ActionOutput",
    "NetworkStateOutput",
]
