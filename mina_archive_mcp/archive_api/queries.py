"""
GraphQL query construction for the archive node API.

Filters are rendered as GraphQL input-object literals. Absent values are
skipped entirely, strings become escaped string literals, and integers, booleans
and enum members are emitted bare.
"""

from __future__ import annotations

import re
from enum import Enum
from string import Template
from typing import Any, Iterable, Tuple

from mina_archive_mcp.archive_api.models import ActionFilterOptions, EventFilterOptions

GRAPHQL_NAME_REGEX = re.compile(r"^[_A-Za-z][_0-9A-Za-z]*$")

_STRING_ESCAPES = {
    '"': '\\"',
    "\\": "\\\\",
    "\b": "\\b",
    "\f": "\\f",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}

NETWORK_STATE_QUERY = """query {
  networkState {
    maxBlockHeight {
      canonicalMaxBlockHeight
      pendingMaxBlockHeight
    }
  }
}"""

EVENTS_QUERY = Template(
    """query {
  events(input: {$input}) {
    blockInfo {
      height
      stateHash
      parentHash
      ledgerHash
      chainStatus
      timestamp
      globalSlotSinceHardfork
      globalSlotSinceGenesis
      distanceFromMaxBlockHeight
    }
    eventData {
      accountUpdateId
      data
      transactionInfo {
        status
        hash
        memo
        authorizationKind
        sequenceNumber
        zkappAccountUpdateIds
      }
    }
  }
}"""
)

ACTIONS_QUERY = Template(
    """query {
  actions(input: {$input}) {
    blockInfo {
      height
      stateHash
      parentHash
      ledgerHash
      chainStatus
      timestamp
      globalSlotSinceHardfork
      globalSlotSinceGenesis
      distanceFromMaxBlockHeight
    }
    transactionInfo {
      status
      hash
      memo
      authorizationKind
      sequenceNumber
      zkappAccountUpdateIds
    }
    actionData {
      accountUpdateId
      data
    }
    actionState {
      actionStateOne
      actionStateTwo
      actionStateThree
      actionStateFour
      actionStateFive
    }
  }
}"""
)


def _escape_string(value: str) -> str:
    escaped = []
    for char in value:
        if char in _STRING_ESCAPES:
            escaped.append(_STRING_ESCAPES[char])
        elif ord(char) < 0x20:
            escaped.append(f"\\u{ord(char):04x}")
        else:
            escaped.append(char)
    return '"' + "".join(escaped) + '"'


def format_literal(value: Any) -> str:
    """Render a Python value as a GraphQL literal."""
    # Enum first: BlockStatusFilter members are also str instances.
    if isinstance(value, Enum):
        name = str(value.value)
        if not GRAPHQL_NAME_REGEX.fullmatch(name):
            raise ValueError(f"Invalid GraphQL enum value: {name!r}")
        return name
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, str):
        return _escape_string(value)
    raise TypeError(f"Unsupported GraphQL literal type: {type(value).__name__}")


def serialize_input(pairs: Iterable[Tuple[str, Any]]) -> str:
    """Join present ``key: literal`` pairs with ``, `` in the order supplied."""
    return ", ".join(f"{key}: {format_literal(value)}" for key, value in pairs if value is not None)


def build_network_state_query() -> str:
    return NETWORK_STATE_QUERY


def build_events_query(filter_options: EventFilterOptions) -> str:
    return EVENTS_QUERY.substitute(input=serialize_input(filter_options.to_input()))


def build_actions_query(filter_options: ActionFilterOptions) -> str:
    return ACTIONS_QUERY.substitute(input=serialize_input(filter_options.to_input()))
