"""
Typed filter and result records for the archive node GraphQL API.

Filters know their GraphQL input field names; results are built from a single
response payload with ``from_dict`` and rendered back to the camelCase wire
shape with ``to_dict``. All records are immutable.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple

from mina_archive_mcp.archive_api.errors import ProtocolError


class BlockStatusFilter(str, Enum):
    """Consensus status used to filter blocks."""

    ALL = "ALL"
    PENDING = "PENDING"
    CANONICAL = "CANONICAL"


def _input_field(name: str) -> Any:
    return field(default=None, metadata={"graphql": name})


@dataclass(frozen=True, slots=True)
class _FilterOptions:
    address: str = field(metadata={"graphql": "address"})
    token_id: Optional[str] = _input_field("tokenId")
    status: Optional[BlockStatusFilter] = _input_field("status")
    to: Optional[int] = _input_field("to")
    from_: Optional[int] = _input_field("from")

    def __post_init__(self) -> None:
        if self.status is not None and not isinstance(self.status, BlockStatusFilter):
            object.__setattr__(self, "status", BlockStatusFilter(self.status))

    def to_input(self) -> List[Tuple[str, Any]]:
        """Return (GraphQL field, value) pairs in declaration order, absent values included."""
        return [(f.metadata["graphql"], getattr(self, f.name)) for f in fields(self)]


@dataclass(frozen=True, slots=True)
class EventFilterOptions(_FilterOptions):
    """Filter for the ``events`` root query."""


@dataclass(frozen=True, slots=True)
class ActionFilterOptions(_FilterOptions):
    """Filter for the ``actions`` root query, with an optional action-state window."""

    from_action_state: Optional[str] = _input_field("fromActionState")
    end_action_state: Optional[str] = _input_field("endActionState")


# Response parsing helpers


def _mapping(payload: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(payload, Mapping):
        raise ProtocolError(f"Expected object for {what}, got {type(payload).__name__}.")
    return payload


def _int(payload: Mapping[str, Any], key: str) -> int:
    value = payload.get(key)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ProtocolError(f"Expected integer for {key}, got {value!r}.")
    return value


def _str(payload: Mapping[str, Any], key: str) -> str:
    value = payload.get(key)
    if not isinstance(value, str):
        raise ProtocolError(f"Expected string for {key}, got {value!r}.")
    return value


def _optional_str(payload: Mapping[str, Any], key: str) -> Optional[str]:
    value = payload.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ProtocolError(f"Expected string or null for {key}, got {value!r}.")
    return value


def _list(payload: Mapping[str, Any], key: str) -> List[Any]:
    value = payload.get(key)
    if not isinstance(value, list):
        raise ProtocolError(f"Expected list for {key}, got {value!r}.")
    return value


def _str_tuple(payload: Mapping[str, Any], key: str) -> Tuple[str, ...]:
    items = _list(payload, key)
    if not all(isinstance(item, str) for item in items):
        raise ProtocolError(f"Expected list of strings for {key}.")
    return tuple(items)


def _int_tuple(payload: Mapping[str, Any], key: str) -> Tuple[int, ...]:
    items = _list(payload, key)
    if any(isinstance(item, bool) or not isinstance(item, int) for item in items):
        raise ProtocolError(f"Expected list of integers for {key}.")
    return tuple(items)


@dataclass(frozen=True, slots=True)
class BlockInfo:
    height: int
    state_hash: str
    parent_hash: str
    ledger_hash: str
    chain_status: str
    timestamp: str
    global_slot_since_hardfork: int
    global_slot_since_genesis: int
    distance_from_max_block_height: int

    @classmethod
    def from_dict(cls, payload: Any) -> "BlockInfo":
        data = _mapping(payload, "blockInfo")
        return cls(
            height=_int(data, "height"),
            state_hash=_str(data, "stateHash"),
            parent_hash=_str(data, "parentHash"),
            ledger_hash=_str(data, "ledgerHash"),
            chain_status=_str(data, "chainStatus"),
            timestamp=_str(data, "timestamp"),
            global_slot_since_hardfork=_int(data, "globalSlotSinceHardfork"),
            global_slot_since_genesis=_int(data, "globalSlotSinceGenesis"),
            distance_from_max_block_height=_int(data, "distanceFromMaxBlockHeight"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "height": self.height,
            "stateHash": self.state_hash,
            "parentHash": self.parent_hash,
            "ledgerHash": self.ledger_hash,
            "chainStatus": self.chain_status,
            "timestamp": self.timestamp,
            "globalSlotSinceHardfork": self.global_slot_since_hardfork,
            "globalSlotSinceGenesis": self.global_slot_since_genesis,
            "distanceFromMaxBlockHeight": self.distance_from_max_block_height,
        }


@dataclass(frozen=True, slots=True)
class TransactionInfo:
    status: str
    hash: str
    memo: str
    authorization_kind: str
    sequence_number: int
    zkapp_account_update_ids: Tuple[int, ...]

    @classmethod
    def from_dict(cls, payload: Any) -> "TransactionInfo":
        data = _mapping(payload, "transactionInfo")
        return cls(
            status=_str(data, "status"),
            hash=_str(data, "hash"),
            memo=_str(data, "memo"),
            authorization_kind=_str(data, "authorizationKind"),
            sequence_number=_int(data, "sequenceNumber"),
            zkapp_account_update_ids=_int_tuple(data, "zkappAccountUpdateIds"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status,
            "hash": self.hash,
            "memo": self.memo,
            "authorizationKind": self.authorization_kind,
            "sequenceNumber": self.sequence_number,
            "zkappAccountUpdateIds": list(self.zkapp_account_update_ids),
        }


@dataclass(frozen=True, slots=True)
class _AccountUpdateData:
    account_update_id: str
    data: Tuple[str, ...]
    transaction_info: Optional[TransactionInfo] = None

    @classmethod
    def from_dict(cls, payload: Any):
        data = _mapping(payload, cls.__name__)
        raw_tx = data.get("transactionInfo")
        return cls(
            account_update_id=_str(data, "accountUpdateId"),
            data=_str_tuple(data, "data"),
            transaction_info=TransactionInfo.from_dict(raw_tx) if raw_tx is not None else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        rendered: Dict[str, Any] = {
            "accountUpdateId": self.account_update_id,
            "data": list(self.data),
        }
        if self.transaction_info is not None:
            rendered["transactionInfo"] = self.transaction_info.to_dict()
        return rendered


@dataclass(frozen=True, slots=True)
class EventData(_AccountUpdateData):
    """One emitted event; ``data`` holds field elements in emission order."""


@dataclass(frozen=True, slots=True)
class ActionData(_AccountUpdateData):
    """One dispatched action; ``data`` holds field elements in dispatch order."""


@dataclass(frozen=True, slots=True)
class ActionStates:
    action_state_one: Optional[str] = None
    action_state_two: Optional[str] = None
    action_state_three: Optional[str] = None
    action_state_four: Optional[str] = None
    action_state_five: Optional[str] = None

    @classmethod
    def from_dict(cls, payload: Any) -> "ActionStates":
        if payload is None:
            return cls()
        data = _mapping(payload, "actionState")
        return cls(
            action_state_one=_optional_str(data, "actionStateOne"),
            action_state_two=_optional_str(data, "actionStateTwo"),
            action_state_three=_optional_str(data, "actionStateThree"),
            action_state_four=_optional_str(data, "actionStateFour"),
            action_state_five=_optional_str(data, "actionStateFive"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "actionStateOne": self.action_state_one,
            "actionStateTwo": self.action_state_two,
            "actionStateThree": self.action_state_three,
            "actionStateFour": self.action_state_four,
            "actionStateFive": self.action_state_five,
        }


@dataclass(frozen=True, slots=True)
class EventOutput:
    block_info: BlockInfo
    event_data: Tuple[EventData, ...]

    @classmethod
    def from_dict(cls, payload: Any) -> "EventOutput":
        data = _mapping(payload, "events[]")
        return cls(
            block_info=BlockInfo.from_dict(data.get("blockInfo")),
            event_data=tuple(EventData.from_dict(item) for item in _list(data, "eventData")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "blockInfo": self.block_info.to_dict(),
            "eventData": [item.to_dict() for item in self.event_data],
        }


@dataclass(frozen=True, slots=True)
class ActionOutput:
    block_info: BlockInfo
    transaction_info: TransactionInfo
    action_data: Tuple[ActionData, ...]
    action_state: ActionStates

    @classmethod
    def from_dict(cls, payload: Any) -> "ActionOutput":
        data = _mapping(payload, "actions[]")
        return cls(
            block_info=BlockInfo.from_dict(data.get("blockInfo")),
            transaction_info=TransactionInfo.from_dict(data.get("transactionInfo")),
            action_data=tuple(ActionData.from_dict(item) for item in _list(data, "actionData")),
            action_state=ActionStates.from_dict(data.get("actionState")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "blockInfo": self.block_info.to_dict(),
            "transactionInfo": self.transaction_info.to_dict(),
            "actionData": [item.to_dict() for item in self.action_data],
            "actionState": self.action_state.to_dict(),
        }


@dataclass(frozen=True, slots=True)
class NetworkStateOutput:
    """Canonical and pending chain tips as reported by the archive node."""

    canonical_max_block_height: int
    pending_max_block_height: int

    @classmethod
    def from_dict(cls, payload: Any) -> "NetworkStateOutput":
        data = _mapping(payload, "networkState")
        heights = _mapping(data.get("maxBlockHeight"), "maxBlockHeight")
        return cls(
            canonical_max_block_height=_int(heights, "canonicalMaxBlockHeight"),
            pending_max_block_height=_int(heights, "pendingMaxBlockHeight"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "maxBlockHeight": {
                "canonicalMaxBlockHeight": self.canonical_max_block_height,
                "pendingMaxBlockHeight": self.pending_max_block_height,
            }
        }
