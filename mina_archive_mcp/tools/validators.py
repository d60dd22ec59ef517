"""Shared validation helpers for Mina archive MCP tools."""

from __future__ import annotations

import re
from typing import Any, Optional

from mina_archive_mcp.archive_api.models import BlockStatusFilter

# Mina public keys are Base58 (no 0, O, I or l), 55-60 characters.
ADDRESS_REGEX = re.compile(r"^[1-9A-HJ-NP-Za-km-z]{55,60}$")
ADDRESS_MIN_LENGTH = 55
ADDRESS_MAX_LENGTH = 60
BLOCK_STATUS_VALUES = [status.value for status in BlockStatusFilter]


class ValidationError(ValueError):
    """Raised when tool input is rejected before any network call."""

    def __init__(self, message: str, *, field: Optional[str] = None) -> None:
        super().__init__(message)
        self.field = field


def is_valid_mina_address(address: Optional[str]) -> bool:
    """Basic format validation for Mina addresses."""
    if not address or not isinstance(address, str):
        return False
    return bool(ADDRESS_REGEX.fullmatch(address))


def validate_address(address: Any) -> str:
    if not is_valid_mina_address(address):
        raise ValidationError("Invalid Mina address format", field="address")
    return address


def validate_status(value: Any) -> Optional[BlockStatusFilter]:
    if value is None:
        return None
    if isinstance(value, BlockStatusFilter):
        return value
    if isinstance(value, str) and value in BLOCK_STATUS_VALUES:
        return BlockStatusFilter(value)
    raise ValidationError(
        f"Invalid status {value!r}; expected one of {', '.join(BLOCK_STATUS_VALUES)}",
        field="status",
    )


def validate_block_height(value: Any, field: str) -> Optional[int]:
    """Accept non-negative integers (integral floats too); booleans are rejected."""
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValidationError(f"Invalid {field}: expected integer block height", field=field)
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if not isinstance(value, int) or value < 0:
        raise ValidationError(f"Invalid {field}: expected integer block height", field=field)
    return value


def validate_optional_string(value: Any, field: str) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"Invalid {field}: expected string", field=field)
    return value
