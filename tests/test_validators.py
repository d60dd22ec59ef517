import pytest

from mina_archive_mcp.archive_api import BlockStatusFilter
from mina_archive_mcp.tools import validators
from mina_archive_mcp.tools.validators import ValidationError

from conftest import VALID_ADDRESS


def test_address_validation():
    assert validators.is_valid_mina_address(VALID_ADDRESS)
    assert not validators.is_valid_mina_address("not-an-address")
    assert not validators.is_valid_mina_address(None)
    # Ambiguous characters are outside the Base58 alphabet.
    assert not validators.is_valid_mina_address(VALID_ADDRESS[:-1] + "0")
    assert not validators.is_valid_mina_address(VALID_ADDRESS[:-1] + "l")
    # Length bounds are 55-60.
    assert not validators.is_valid_mina_address(VALID_ADDRESS[:54])
    assert validators.is_valid_mina_address(VALID_ADDRESS + "abcde")
    assert not validators.is_valid_mina_address(VALID_ADDRESS + "abcdef")


def test_validate_address_message():
    with pytest.raises(ValidationError) as excinfo:
        validators.validate_address("not-an-address")
    assert "Invalid Mina address format" in str(excinfo.value)
    assert excinfo.value.field == "address"


def test_validate_status():
    assert validators.validate_status(None) is None
    assert validators.validate_status("PENDING") is BlockStatusFilter.PENDING
    assert validators.validate_status(BlockStatusFilter.ALL) is BlockStatusFilter.ALL
    with pytest.raises(ValidationError):
        validators.validate_status("pending")
    with pytest.raises(ValidationError):
        validators.validate_status("ORPHANED")


def test_validate_block_height():
    assert validators.validate_block_height(None, "to") is None
    assert validators.validate_block_height(10, "to") == 10
    assert validators.validate_block_height(10.0, "to") == 10
    for bad in (True, -1, 1.5, "10"):
        with pytest.raises(ValidationError):
            validators.validate_block_height(bad, "from")


def test_validate_optional_string():
    assert validators.validate_optional_string(None, "tokenId") is None
    assert validators.validate_optional_string("wSHV2S4", "tokenId") == "wSHV2S4"
    with pytest.raises(ValidationError):
        validators.validate_optional_string(12, "tokenId")
