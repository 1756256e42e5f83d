"""
Input Validation - sanitization of values crossing the contract boundary.

Every helper returns (is_valid, error_message) so callers can decide which
typed error to raise.
"""

from typing import Any, Optional, Tuple

from auctionledger.crypto import SALT_SIZE, is_valid_address

# =============================================================================
# Constants
# =============================================================================

# Amounts are signed 128-bit on the ledger, timestamps unsigned 64-bit
MIN_AMOUNT = 0
MAX_AMOUNT = 2**127 - 1
MAX_TIMESTAMP = 2**64 - 1

HASH_SIZE = 32
MAX_ASSET_ID_LENGTH = 64


# =============================================================================
# Validation Functions
# =============================================================================


def validate_bytes(
    data: Any,
    name: str,
    expected_length: Optional[int] = None,
) -> Tuple[bool, str]:
    """Validate a bytes input, optionally of an exact length."""
    if not isinstance(data, (bytes, bytearray)):
        return False, f"{name} must be bytes, got {type(data).__name__}"

    if expected_length is not None and len(data) != expected_length:
        return False, f"{name} must be {expected_length} bytes, got {len(data)}"

    return True, ""


def validate_hash(hash_value: Any, name: str = "hash") -> Tuple[bool, str]:
    return validate_bytes(hash_value, name, expected_length=HASH_SIZE)


def validate_salt(salt: Any) -> Tuple[bool, str]:
    return validate_bytes(salt, "salt", expected_length=SALT_SIZE)


def validate_address(address: Any, name: str = "address") -> Tuple[bool, str]:
    """Validate a principal address (0x + 40 hex chars)."""
    if not is_valid_address(address):
        return False, f"{name} is not a valid address: {address!r}"
    return True, ""


def validate_integer(
    value: Any,
    name: str,
    min_value: Optional[int] = None,
    max_value: Optional[int] = None,
) -> Tuple[bool, str]:
    """
    Validate an integer input.

    Booleans are rejected even though they subclass int.
    """
    if not isinstance(value, int) or isinstance(value, bool):
        return False, f"{name} must be int, got {type(value).__name__}"

    if min_value is not None and value < min_value:
        return False, f"{name} must be >= {min_value}, got {value}"

    if max_value is not None and value > max_value:
        return False, f"{name} must be <= {max_value}, got {value}"

    return True, ""


def validate_amount(value: Any, name: str = "amount") -> Tuple[bool, str]:
    return validate_integer(value, name, MIN_AMOUNT, MAX_AMOUNT)


def validate_duration(value: Any, name: str = "duration") -> Tuple[bool, str]:
    return validate_integer(value, name, 0, MAX_TIMESTAMP)


def validate_asset_id(value: Any, name: str = "asset") -> Tuple[bool, str]:
    if not isinstance(value, str) or not value:
        return False, f"{name} must be a non-empty string"
    if len(value) > MAX_ASSET_ID_LENGTH:
        return False, f"{name} exceeds max length {MAX_ASSET_ID_LENGTH}"
    return True, ""


def validate_all(*results: Tuple[bool, str]) -> Tuple[bool, str]:
    """Return the first failure among several validation results."""
    for ok, message in results:
        if not ok:
            return False, message
    return True, ""
