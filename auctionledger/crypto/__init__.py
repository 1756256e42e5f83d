"""
Cryptographic primitives for the auction ledger.

This module provides:
- Hashing functions (SHA-256, Keccak-256)
- Key generation and address derivation
- Digital signatures (ECDSA on secp256k1)
- Sealed-bid commitments

Design Notes:
-------------
Principals are identified by Ethereum-style addresses derived from a
secp256k1 public key. The host signs and verifies transaction envelopes
with these keys; the auction core never touches a signature and only asks
the host whether a principal authorised the current transaction.

Sealed bids commit to sha256(amount || salt) where amount is encoded as a
16-byte big-endian signed integer and salt is exactly 32 bytes.
"""

import hashlib
import secrets
from dataclasses import dataclass
from typing import Optional

from Crypto.Hash import keccak
from py_ecc.secp256k1 import secp256k1


# secp256k1 curve order
SECP256K1_ORDER = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141

SALT_SIZE = 32
AMOUNT_SIZE = 16


# =============================================================================
# Hashing
# =============================================================================


def sha256(data: bytes) -> bytes:
    """Compute SHA-256 hash."""
    return hashlib.sha256(data).digest()


def keccak256(data: bytes) -> bytes:
    """
    Compute Keccak-256 hash (Ethereum-style).

    Used for address derivation.
    """
    k = keccak.new(digest_bits=256)
    k.update(data)
    return k.digest()


def seal_amount(amount: int, salt: bytes) -> bytes:
    """
    Compute the commitment hiding a bid amount.

    Args:
        amount: Bid amount (fits in a signed 128-bit integer)
        salt: 32-byte blinding factor chosen by the bidder

    Returns:
        32-byte commitment
    """
    if len(salt) != SALT_SIZE:
        raise ValueError(f"Salt must be {SALT_SIZE} bytes")
    return sha256(amount.to_bytes(AMOUNT_SIZE, byteorder="big", signed=True) + salt)


def random_salt() -> bytes:
    """Generate a fresh 32-byte salt for a sealed bid."""
    return secrets.token_bytes(SALT_SIZE)


# =============================================================================
# Keys and Addresses
# =============================================================================


def address_from_public_key(public_key: bytes) -> str:
    """
    Derive address from a 64-byte public key.

    Address = last 20 bytes of keccak256(public_key), hex with 0x prefix.
    """
    return bytes_to_hex(keccak256(public_key)[-20:])


@dataclass(frozen=True)
class KeyPair:
    """
    An ECDSA keypair on secp256k1.

    Attributes:
        private_key: 32-byte secret key
        public_key: 64-byte uncompressed public key (x || y)
    """
    private_key: bytes
    public_key: bytes

    @property
    def address(self) -> str:
        return address_from_public_key(self.public_key)

    def sign(self, message_hash: bytes) -> bytes:
        return sign(message_hash, self.private_key)


def private_key_to_public_key(private_key: bytes) -> bytes:
    """Derive the 64-byte public key for a 32-byte private key."""
    if len(private_key) != 32:
        raise ValueError("Private key must be 32 bytes")

    x, y = secp256k1.privtopub(private_key)
    return x.to_bytes(32, byteorder="big") + y.to_bytes(32, byteorder="big")


def keypair_from_private_key(private_key: bytes) -> KeyPair:
    return KeyPair(private_key=private_key, public_key=private_key_to_public_key(private_key))


def generate_keypair() -> KeyPair:
    """Generate a new random keypair."""
    private_key_int = secrets.randbelow(SECP256K1_ORDER - 1) + 1
    return keypair_from_private_key(private_key_int.to_bytes(32, byteorder="big"))


# =============================================================================
# Digital Signatures (ECDSA)
# =============================================================================


def sign(message_hash: bytes, private_key: bytes) -> bytes:
    """
    Sign a message hash using ECDSA on secp256k1.

    Returns:
        64-byte signature (r || s), s normalized to the lower half order
    """
    if len(message_hash) != 32:
        raise ValueError("Message hash must be 32 bytes")
    if len(private_key) != 32:
        raise ValueError("Private key must be 32 bytes")

    _, r, s = secp256k1.ecdsa_raw_sign(message_hash, private_key)

    # Low-s normalization prevents signature malleability
    if s > SECP256K1_ORDER // 2:
        s = SECP256K1_ORDER - s

    return r.to_bytes(32, byteorder="big") + s.to_bytes(32, byteorder="big")


def verify(message_hash: bytes, signature: bytes, public_key: bytes) -> bool:
    """
    Verify an ECDSA signature against a 64-byte public key.

    Returns:
        True if signature is valid, False otherwise
    """
    if len(message_hash) != 32 or len(signature) != 64 or len(public_key) != 64:
        return False

    r = int.from_bytes(signature[:32], byteorder="big")
    s = int.from_bytes(signature[32:], byteorder="big")
    if not (1 <= r < SECP256K1_ORDER and 1 <= s < SECP256K1_ORDER):
        return False

    expected = (
        int.from_bytes(public_key[:32], byteorder="big"),
        int.from_bytes(public_key[32:], byteorder="big"),
    )

    # Without a recovery id, try both candidate points
    for v in (27, 28):
        recovered = _recover(message_hash, v, r, s)
        if recovered == expected:
            return True
    return False


def _recover(message_hash: bytes, v: int, r: int, s: int) -> Optional[tuple]:
    try:
        return secp256k1.ecdsa_raw_recover(message_hash, (v, r, s))
    except (ValueError, ZeroDivisionError):
        return None


# =============================================================================
# Utility Functions
# =============================================================================


def bytes_to_hex(data: bytes) -> str:
    """Convert bytes to hex string with 0x prefix."""
    return "0x" + data.hex()


def hex_to_bytes(hex_str: str) -> bytes:
    """Convert hex string (with or without 0x prefix) to bytes."""
    if hex_str.startswith(("0x", "0X")):
        hex_str = hex_str[2:]
    return bytes.fromhex(hex_str)


def is_valid_address(address: str) -> bool:
    """Check if string is a valid address format."""
    if not isinstance(address, str) or not address.startswith("0x") or len(address) != 42:
        return False
    try:
        int(address, 16)
        return True
    except ValueError:
        return False


__all__ = [
    "SECP256K1_ORDER",
    "SALT_SIZE",
    "KeyPair",
    "sha256",
    "keccak256",
    "seal_amount",
    "random_salt",
    "address_from_public_key",
    "private_key_to_public_key",
    "keypair_from_private_key",
    "generate_keypair",
    "sign",
    "verify",
    "bytes_to_hex",
    "hex_to_bytes",
    "is_valid_address",
]
