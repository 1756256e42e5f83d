"""
Unit tests for cryptographic primitives.

Tests cover:
1. Hashing
2. Keys and addresses
3. Signatures
4. Sealed-bid commitments
"""

import pytest

from auctionledger.crypto import (
    generate_keypair,
    hex_to_bytes,
    bytes_to_hex,
    is_valid_address,
    keccak256,
    keypair_from_private_key,
    random_salt,
    seal_amount,
    sha256,
    sign,
    verify,
)


@pytest.fixture(scope="module")
def keypair():
    return generate_keypair()


class TestHashing:

    def test_sha256_known_vector(self):
        assert sha256(b"").hex() == (
            "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"
        )

    def test_keccak256_known_vector(self):
        assert keccak256(b"").hex() == (
            "c5d2460186f7233c927e7db2dcc703c0e500b653ca82273b7bfad8045d85a470"
        )


class TestKeys:

    def test_address_format(self, keypair):
        assert is_valid_address(keypair.address)

    def test_address_is_stable_for_private_key(self, keypair):
        again = keypair_from_private_key(keypair.private_key)
        assert again.public_key == keypair.public_key
        assert again.address == keypair.address

    def test_invalid_addresses(self):
        assert not is_valid_address("seller")
        assert not is_valid_address("0x1234")
        assert not is_valid_address("0x" + "zz" * 20)

    def test_hex_roundtrip(self):
        assert hex_to_bytes(bytes_to_hex(b"\x01\x02")) == b"\x01\x02"
        assert hex_to_bytes("0102") == b"\x01\x02"


class TestSignatures:

    def test_sign_and_verify(self, keypair):
        digest = sha256(b"place_bid")
        signature = sign(digest, keypair.private_key)

        assert len(signature) == 64
        assert verify(digest, signature, keypair.public_key)

    def test_wrong_message_fails(self, keypair):
        signature = sign(sha256(b"a"), keypair.private_key)
        assert not verify(sha256(b"b"), signature, keypair.public_key)

    def test_wrong_key_fails(self, keypair):
        other = generate_keypair()
        digest = sha256(b"a")
        assert not verify(digest, sign(digest, keypair.private_key), other.public_key)

    def test_malformed_signature_fails(self, keypair):
        assert not verify(sha256(b"a"), b"\x00" * 64, keypair.public_key)
        assert not verify(sha256(b"a"), b"\x01" * 10, keypair.public_key)


class TestSealAmount:

    def test_deterministic(self):
        salt = b"\x07" * 32
        assert seal_amount(100, salt) == seal_amount(100, salt)

    def test_binds_amount_and_salt(self):
        salt = b"\x07" * 32
        assert seal_amount(100, salt) != seal_amount(101, salt)
        assert seal_amount(100, salt) != seal_amount(100, b"\x08" * 32)

    def test_matches_layout(self):
        salt = b"\x07" * 32
        expected = sha256((100).to_bytes(16, "big", signed=True) + salt)
        assert seal_amount(100, salt) == expected

    def test_salt_length_enforced(self):
        with pytest.raises(ValueError):
            seal_amount(100, b"short")

    def test_random_salt(self):
        assert len(random_salt()) == 32
        assert random_salt() != random_salt()
