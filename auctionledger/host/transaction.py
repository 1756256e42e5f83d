"""
Signed transaction envelopes.

A transaction names a contract function and its arguments. Its digest is
sha256 over a canonical JSON body, and every signer contributes
(public_key, signature) over that digest.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple

from auctionledger.crypto import KeyPair, address_from_public_key, bytes_to_hex, sha256, verify
from auctionledger.core.errors import InvalidSignature


def canonical(value: Any) -> Any:
    """Reduce an argument to plain JSON types."""
    if hasattr(value, "to_dict"):
        return canonical(value.to_dict())
    if isinstance(value, (bytes, bytearray)):
        return bytes_to_hex(bytes(value))
    if isinstance(value, dict):
        return {str(k): canonical(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [canonical(v) for v in value]
    return value


@dataclass
class Transaction:
    function: str
    args: Dict[str, Any] = field(default_factory=dict)
    nonce: int = 0
    signatures: List[Tuple[bytes, bytes]] = field(default_factory=list)

    def body(self) -> dict:
        return {"function": self.function, "args": canonical(self.args), "nonce": self.nonce}

    def digest(self) -> bytes:
        return sha256(json.dumps(self.body(), sort_keys=True, separators=(",", ":")).encode())

    def sign(self, keypair: KeyPair) -> "Transaction":
        self.signatures.append((keypair.public_key, keypair.sign(self.digest())))
        return self

    def signers(self) -> frozenset:
        """
        Addresses of all signers.

        Raises:
            InvalidSignature: if any signature fails to verify
        """
        digest = self.digest()
        addresses = set()
        for public_key, signature in self.signatures:
            if not verify(digest, signature, public_key):
                raise InvalidSignature(
                    f"bad signature from {address_from_public_key(public_key)}"
                )
            addresses.add(address_from_public_key(public_key))
        return frozenset(addresses)
