"""
Storage key schema.

Keys are typed: every key knows the bucket it lives in and encodes to a
stable byte string. The contract owns the DataKey and PhaseKey spaces;
the host owns its own buckets (asset balances).
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class KeyKind(str, Enum):
    AUCTION_DATA = "AuctionData"
    ADMIN_DATA = "AdminData"
    # Reserved for the royalty contract sharing this store; never written here
    BROKER_WHITELIST = "BrokerWhitelist"


@dataclass(frozen=True)
class StorageKey(ABC):
    """Base class: a bucket plus an encoded identifier."""

    @abstractmethod
    def encode(self) -> bytes:
        """Stable byte encoding of the key."""

    @property
    @abstractmethod
    def bucket(self) -> str:
        """Bucket the key is stored in."""


@dataclass(frozen=True)
class DataKey(StorageKey):
    kind: KeyKind
    ident: Optional[str] = None

    @classmethod
    def auction_data(cls, auction_id: int) -> "DataKey":
        return cls(KeyKind.AUCTION_DATA, str(auction_id))

    @classmethod
    def admin_data(cls) -> "DataKey":
        return cls(KeyKind.ADMIN_DATA)

    @classmethod
    def broker_whitelist(cls, principal: str) -> "DataKey":
        return cls(KeyKind.BROKER_WHITELIST, principal)

    @property
    def bucket(self) -> str:
        return "contract"

    def encode(self) -> bytes:
        if self.ident is None:
            return self.kind.value.encode()
        return f"{self.kind.value}:{self.ident}".encode()


@dataclass(frozen=True)
class PhaseKey(StorageKey):
    """Key of the phase record scoped to one auction region."""

    region: str

    @property
    def bucket(self) -> str:
        return "phase"

    def encode(self) -> bytes:
        return f"Phase:{self.region}".encode()
