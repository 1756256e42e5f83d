"""
Asset service - balances and transfers of fungible and property assets.

Balances live in the ledger store under the host-owned "assets" bucket, so
a transfer is rolled back with the rest of its transaction. The contract
only ever calls balance() and transfer().
"""

from dataclasses import dataclass

from auctionledger.core.errors import InsufficientBalance
from auctionledger.core.storage import Storage, StorageKey
from auctionledger.utils.logger import get_logger

logger = get_logger("host.assets")


@dataclass(frozen=True)
class BalanceKey(StorageKey):
    asset: str
    owner: str

    @property
    def bucket(self) -> str:
        return "assets"

    def encode(self) -> bytes:
        return f"Balance:{self.asset}:{self.owner}".encode()


class TokenClient:
    """Client for one asset, bound to a transaction's storage."""

    def __init__(self, storage: Storage, asset: str):
        self.storage = storage
        self.asset = asset

    def balance(self, owner: str) -> int:
        return self.storage.get_optional(BalanceKey(self.asset, owner)) or 0

    def transfer(self, sender: str, recipient: str, amount: int) -> None:
        if amount < 0:
            raise ValueError(f"transfer amount must be non-negative, got {amount}")

        available = self.balance(sender)
        if available < amount:
            raise InsufficientBalance(
                f"{sender} holds {available} {self.asset}, cannot transfer {amount}"
            )

        self._set(sender, available - amount)
        self._set(recipient, self.balance(recipient) + amount)
        logger.debug(f"{amount} {self.asset}: {sender} -> {recipient}")

    def mint(self, owner: str, amount: int) -> None:
        if amount < 0:
            raise ValueError(f"mint amount must be non-negative, got {amount}")
        self._set(owner, self.balance(owner) + amount)

    def _set(self, owner: str, amount: int) -> None:
        key = BalanceKey(self.asset, owner)
        if amount:
            self.storage.set(key, amount)
        else:
            self.storage.remove(key)
