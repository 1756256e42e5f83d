"""
Env - what the contract sees of the host during one transaction.

Carries the transaction-scoped storage view, the frozen ledger timestamp,
the set of principals that signed, a deterministic PRNG and access to the
asset service. The contract owns an account of its own (CONTRACT_ADDRESS)
holding whatever it has taken into escrow.
"""

import random
from typing import FrozenSet

from auctionledger.core.config import CONTRACT_ADDRESS
from auctionledger.core.errors import AuthorizationFailure
from auctionledger.core.storage import Storage
from auctionledger.host.assets import TokenClient


class Env:

    def __init__(
        self,
        storage: Storage,
        timestamp: int,
        signers: FrozenSet[str] = frozenset(),
        prng_seed: int = 0,
        mock_all_auths: bool = False,
    ):
        self.storage = storage
        self.timestamp = timestamp
        self.signers = signers
        self.prng = random.Random(prng_seed)
        self.mock_all_auths = mock_all_auths
        self.contract_address = CONTRACT_ADDRESS

    def now(self) -> int:
        return self.timestamp

    def require_auth(self, principal: str) -> None:
        if self.mock_all_auths or principal in self.signers:
            return
        raise AuthorizationFailure(f"transaction not signed by {principal}")

    def token(self, asset: str) -> TokenClient:
        return TokenClient(self.storage, asset)
