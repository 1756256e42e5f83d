"""
Host - a single-contract ledger simulation.

The host gives the contract what a real ledger would:
- a clock that only moves between transactions
- signature checking, exposed to the contract as require_auth
- the asset service
- all-or-nothing transactions: writes are buffered in a Storage view and
  committed only if the contract function returns normally

Transactions are applied one at a time, in submission order.
"""

import json
from dataclasses import dataclass
from typing import Any, Iterable, Optional

from auctionledger.core.config import HostConfig
from auctionledger.core.contract import EXPORTS, AuctionContract
from auctionledger.core.errors import AuctionError, DuplicateTransaction, UnknownFunction
from auctionledger.core.storage import MemoryBackend, SQLiteAdapter, Storage, StorageBackend, StorageKey
from auctionledger.crypto import KeyPair, sha256
from auctionledger.host.env import Env
from auctionledger.host.transaction import Transaction
from auctionledger.utils.logger import get_logger

logger = get_logger("host")


@dataclass(frozen=True)
class TxKey(StorageKey):
    digest: bytes

    @property
    def bucket(self) -> str:
        return "txlog"

    def encode(self) -> bytes:
        return b"Tx:" + self.digest


class LedgerClock:
    """Ledger timestamp, persisted in the backend's chain state."""

    META_KEY = "ledger_timestamp"

    def __init__(self, backend: StorageBackend, genesis_timestamp: int):
        self.backend = backend
        if backend.get_meta(self.META_KEY) is None:
            backend.set_meta(self.META_KEY, str(genesis_timestamp))

    def now(self) -> int:
        return int(self.backend.get_meta(self.META_KEY))

    def set(self, timestamp: int) -> None:
        if timestamp < self.now():
            raise ValueError(f"ledger time cannot go backwards ({timestamp} < {self.now()})")
        self.backend.set_meta(self.META_KEY, str(timestamp))

    def advance(self, seconds: int) -> int:
        if seconds < 0:
            raise ValueError("cannot advance by a negative amount")
        self.set(self.now() + seconds)
        return self.now()


class Host:
    """Runs contract functions as ledger transactions."""

    NONCE_KEY = "next_nonce"

    def __init__(
        self,
        backend: Optional[StorageBackend] = None,
        config: Optional[HostConfig] = None,
        contract: Optional[AuctionContract] = None,
        mock_all_auths: bool = False,
    ):
        self.config = config or HostConfig()
        self.backend = backend if backend is not None else MemoryBackend()
        self.contract = contract or AuctionContract()
        self.clock = LedgerClock(self.backend, self.config.genesis_timestamp)
        self.mock_all_auths = mock_all_auths

    @classmethod
    def open(cls, config: HostConfig, **kwargs) -> "Host":
        """Host backed by the SQLite database named in the config."""
        return cls(backend=SQLiteAdapter(config.db_path), config=config, **kwargs)

    def close(self) -> None:
        self.backend.close()

    # =========================================================================
    # Transactions
    # =========================================================================

    def next_nonce(self) -> int:
        nonce = int(self.backend.get_meta(self.NONCE_KEY) or 0)
        self.backend.set_meta(self.NONCE_KEY, str(nonce + 1))
        return nonce

    def build(self, function: str, signers: Iterable[KeyPair] = (), **args) -> Transaction:
        tx = Transaction(function=function, args=args, nonce=self.next_nonce())
        for keypair in signers:
            tx.sign(keypair)
        return tx

    def invoke(self, function: str, signers: Iterable[KeyPair] = (), **args) -> Any:
        """Build, sign and submit a transaction in one go."""
        return self.submit(self.build(function, signers, **args))

    def query(self, function: str, **args) -> Any:
        """Run a read-only function; nothing is written or logged."""
        if not EXPORTS.get(function, False):
            raise UnknownFunction(f"{function} is not a read-only contract function")
        return self._run(Transaction(function=function, args=args), commit=False)

    def submit(self, tx: Transaction) -> Any:
        if tx.function not in EXPORTS:
            raise UnknownFunction(f"contract has no function {tx.function}")
        return self._run(tx, commit=not EXPORTS[tx.function])

    def _run(self, tx: Transaction, commit: bool) -> Any:
        signers = tx.signers()
        digest = tx.digest()
        storage = Storage(self.backend)

        if commit and storage.has(TxKey(digest)):
            raise DuplicateTransaction(f"transaction {digest.hex()[:16]} already applied")

        timestamp = self.clock.now()
        env = Env(
            storage=storage,
            timestamp=timestamp,
            signers=signers,
            prng_seed=self._prng_seed(timestamp, digest),
            mock_all_auths=self.mock_all_auths,
        )

        try:
            result = getattr(self.contract, tx.function)(env, **tx.args)
        except AuctionError as exc:
            storage.discard()
            logger.warning(f"{tx.function} aborted: {type(exc).__name__}: {exc}")
            raise
        except Exception:
            storage.discard()
            logger.exception(f"{tx.function} aborted with an unexpected error")
            raise

        if commit:
            storage.set(TxKey(digest), {"function": tx.function, "timestamp": timestamp})
            storage.commit()
        else:
            storage.discard()
        return result

    def _prng_seed(self, timestamp: int, digest: bytes) -> int:
        material = json.dumps([self.config.host_seed, timestamp, digest.hex()]).encode()
        return int.from_bytes(sha256(material)[:8], byteorder="big")

    # =========================================================================
    # Asset administration
    # =========================================================================

    def mint(self, asset: str, owner: str, amount: int) -> None:
        """Credit an account outside of any contract call (faucet)."""
        storage = Storage(self.backend)
        Env(storage, self.clock.now()).token(asset).mint(owner, amount)
        storage.commit()
        logger.debug(f"Minted {amount} {asset} to {owner}")

    def balance(self, asset: str, owner: str) -> int:
        storage = Storage(self.backend)
        try:
            return Env(storage, self.clock.now()).token(asset).balance(owner)
        finally:
            storage.discard()
