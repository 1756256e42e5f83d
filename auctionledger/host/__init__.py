"""Simulated ledger host: clock, auth, assets and transactions"""
from auctionledger.host.assets import BalanceKey, TokenClient
from auctionledger.host.env import Env
from auctionledger.host.host import Host, LedgerClock
from auctionledger.host.transaction import Transaction

__all__ = [
    "BalanceKey",
    "TokenClient",
    "Env",
    "Host",
    "LedgerClock",
    "Transaction",
]
