"""
Ledger Storage Module.

Provides:
- Typed key schema (DataKey, PhaseKey)
- Backends (in-memory, SQLite)
- Transaction-scoped Storage view with buffered writes
"""

from auctionledger.core.storage.backend import MemoryBackend, StorageBackend
from auctionledger.core.storage.keys import DataKey, KeyKind, PhaseKey, StorageKey
from auctionledger.core.storage.sqlite_adapter import SQLiteAdapter
from auctionledger.core.storage.storage import Storage, decode_value, encode_value

__all__ = [
    "StorageBackend",
    "MemoryBackend",
    "SQLiteAdapter",
    "Storage",
    "StorageKey",
    "DataKey",
    "PhaseKey",
    "KeyKind",
    "encode_value",
    "decode_value",
]
