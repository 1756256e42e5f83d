"""
Transaction-scoped typed storage.

A Storage view sits in front of a backend for the duration of one ledger
transaction. Reads see the transaction's own writes; writes are buffered
and only reach the backend on commit(), in a single batch. A transaction
that aborts simply discards the view, so no partial write is ever
observable.
"""

import json
from typing import Any, Dict, Iterator, Optional, Tuple, Type, TypeVar

from auctionledger.core.errors import NotFound
from auctionledger.core.storage.backend import StorageBackend
from auctionledger.core.storage.keys import StorageKey
from auctionledger.utils.logger import get_logger

logger = get_logger("storage")

T = TypeVar("T")

_REMOVED = None


def encode_value(value: Any) -> bytes:
    """Canonical JSON encoding for stored values."""
    if hasattr(value, "to_dict"):
        value = value.to_dict()
    return json.dumps(value, sort_keys=True, separators=(",", ":")).encode()


def decode_value(data: bytes, record_type: Optional[Type[T]] = None) -> Any:
    payload = json.loads(data)
    if record_type is not None and hasattr(record_type, "from_dict"):
        return record_type.from_dict(payload)
    return payload


class Storage:
    """Typed get/set/has/remove over a backend, buffered per transaction."""

    def __init__(self, backend: StorageBackend):
        self.backend = backend
        # encoded key -> (encoded value or None, bucket)
        self._pending: Dict[bytes, Tuple[Optional[bytes], str]] = {}
        self._closed = False

    # =========================================================================
    # Typed access
    # =========================================================================

    def has(self, key: StorageKey) -> bool:
        return self._read(key.encode()) is not None

    def get(self, key: StorageKey, record_type: Optional[Type[T]] = None) -> T:
        """Get a record; NotFound if the key is missing."""
        data = self._read(key.encode())
        if data is None:
            raise NotFound(f"no record for {key}")
        return decode_value(data, record_type)

    def get_optional(self, key: StorageKey, record_type: Optional[Type[T]] = None) -> Optional[T]:
        data = self._read(key.encode())
        if data is None:
            return None
        return decode_value(data, record_type)

    def set(self, key: StorageKey, value: Any) -> None:
        """Last write wins within the transaction."""
        self._check_open()
        self._pending[key.encode()] = (encode_value(value), key.bucket)

    def remove(self, key: StorageKey) -> None:
        self._check_open()
        self._pending[key.encode()] = (_REMOVED, key.bucket)

    def keys(self, bucket: str) -> Iterator[bytes]:
        """Keys of a bucket as seen by this transaction."""
        seen = set(self.backend.keys(bucket))
        for key, (value, key_bucket) in self._pending.items():
            if key_bucket != bucket:
                continue
            if value is _REMOVED:
                seen.discard(key)
            else:
                seen.add(key)
        return iter(sorted(seen))

    # =========================================================================
    # Transaction boundary
    # =========================================================================

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def commit(self) -> None:
        self._check_open()
        if self._pending:
            self.backend.apply_batch(
                [(key, value, bucket) for key, (value, bucket) in self._pending.items()]
            )
            logger.debug(f"Committed {len(self._pending)} storage writes")
        self._pending.clear()
        self._closed = True

    def discard(self) -> None:
        if self._pending:
            logger.debug(f"Discarded {len(self._pending)} storage writes")
        self._pending.clear()
        self._closed = True

    def _read(self, encoded: bytes) -> Optional[bytes]:
        if encoded in self._pending:
            return self._pending[encoded][0]
        return self.backend.get(encoded)

    def _check_open(self) -> None:
        if self._closed:
            raise RuntimeError("storage view used after its transaction closed")
