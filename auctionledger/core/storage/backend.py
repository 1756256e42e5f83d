"""
Storage backends.

A backend is the durable side of the store. It is only ever written through
apply_batch so that everything one transaction wrote lands together.
"""

from abc import ABC, abstractmethod
from typing import Dict, Iterator, List, Optional, Tuple

# (key, value or None for removal, bucket)
BatchEntry = Tuple[bytes, Optional[bytes], str]


class StorageBackend(ABC):

    @abstractmethod
    def get(self, key: bytes) -> Optional[bytes]:
        """Get value by key."""

    @abstractmethod
    def apply_batch(self, entries: List[BatchEntry]) -> None:
        """Apply writes and removals atomically."""

    @abstractmethod
    def keys(self, bucket: str) -> Iterator[bytes]:
        """Iterate keys stored in a bucket."""

    @abstractmethod
    def get_meta(self, key: str) -> Optional[str]:
        """Get host metadata (clock, seed...)."""

    @abstractmethod
    def set_meta(self, key: str, value: str) -> None:
        """Set host metadata."""

    def close(self) -> None:
        pass


class MemoryBackend(StorageBackend):
    """In-process backend used by tests and throwaway hosts."""

    def __init__(self):
        self._data: Dict[bytes, Tuple[bytes, str]] = {}
        self._meta: Dict[str, str] = {}

    def get(self, key: bytes) -> Optional[bytes]:
        entry = self._data.get(key)
        return entry[0] if entry else None

    def apply_batch(self, entries: List[BatchEntry]) -> None:
        for key, value, bucket in entries:
            if value is None:
                self._data.pop(key, None)
            else:
                self._data[key] = (value, bucket)

    def keys(self, bucket: str) -> Iterator[bytes]:
        return iter([k for k, (_, b) in self._data.items() if b == bucket])

    def get_meta(self, key: str) -> Optional[str]:
        return self._meta.get(key)

    def set_meta(self, key: str, value: str) -> None:
        self._meta[key] = value

    def __len__(self) -> int:
        return len(self._data)
