import sqlite3
import threading
from pathlib import Path
from typing import Iterator, List, Optional

from auctionledger.core.storage.backend import BatchEntry, StorageBackend
from auctionledger.utils.logger import get_logger

logger = get_logger("storage.sqlite")


class SQLiteAdapter(StorageBackend):
    """
    SQLite backend for the ledger store.

    Provides:
    1. Key-Value store for contract and host records, grouped by bucket.
    2. Chain state metadata (ledger clock, PRNG seed).
    """

    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)
        self._conn_local = threading.local()

        if not self.db_path.parent.exists():
            self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self._init_schema()
        logger.debug(f"SQLite store opened at {self.db_path}")

    def _get_conn(self) -> sqlite3.Connection:
        """Get or create connection for current thread."""
        if not hasattr(self._conn_local, "conn"):
            conn = sqlite3.connect(self.db_path, timeout=30.0, check_same_thread=False)
            conn.row_factory = sqlite3.Row
            conn.execute("PRAGMA journal_mode=WAL;")
            conn.execute("PRAGMA synchronous=NORMAL;")
            self._conn_local.conn = conn
        return self._conn_local.conn

    def _init_schema(self):
        conn = self._get_conn()
        with conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS kv_store (
                    key BLOB PRIMARY KEY,
                    value BLOB NOT NULL,
                    bucket TEXT NOT NULL DEFAULT 'default'
                )
            """)
            conn.execute("CREATE INDEX IF NOT EXISTS idx_kv_bucket ON kv_store(bucket);")

            conn.execute("""
                CREATE TABLE IF NOT EXISTS chain_state (
                    key TEXT PRIMARY KEY,
                    value TEXT
                )
            """)

    # =========================================================================
    # Key-Value Operations
    # =========================================================================

    def get(self, key: bytes) -> Optional[bytes]:
        cursor = self._get_conn().execute("SELECT value FROM kv_store WHERE key = ?", (key,))
        row = cursor.fetchone()
        return row["value"] if row else None

    def apply_batch(self, entries: List[BatchEntry]) -> None:
        """Write a whole transaction's changes in one SQLite transaction."""
        conn = self._get_conn()
        with conn:
            for key, value, bucket in entries:
                if value is None:
                    conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
                else:
                    conn.execute(
                        "INSERT OR REPLACE INTO kv_store (key, value, bucket) VALUES (?, ?, ?)",
                        (key, value, bucket),
                    )

    def keys(self, bucket: str) -> Iterator[bytes]:
        cursor = self._get_conn().execute(
            "SELECT key FROM kv_store WHERE bucket = ? ORDER BY key", (bucket,)
        )
        return iter([bytes(row["key"]) for row in cursor.fetchall()])

    # =========================================================================
    # Chain State Operations
    # =========================================================================

    def set_meta(self, key: str, value: str) -> None:
        conn = self._get_conn()
        with conn:
            conn.execute(
                "INSERT OR REPLACE INTO chain_state (key, value) VALUES (?, ?)",
                (key, value),
            )

    def get_meta(self, key: str) -> Optional[str]:
        cursor = self._get_conn().execute("SELECT value FROM chain_state WHERE key = ?", (key,))
        row = cursor.fetchone()
        return row["value"] if row else None

    def close(self) -> None:
        if hasattr(self._conn_local, "conn"):
            self._conn_local.conn.close()
            del self._conn_local.conn
