"""Parts list checkpoint persistence.

CheckpointStore keeps the full row collection per list id in SQLite, one row
per list, overwritten on every save. CheckpointWriter sits between a running
validation session and the store so that slow or failing writes never stall
the stream reader.
"""

import asyncio
import json
import logging
import sqlite3
import threading
import time
from collections import deque
from pathlib import Path

from .config import CHECKPOINT_DB_PATH, CHECKPOINT_MAX_RETRIES, CHECKPOINT_QUEUE_SIZE, CHECKPOINT_RETRY_DELAY
from .models import PartsListRow

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS parts_lists (
    list_id TEXT PRIMARY KEY,
    rows TEXT NOT NULL,
    updated_at REAL NOT NULL
)
"""


class CheckpointStore:
    """SQLite-backed row collection store.

    Thread safety: WAL mode + check_same_thread=False. Async methods run the
    blocking primitives in a worker thread; _conn_lock serializes access to
    the shared connection.
    """

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or CHECKPOINT_DB_PATH
        self._conn: sqlite3.Connection | None = None
        self._conn_lock = threading.Lock()

    def _ensure_db(self) -> sqlite3.Connection:
        if self._conn is not None:
            return self._conn
        with self._conn_lock:
            if self._conn is None:
                self.db_path.parent.mkdir(parents=True, exist_ok=True)
                conn = sqlite3.connect(self.db_path, check_same_thread=False)
                conn.row_factory = sqlite3.Row
                conn.execute("PRAGMA journal_mode=WAL")
                conn.execute(_SCHEMA)
                conn.commit()
                self._conn = conn
                logger.info(f"Opened checkpoint store at {self.db_path}")
        return self._conn

    def close(self) -> None:
        with self._conn_lock:
            if self._conn:
                self._conn.close()
                self._conn = None

    def save_sync(self, list_id: str, rows: list[PartsListRow]) -> None:
        payload = json.dumps([r.to_dict() for r in rows], ensure_ascii=False)
        conn = self._ensure_db()
        with self._conn_lock:
            conn.execute(
                "INSERT INTO parts_lists (list_id, rows, updated_at) VALUES (?, ?, ?) "
                "ON CONFLICT(list_id) DO UPDATE SET rows = excluded.rows, updated_at = excluded.updated_at",
                (list_id, payload, time.time()),
            )
            conn.commit()

    def load_sync(self, list_id: str) -> list[PartsListRow] | None:
        """Stored rows for a list, or None if nothing was saved. Malformed rows are skipped."""
        conn = self._ensure_db()
        with self._conn_lock:
            record = conn.execute("SELECT rows FROM parts_lists WHERE list_id = ?", (list_id,)).fetchone()
        if record is None:
            return None
        rows: list[PartsListRow] = []
        for data in json.loads(record["rows"]):
            try:
                rows.append(PartsListRow.from_dict(data))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed stored row in list {list_id}: {e}")
        return rows

    def delete_sync(self, list_id: str) -> bool:
        conn = self._ensure_db()
        with self._conn_lock:
            cursor = conn.execute("DELETE FROM parts_lists WHERE list_id = ?", (list_id,))
            conn.commit()
        return cursor.rowcount > 0

    async def save(self, list_id: str, rows: list[PartsListRow]) -> None:
        await asyncio.to_thread(self.save_sync, list_id, rows)

    async def load(self, list_id: str) -> list[PartsListRow] | None:
        return await asyncio.to_thread(self.load_sync, list_id)

    async def delete(self, list_id: str) -> bool:
        return await asyncio.to_thread(self.delete_sync, list_id)


class CheckpointWriter:
    """Bounded, retrying write queue for one list id.

    When the queue is full the oldest pending snapshot is dropped; each
    snapshot is a full row collection, so the newest one supersedes it.
    Failures are counted and logged, never raised to the caller.
    """

    def __init__(
        self,
        store: CheckpointStore,
        list_id: str,
        max_pending: int = CHECKPOINT_QUEUE_SIZE,
        max_retries: int = CHECKPOINT_MAX_RETRIES,
        retry_delay: float = CHECKPOINT_RETRY_DELAY,
    ):
        self.store = store
        self.list_id = list_id
        self.max_pending = max(1, max_pending)
        self.max_retries = max(1, max_retries)
        self.retry_delay = retry_delay
        self._pending: deque[list[PartsListRow]] = deque()
        self._task: asyncio.Task | None = None
        # Stats
        self.successful_writes = 0
        self.failed_writes = 0
        self.superseded = 0
        self.last_error: str | None = None
        self._discarded = False

    @property
    def pending(self) -> int:
        return len(self._pending)

    @property
    def discarded(self) -> bool:
        return self._discarded

    def enqueue(self, rows: list[PartsListRow]) -> None:
        """Queue a snapshot for writing. Caller must pass rows it will not mutate."""
        if self._discarded:
            return
        if len(self._pending) >= self.max_pending:
            self._pending.popleft()
            self.superseded += 1
        self._pending.append(rows)
        if self._task is None or self._task.done():
            self._task = asyncio.get_running_loop().create_task(self._drain())

    async def _drain(self) -> None:
        while self._pending:
            await self._write(self._pending.popleft())

    async def _write(self, rows: list[PartsListRow]) -> bool:
        delay = self.retry_delay
        for attempt in range(1, self.max_retries + 1):
            try:
                await self.store.save(self.list_id, rows)
                self.successful_writes += 1
                return True
            except Exception as e:
                self.last_error = str(e)
                logger.warning(f"Checkpoint write for {self.list_id} failed (attempt {attempt}/{self.max_retries}): {e}")
                if attempt < self.max_retries:
                    await asyncio.sleep(delay)
                    delay *= 2
        self.failed_writes += 1
        logger.error(f"Giving up on checkpoint for {self.list_id} after {self.max_retries} attempts")
        return False

    def discard(self) -> None:
        """Drop queued snapshots and ignore later ones. Another run owns the list id now."""
        self.superseded += len(self._pending)
        self._pending.clear()
        self._discarded = True

    async def flush(self) -> None:
        """Wait until every queued snapshot has been written or given up on."""
        while self._task is not None and not self._task.done():
            await self._task
        if self._pending:
            self._task = asyncio.get_running_loop().create_task(self._drain())
            await self._task

    def stats(self) -> dict:
        return {
            "successfulWrites": self.successful_writes,
            "failedWrites": self.failed_writes,
            "superseded": self.superseded,
            "pending": self.pending,
            "lastError": self.last_error,
            "discarded": self._discarded,
        }


# Global instance with thread safety
_store: CheckpointStore | None = None
_store_lock = threading.Lock()


def get_store() -> CheckpointStore:
    """Get or create the global checkpoint store (thread-safe)."""
    global _store
    if _store is None:
        with _store_lock:
            if _store is None:
                _store = CheckpointStore()
    return _store


def close_store() -> None:
    global _store
    with _store_lock:
        if _store:
            _store.close()
            _store = None
