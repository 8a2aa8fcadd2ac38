"""
Draft Store.
Persists draft snapshots as JSON blobs keyed by draft id in a sqlite file.
"""

import asyncio
import json
import logging
import os
import sqlite3
from contextlib import asynccontextmanager, closing
from datetime import datetime, timezone
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)


class DraftStore:
    """Key-value store for drafts.

    ``set`` overwrites the whole record. ``update`` overwrites individual
    top-level fields and is serialized per draft id, so concurrent updates
    to the same draft do not lose each other's fields.
    """

    def __init__(self, db_path: str = "drafts.db"):
        self.db_path = db_path
        directory = os.path.dirname(db_path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        self._locks: Dict[str, asyncio.Lock] = {}
        self._lock_users: Dict[str, int] = {}
        self.init_db()

    @asynccontextmanager
    async def _draft_lock(self, draft_id: str):
        """Per-draft lock, dropped once no caller holds or waits for it."""
        lock = self._locks.setdefault(draft_id, asyncio.Lock())
        self._lock_users[draft_id] = self._lock_users.get(draft_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[draft_id] -= 1
            if not self._lock_users[draft_id]:
                del self._lock_users[draft_id]
                del self._locks[draft_id]

    def get_connection(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def init_db(self):
        """Initialize the drafts table."""
        with closing(self.get_connection()) as conn, conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS drafts (
                    id TEXT PRIMARY KEY,
                    data TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)

    def _read(self, draft_id: str) -> Optional[dict]:
        with closing(self.get_connection()) as conn, conn:
            row = conn.execute("SELECT data FROM drafts WHERE id = ?", (draft_id,)).fetchone()
        return json.loads(row["data"]) if row else None

    def _write(self, draft_id: str, data: dict):
        now = datetime.now(timezone.utc).isoformat()
        with closing(self.get_connection()) as conn, conn:
            conn.execute(
                "INSERT OR REPLACE INTO drafts (id, data, updated_at) VALUES (?, ?, ?)",
                (draft_id, json.dumps(data), now),
            )

    def _delete(self, draft_id: str) -> bool:
        with closing(self.get_connection()) as conn, conn:
            cursor = conn.execute("DELETE FROM drafts WHERE id = ?", (draft_id,))
            return cursor.rowcount > 0

    def _list_ids(self) -> List[str]:
        with closing(self.get_connection()) as conn, conn:
            rows = conn.execute("SELECT id FROM drafts ORDER BY updated_at DESC").fetchall()
        return [row["id"] for row in rows]

    async def get(self, draft_id: str) -> Optional[dict]:
        return await asyncio.to_thread(self._read, draft_id)

    async def set(self, draft_id: str, data: dict):
        async with self._draft_lock(draft_id):
            await asyncio.to_thread(self._write, draft_id, data)
        logger.info(f"📝 Draft saved: {draft_id}")

    async def update(self, draft_id: str, **fields) -> dict:
        """
        Overwrite the given top-level fields of a stored draft.

        Raises:
            KeyError: The draft does not exist
        """
        async with self._draft_lock(draft_id):
            current = await asyncio.to_thread(self._read, draft_id)
            if current is None:
                raise KeyError(f"Draft not found: {draft_id}")
            current.update(fields)
            await asyncio.to_thread(self._write, draft_id, current)
        logger.info(f"📝 Draft updated: {draft_id} ({', '.join(fields)})")
        return current

    async def delete(self, draft_id: str) -> bool:
        async with self._draft_lock(draft_id):
            deleted = await asyncio.to_thread(self._delete, draft_id)
        return deleted

    async def list_ids(self) -> List[str]:
        return await asyncio.to_thread(self._list_ids)
