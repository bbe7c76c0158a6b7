# key-value stores that hold one JSON blob per entity slice
import asyncio
import os.path
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, Optional, Protocol

import aiosqlite

from wandermart.utils.logger import get_logger

_logger = get_logger(__name__)


class KeyValueStore(Protocol):
    """get/set over string keys. No transactions, last write wins."""

    async def get(self, key: str) -> Optional[str]: ...

    async def set(self, key: str, value: str) -> None: ...


class MemoryStore:
    """Process-local store, gone when the process exits."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._data: Dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def keys(self):
        """Keys written so far, for inspection."""
        return self._data.keys()


class SqliteStore:
    """Durable store backed by a single ``kv`` table in an SQLite file.

    The table is created lazily on first use. Each call opens its own
    connection, so writers on the same key simply overwrite each other.
    """

    def __init__(self, path: str) -> None:
        self.path = path
        self._initialized = False
        self._init_lock = asyncio.Lock()

    async def _init_db(self, conn: aiosqlite.Connection) -> None:
        _logger.info(f"Initializing key-value store at {self.path}...")
        await conn.execute(
            """
            CREATE TABLE IF NOT EXISTS kv (
                key   TEXT PRIMARY KEY,
                value TEXT NOT NULL
            );
            """
        )
        await conn.commit()

    @asynccontextmanager
    async def connect(self) -> AsyncIterator[aiosqlite.Connection]:
        parent = os.path.dirname(self.path)
        if parent and not os.path.isdir(parent):
            os.makedirs(parent, exist_ok=True)

        conn = await aiosqlite.connect(self.path)
        try:
            if not self._initialized:
                async with self._init_lock:
                    if not self._initialized:
                        await self._init_db(conn)
                        self._initialized = True
            yield conn
        finally:
            await conn.close()

    async def get(self, key: str) -> Optional[str]:
        async with self.connect() as conn:
            cur = await conn.execute("SELECT value FROM kv WHERE key = ?;", (key,))
            row = await cur.fetchone()
            await cur.close()
        return row[0] if row else None

    async def set(self, key: str, value: str) -> None:
        async with self.connect() as conn:
            await conn.execute(
                """
                INSERT INTO kv(key, value) VALUES (?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value;
                """,
                (key, value),
            )
            await conn.commit()
        _logger.debug(f"Wrote {len(value)} chars to '{key}'")
