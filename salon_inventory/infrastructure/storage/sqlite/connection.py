"""
Pooled aiosqlite connections for the inventory database.

Every write goes through ``transaction()``, which opens with BEGIN IMMEDIATE:
the database write lock is taken up front, so two deductions against the
same ledger row wait for each other instead of colliding at commit time.
"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

import aiosqlite

from salon_inventory.config import get_logger, get_settings

logger = get_logger(__name__)

# Applied to each pooled connection right after it is opened
_CONNECTION_PRAGMAS = (
    "journal_mode=WAL",
    "synchronous=NORMAL",
    "foreign_keys=ON",
)


class ConnectionPool:
    """Fixed-size set of aiosqlite connections shared through an asyncio queue."""

    def __init__(
        self,
        db_path: Path,
        pool_size: int = 5,
        busy_timeout: int = 30000,
    ):
        self.db_path = db_path
        self.pool_size = pool_size
        self.busy_timeout = busy_timeout

        self._connections: list[aiosqlite.Connection] = []
        self._pool: asyncio.Queue[aiosqlite.Connection] = asyncio.Queue(maxsize=pool_size)
        self._initialized = False
        self._lock = asyncio.Lock()

    async def _open(self) -> aiosqlite.Connection:
        """Open one connection with the pool pragmas and dict-like rows."""
        conn = await aiosqlite.connect(self.db_path)
        for pragma in (*_CONNECTION_PRAGMAS, f"busy_timeout={self.busy_timeout}"):
            await conn.execute(f"PRAGMA {pragma}")
        conn.row_factory = aiosqlite.Row
        return conn

    async def initialize(self) -> None:
        """Open ``pool_size`` connections; later calls are no-ops."""
        async with self._lock:
            if self._initialized:
                return

            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            opened = [await self._open() for _ in range(self.pool_size)]
            for conn in opened:
                self._pool.put_nowait(conn)
            self._connections.extend(opened)
            self._initialized = True

        logger.info("sqlite_pool_opened", db_path=str(self.db_path), size=self.pool_size)

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[aiosqlite.Connection]:
        """Borrow a connection for reads; it goes back to the queue on exit."""
        if not self._initialized:
            await self.initialize()

        conn = await self._pool.get()
        try:
            yield conn
        finally:
            self._pool.put_nowait(conn)

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[aiosqlite.Connection]:
        """Borrow a connection holding the write lock until commit or rollback."""
        async with self.acquire() as conn:
            await conn.execute("BEGIN IMMEDIATE")
            committed = False
            try:
                yield conn
                await conn.commit()
                committed = True
            finally:
                if not committed:
                    await conn.rollback()
                    logger.warning("sqlite_write_rolled_back", db_path=str(self.db_path))

    async def close(self) -> None:
        """Close every pooled connection; the pool can be initialized again afterwards."""
        async with self._lock:
            while self._connections:
                await self._connections.pop().close()
            self._pool = asyncio.Queue(maxsize=self.pool_size)
            self._initialized = False

        logger.info("sqlite_pool_closed", db_path=str(self.db_path))


_pool: ConnectionPool | None = None


async def get_pool() -> ConnectionPool:
    """Return the process-wide pool, building it from storage settings on first use."""
    global _pool
    if _pool is None:
        storage = get_settings().storage
        _pool = ConnectionPool(
            db_path=storage.db_path,
            pool_size=storage.pool_size,
            busy_timeout=storage.busy_timeout,
        )
        await _pool.initialize()
    return _pool


async def close_pool() -> None:
    """Close and forget the process-wide pool, if one was opened."""
    global _pool
    pool, _pool = _pool, None
    if pool is not None:
        await pool.close()


@asynccontextmanager
async def get_connection() -> AsyncIterator[aiosqlite.Connection]:
    """Read connection from the process-wide pool."""
    async with (await get_pool()).acquire() as conn:
        yield conn


@asynccontextmanager
async def get_transaction() -> AsyncIterator[aiosqlite.Connection]:
    """Write transaction on the process-wide pool; see ``ConnectionPool.transaction``."""
    async with (await get_pool()).transaction() as conn:
        yield conn
