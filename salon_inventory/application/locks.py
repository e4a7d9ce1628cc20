"""
Per-(branch, product) locks.

Serializes in-process writers of the same ledger record and its batches.
Writers in other processes are caught by the stores' version checks.
"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from salon_inventory.config import get_logger

logger = get_logger(__name__)


class KeyedLock:
    """asyncio.Lock registry keyed by (branch_id, product_id)."""

    def __init__(self) -> None:
        self._locks: dict[tuple[str, str], asyncio.Lock] = {}
        self._users: dict[tuple[str, str], int] = {}
        self._loop: asyncio.AbstractEventLoop | None = None

    @asynccontextmanager
    async def hold(self, branch_id: str, product_id: str) -> AsyncIterator[None]:
        """
        Hold the lock of one (branch, product) pair.

        Usage:
            async with locks.hold(branch_id, product_id):
                ...
        """
        loop = asyncio.get_running_loop()
        if loop is not self._loop:
            # Locks bind to the loop that first waits on them
            self._locks.clear()
            self._users.clear()
            self._loop = loop

        key = (branch_id, product_id)
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._users[key] = self._users.get(key, 0) + 1
        try:
            if lock.locked():
                logger.debug("stock_lock_waiting", branch_id=branch_id, product_id=product_id)
            async with lock:
                yield
        finally:
            self._users[key] -= 1
            if self._users[key] == 0:
                del self._users[key]
                del self._locks[key]


# Global lock registry
_stock_locks: KeyedLock | None = None


def get_stock_locks() -> KeyedLock:
    """Get the process-wide lock registry."""
    global _stock_locks
    if _stock_locks is None:
        _stock_locks = KeyedLock()
    return _stock_locks
