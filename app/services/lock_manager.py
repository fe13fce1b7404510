import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

logger = logging.getLogger(__name__)


class ResourceLockManager:
    """One asyncio.Lock per resource id, created on first use and kept for the process lifetime."""

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}

    def get_lock(self, resource_id: str) -> asyncio.Lock:
        lock = self._locks.get(resource_id)
        if lock is None:
            # setdefault is a single step with no await, so two tasks racing on an
            # unseen id always end up sharing the lock that was stored first.
            lock = self._locks.setdefault(resource_id, asyncio.Lock())
            logger.debug("Lock registered for resource %s", resource_id)
        return lock

    @asynccontextmanager
    async def acquire(self, resource_id: str) -> AsyncIterator[None]:
        lock = self.get_lock(resource_id)
        async with lock:
            yield

    def is_locked(self, resource_id: str) -> bool:
        lock = self._locks.get(resource_id)
        return lock is not None and lock.locked()

    def __contains__(self, resource_id: str) -> bool:
        return resource_id in self._locks

    def __len__(self) -> int:
        return len(self._locks)
