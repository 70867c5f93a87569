"""
Per-task serialization of analysis cycles.

Within one process an asyncio.Lock per task id is used. When a Redis client
is given, a Redis lock is held as well so that several API workers never
recompute the same task at once.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, Optional

from redis.asyncio import Redis
from redis.exceptions import LockError, RedisError

from exceptions.exceptions import UpstreamUnavailableError

log = logging.getLogger(__name__)

LOCK_KEY_PREFIX = "plagiarism:task-lock"


class TaskLocks:
    """
    Registry of task-keyed locks.

    Args:
        redis_client: Optional Redis client for the cross-process lock
        lock_timeout: Seconds after which a Redis lock of a crashed holder expires;
            a live holder keeps renewing it
    """

    def __init__(self, redis_client: Optional[Redis] = None, lock_timeout: float = 300.0):
        self.redis = redis_client
        self.lock_timeout = lock_timeout
        self._locks: Dict[str, asyncio.Lock] = {}
        self._waiters: Dict[str, int] = {}

    def is_locked(self, task_id: str) -> bool:
        lock = self._locks.get(task_id)
        return lock is not None and lock.locked()

    @asynccontextmanager
    async def hold(self, task_id: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(task_id, asyncio.Lock())
        self._waiters[task_id] = self._waiters.get(task_id, 0) + 1
        try:
            async with lock:
                if self.redis is None:
                    yield
                else:
                    async with self._redis_lock(task_id):
                        yield
        finally:
            self._waiters[task_id] -= 1
            if self._waiters[task_id] == 0:
                del self._waiters[task_id]
                del self._locks[task_id]

    @asynccontextmanager
    async def _redis_lock(self, task_id: str) -> AsyncIterator[None]:
        lock = self.redis.lock(
            f"{LOCK_KEY_PREFIX}:{task_id}",
            timeout=self.lock_timeout,
            blocking_timeout=self.lock_timeout,
        )
        try:
            acquired = await lock.acquire()
        except RedisError as e:
            raise UpstreamUnavailableError(f"failed to acquire task lock: {e}") from e
        if not acquired:
            raise UpstreamUnavailableError(f"timed out waiting for the lock of task {task_id}")

        renewal = asyncio.ensure_future(self._keep_alive(lock, task_id))
        try:
            yield
        finally:
            renewal.cancel()
            await asyncio.gather(renewal, return_exceptions=True)
            try:
                await lock.release()
            except (LockError, RedisError) as e:
                log.warning(f"[Task {task_id}] Failed to release task lock: {e}")

    async def _keep_alive(self, lock, task_id: str) -> None:
        """Reset the lock's expiry every third of its timeout while the cycle runs."""
        while True:
            await asyncio.sleep(self.lock_timeout / 3)
            try:
                await lock.extend(self.lock_timeout, replace_ttl=True)
            except (LockError, RedisError) as e:
                log.warning(f"[Task {task_id}] Failed to extend task lock: {e}")
