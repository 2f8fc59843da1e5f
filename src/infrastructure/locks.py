"""
Redis-based distributed lock.

Several API processes start at once behind a load balancer; the lock makes
sure only one of them seeds reference data while the others wait for it
to finish instead of racing on the unique slug constraints.

Implementation uses SET NX EX for acquire and a Lua script for
atomic check-and-delete on release.
"""

from __future__ import annotations

import asyncio
import uuid

import redis.asyncio as aioredis

_RELEASE_SCRIPT = """
if redis.call("get", KEYS[1]) == ARGV[1] then
    return redis.call("del", KEYS[1])
else
    return 0
end
"""


class LockNotAcquired(RuntimeError):
    pass


class DistributedLock:
    def __init__(
        self,
        client: aioredis.Redis,
        key: str,
        ttl_seconds: int = 30,
        wait_seconds: float = 0.0,
        poll_interval: float = 0.2,
    ):
        self.redis = client
        self.key = f"lock:{key}"
        self.ttl = ttl_seconds
        self.wait_seconds = wait_seconds
        self.poll_interval = poll_interval
        self.token = str(uuid.uuid4())

    async def try_acquire(self) -> bool:
        """Single SET NX attempt. Returns True on success."""
        return bool(
            await self.redis.set(self.key, self.token, nx=True, ex=self.ttl)
        )

    async def acquire(self) -> bool:
        """Retry until acquired or ``wait_seconds`` elapse."""
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.wait_seconds
        while True:
            if await self.try_acquire():
                return True
            if loop.time() >= deadline:
                return False
            await asyncio.sleep(self.poll_interval)

    async def release(self) -> None:
        """Release only if we still own the lock (atomic via Lua)."""
        await self.redis.eval(_RELEASE_SCRIPT, 1, self.key, self.token)

    async def __aenter__(self):
        if not await self.acquire():
            raise LockNotAcquired(f"Could not acquire lock: {self.key}")
        return self

    async def __aexit__(self, *args):
        await self.release()
