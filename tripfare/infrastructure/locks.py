"""
Redis-based distributed lock.

Serializes writers to the same trip across API processes: each lifecycle
transition runs its read-check-write-commit cycle under ``lock:trip:<id>``,
so the next holder reads what the previous one committed.  The
optimistic ``updated_at`` check in ``TripRepository.save`` still guards the
write if a lock expires mid-operation.

Implementation uses SET NX EX for acquire and a Lua script for
atomic check-and-delete on release.
"""

from __future__ import annotations

import uuid

import redis.asyncio as aioredis

from tripfare.domain.exceptions import TripFareError


class LockNotAcquired(TripFareError):
    """Another writer holds the lock."""


class DistributedLock:
    def __init__(
        self, client: aioredis.Redis, key: str, ttl_seconds: int = 30
    ):
        self.redis = client
        self.key = f"lock:{key}"
        self.ttl = ttl_seconds
        self.token = str(uuid.uuid4())

    async def acquire(self) -> bool:
        """Try to acquire. Returns True on success."""
        return bool(
            await self.redis.set(self.key, self.token, nx=True, ex=self.ttl)
        )

    async def release(self) -> None:
        """Release only if we still own the lock (atomic via Lua)."""
        lua = """
        if redis.call("get", KEYS[1]) == ARGV[1] then
            return redis.call("del", KEYS[1])
        else
            return 0
        end
        """
        await self.redis.eval(lua, 1, self.key, self.token)

    # context-manager support
    async def __aenter__(self):
        acquired = await self.acquire()
        if not acquired:
            raise LockNotAcquired(f"Could not acquire lock: {self.key}")
        return self

    async def __aexit__(self, *args):
        await self.release()


class TripLocks:
    """Factory handing out one ``DistributedLock`` per trip id."""

    def __init__(self, client: aioredis.Redis, ttl_seconds: int = 10):
        self.redis = client
        self.ttl = ttl_seconds

    def __call__(self, trip_id: str) -> DistributedLock:
        return DistributedLock(self.redis, f"trip:{trip_id}", ttl_seconds=self.ttl)
