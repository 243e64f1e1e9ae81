"""
Per-trip Redis lock tests (mocked Redis).

Demonstrates:
1. A held lock cannot be acquired a second time.
2. Release only deletes the key through the owner-checking Lua script.
3. ``TripLocks`` hands out one key per trip.
"""

from unittest.mock import AsyncMock

import pytest

from tripfare.infrastructure.locks import DistributedLock, LockNotAcquired, TripLocks


class TestDistributedLock:
    @pytest.mark.asyncio
    async def test_acquire_succeeds(self):
        mock_redis = AsyncMock()
        mock_redis.set = AsyncMock(return_value=True)

        lock = DistributedLock(mock_redis, "trip:abc", ttl_seconds=10)
        assert await lock.acquire() is True
        mock_redis.set.assert_awaited_once_with(
            "lock:trip:abc", lock.token, nx=True, ex=10
        )

    @pytest.mark.asyncio
    async def test_acquire_fails_if_held(self):
        mock_redis = AsyncMock()
        mock_redis.set = AsyncMock(return_value=None)

        lock = DistributedLock(mock_redis, "trip:abc", ttl_seconds=10)
        assert await lock.acquire() is False

    @pytest.mark.asyncio
    async def test_release_passes_owner_token(self):
        mock_redis = AsyncMock()
        mock_redis.set = AsyncMock(return_value=True)
        mock_redis.eval = AsyncMock(return_value=1)

        lock = DistributedLock(mock_redis, "trip:abc", ttl_seconds=10)
        await lock.acquire()
        await lock.release()

        args = mock_redis.eval.await_args.args
        assert args[1:] == (1, "lock:trip:abc", lock.token)

    @pytest.mark.asyncio
    async def test_context_manager_acquire_fail_raises(self):
        mock_redis = AsyncMock()
        mock_redis.set = AsyncMock(return_value=False)

        lock = DistributedLock(mock_redis, "trip:abc", ttl_seconds=10)
        with pytest.raises(LockNotAcquired, match="Could not acquire lock"):
            async with lock:
                pass
        mock_redis.eval.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_context_manager_releases_on_error(self):
        mock_redis = AsyncMock()
        mock_redis.set = AsyncMock(return_value=True)
        mock_redis.eval = AsyncMock(return_value=1)

        with pytest.raises(ValueError):
            async with DistributedLock(mock_redis, "trip:abc"):
                raise ValueError("boom")
        mock_redis.eval.assert_awaited_once()


class TestTripLocks:
    def test_one_key_per_trip(self):
        locks = TripLocks(AsyncMock(), ttl_seconds=5)
        first, second = locks("trip-1"), locks("trip-2")
        assert first.key == "lock:trip:trip-1"
        assert second.key == "lock:trip:trip-2"
        assert first.ttl == 5
        assert first.token != locks("trip-1").token
