"""
Tests for utils/lock.py

Covers:
- Heartbeat keeps running when extending the scheduler lock fails
- Heartbeat key refreshed on every beat
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
import redis

from utils import lock as lock_utils
from utils.const import SCHEDULER_HEARTBEAT_KEY


def stop_after(beats: int):
    return AsyncMock(side_effect=[None] * beats + [asyncio.CancelledError()])


class TestMaintainHeartbeat:
    @pytest.mark.asyncio
    async def test_survives_connection_errors(self, fake_redis, monkeypatch):
        monkeypatch.setattr(lock_utils, "asyncio", MagicMock(sleep=stop_after(3)))
        scheduler_lock = MagicMock()
        scheduler_lock.reacquire = AsyncMock(
            side_effect=[
                redis.exceptions.ConnectionError("down"),
                redis.exceptions.LockError("lost"),
                True,
            ]
        )

        with pytest.raises(asyncio.CancelledError):
            await lock_utils.maintain_heartbeat(scheduler_lock)

        assert scheduler_lock.reacquire.await_count == 3

    @pytest.mark.asyncio
    async def test_refreshes_heartbeat_key(self, fake_redis, monkeypatch):
        monkeypatch.setattr(lock_utils, "asyncio", MagicMock(sleep=stop_after(1)))
        scheduler_lock = MagicMock()
        scheduler_lock.reacquire = AsyncMock(return_value=True)

        with pytest.raises(asyncio.CancelledError):
            await lock_utils.maintain_heartbeat(scheduler_lock)

        assert await fake_redis.exists(SCHEDULER_HEARTBEAT_KEY) == 1
        assert await fake_redis.ttl(SCHEDULER_HEARTBEAT_KEY) > 0
