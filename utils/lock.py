"""Redis locks for the scheduler and the rollup jobs.

Only one API instance runs APScheduler: the one that holds the scheduler lock.
It refreshes a heartbeat key while running, and other instances stay passive
as long as that heartbeat is fresh.
"""

import asyncio
import logging
import time
from contextlib import asynccontextmanager

from redis.exceptions import LockError, LockNotOwnedError, RedisError

from db.redis_database import REDIS_ASYNC_CLIENT
from utils.const import SCHEDULER_HEARTBEAT_KEY, SCHEDULER_LOCK_KEY

logger = logging.getLogger(__name__)

heartbeat_timeout = 300  # seconds


async def acquire_redis_lock(key: str, timeout: int = 60, block: bool = False):
    lock = REDIS_ASYNC_CLIENT.lock(key, timeout=timeout)
    acquired = await lock.acquire(blocking=block)
    return acquired, lock


async def release_redis_lock(lock):
    try:
        await lock.release()
    except LockNotOwnedError:
        # Expired while the holder was still working
        logger.error(f"Failed to release lock {lock.name!r}, lock not owned")


@asynccontextmanager
async def redis_lock(key: str, timeout: int = 60):
    """Non-blocking job lock. Yields whether this caller holds it."""
    acquired, lock = await acquire_redis_lock(key, timeout=timeout, block=False)
    try:
        yield acquired
    finally:
        if acquired:
            await release_redis_lock(lock)


async def _beat():
    await REDIS_ASYNC_CLIENT.set(
        SCHEDULER_HEARTBEAT_KEY, int(time.time()), ex=heartbeat_timeout * 2
    )


async def acquire_scheduler_lock():
    last_heartbeat = await REDIS_ASYNC_CLIENT.get(SCHEDULER_HEARTBEAT_KEY)
    if last_heartbeat and time.time() - int(last_heartbeat) <= heartbeat_timeout:
        logger.info("Scheduler is active on another instance, not acquiring lock")
        return False, None

    acquired, lock = await acquire_redis_lock(
        SCHEDULER_LOCK_KEY, timeout=heartbeat_timeout, block=False
    )
    if not acquired:
        logger.info("Failed to acquire scheduler lock")
        return False, None

    logger.info("Acquired scheduler lock")
    await _beat()
    return True, lock


async def maintain_heartbeat(lock):
    """Refresh the heartbeat and keep the scheduler lock from expiring."""
    while True:
        await asyncio.sleep(heartbeat_timeout // 2)
        await _beat()
        try:
            await lock.reacquire()
        except (LockError, RedisError) as e:
            logger.warning(f"Could not extend scheduler lock: {e}")


async def release_scheduler_lock(lock):
    logger.info("Releasing scheduler lock")
    await release_redis_lock(lock)
    await REDIS_ASYNC_CLIENT.delete(SCHEDULER_HEARTBEAT_KEY)
