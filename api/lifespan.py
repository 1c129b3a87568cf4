"""Application lifecycle management."""

import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from fastapi import FastAPI

from api.scheduler import setup_scheduler
from db import database
from db.config import settings
from db.redis_database import REDIS_ASYNC_CLIENT
from utils.lock import (
    acquire_scheduler_lock,
    maintain_heartbeat,
    release_scheduler_lock,
)

logger = logging.getLogger(__name__)


@dataclass
class SchedulerHandle:
    scheduler: AsyncIOScheduler
    lock: object
    heartbeat: asyncio.Task


async def start_scheduler() -> SchedulerHandle | None:
    """Start the rollup scheduler if this instance wins the scheduler lock."""
    if settings.disable_all_scheduler:
        return None

    acquired, lock = await acquire_scheduler_lock()
    if not acquired:
        return None

    try:
        scheduler = AsyncIOScheduler(timezone=settings.analytics_timezone)
        setup_scheduler(scheduler)
        scheduler.start()
    except Exception:
        await release_scheduler_lock(lock)
        raise

    return SchedulerHandle(scheduler, lock, asyncio.create_task(maintain_heartbeat(lock)))


async def stop_scheduler(handle: SchedulerHandle):
    handle.heartbeat.cancel()
    try:
        await handle.heartbeat
    except asyncio.CancelledError:
        logger.info("Heartbeat task cancelled")

    try:
        handle.scheduler.shutdown(wait=False)
    except Exception as e:
        logger.exception("Error shutting down scheduler, %s", e)
    finally:
        await release_scheduler_lock(handle.lock)


@asynccontextmanager
async def lifespan(_: FastAPI):
    """Check the database, run the scheduler on one instance, close pools on exit."""
    await database.init()
    handle = await start_scheduler()

    yield

    if handle:
        await stop_scheduler(handle)
    await database.close()
    await REDIS_ASYNC_CLIENT.aclose()
