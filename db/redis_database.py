import asyncio
import logging
import socket
import time
from enum import Enum
from typing import Any

import redis
import redis.asyncio

from db.config import settings

logger = logging.getLogger(__name__)

socket_keepalive_options = {}
for option, value in (("TCP_KEEPIDLE", 60), ("TCP_KEEPINTVL", 30), ("TCP_KEEPCNT", 3)):
    if hasattr(socket, option):
        socket_keepalive_options[getattr(socket, option)] = value

pool_settings = {
    "max_connections": settings.redis_max_connections,
    "socket_timeout": 10.0,
    "socket_connect_timeout": 5.0,
    "socket_keepalive": True,
    "health_check_interval": 30,
    "retry_on_timeout": True,
    "retry_on_error": [
        redis.exceptions.ConnectionError,
        redis.exceptions.TimeoutError,
        redis.exceptions.BusyLoadingError,
    ],
    # Counters and leaderboard members come back as bytes
    "decode_responses": False,
}
if socket_keepalive_options:
    pool_settings["socket_keepalive_options"] = socket_keepalive_options

TRANSIENT_ERRORS = (
    redis.exceptions.ConnectionError,
    redis.exceptions.TimeoutError,
    # Raised by the connection pool once the event loop is closing
    RuntimeError,
)


class CircuitBreakerState(Enum):
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class RedisCircuitBreaker:
    """
    Stops calling Redis after repeated transient failures.

    Once ``failure_threshold`` calls in a row have failed the breaker opens
    and callers get their fallback value without touching the network. After
    ``recovery_timeout`` seconds one call is let through; its outcome closes
    or re-opens the breaker.
    """

    def __init__(self, failure_threshold: int, recovery_timeout: float):
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout
        self.reset()

    def reset(self):
        self.state = CircuitBreakerState.CLOSED
        self.failure_count = 0
        self.opened_at: float | None = None

    def allow(self) -> bool:
        if self.state != CircuitBreakerState.OPEN:
            return True
        if time.monotonic() - self.opened_at >= self.recovery_timeout:
            self.state = CircuitBreakerState.HALF_OPEN
            return True
        return False

    def record_success(self):
        if self.state != CircuitBreakerState.CLOSED:
            logger.info("Redis recovered, closing circuit breaker")
        self.reset()

    def record_failure(self):
        self.failure_count += 1
        if (
            self.state == CircuitBreakerState.HALF_OPEN
            or self.failure_count >= self.failure_threshold
        ):
            if self.state != CircuitBreakerState.OPEN:
                logger.warning(
                    f"Circuit breaker opened after {self.failure_count} failures"
                )
            self.state = CircuitBreakerState.OPEN
            self.opened_at = time.monotonic()


redis_circuit_breaker = RedisCircuitBreaker(
    failure_threshold=settings.redis_breaker_failure_threshold,
    recovery_timeout=settings.redis_breaker_recovery_timeout,
)


class RedisWrapper:
    """
    Async Redis client with retries, a circuit breaker and fallback values.

    Command methods never raise: on failure they log and return a default,
    which is what the best-effort counter writes and dashboard reads want.
    Code that must tell "Redis is down" apart from "no data" (the rollup
    jobs) uses ``pipeline()`` or ``client`` directly, both of which raise.
    """

    def __init__(self, client: redis.asyncio.Redis):
        self.client = client

    async def _execute_with_retry(self, method_name: str, *args, **kwargs):
        attempts = max(1, settings.redis_retry_attempts)
        for attempt in range(1, attempts + 1):
            try:
                return await getattr(self.client, method_name)(*args, **kwargs)
            except TRANSIENT_ERRORS as e:
                if attempt == attempts:
                    raise
                logger.warning(
                    f"Redis {method_name} failed (attempt {attempt}/{attempts}): {e}"
                )
                await asyncio.sleep(settings.redis_retry_delay * (2 ** (attempt - 1)))

    async def _call(self, method_name: str, default: Any, *args, **kwargs):
        if not redis_circuit_breaker.allow():
            logger.debug(f"Circuit breaker is open, skipping Redis {method_name}")
            return default

        try:
            result = await self._execute_with_retry(method_name, *args, **kwargs)
        except TRANSIENT_ERRORS as e:
            redis_circuit_breaker.record_failure()
            logger.error(f"Redis {method_name} failed after retries: {e}")
            return default
        except redis.exceptions.RedisError as e:
            # Command-level errors (e.g. WRONGTYPE) say nothing about availability
            logger.error(f"Redis {method_name} rejected: {e}")
            return default
        except Exception as e:
            logger.exception(f"Unexpected error in Redis {method_name}: {e}")
            return default

        redis_circuit_breaker.record_success()
        return default if result is None else result

    async def aclose(self):
        await self.client.aclose()

    def get(self, key: str):
        return self._call("get", None, key)

    def set(self, key: str, value: Any, ex: int | None = None):
        return self._call("set", False, key, value, ex=ex)

    def delete(self, *keys):
        return self._call("delete", 0, *keys)

    def expire(self, key: str, seconds: int):
        return self._call("expire", False, key, seconds)

    def incr(self, key: str):
        return self._call("incr", 0, key)

    def pfadd(self, key: str, *values):
        return self._call("pfadd", 0, key, *values)

    def pfcount(self, *keys):
        return self._call("pfcount", 0, *keys)

    def zincrby(self, key: str, amount: float, member: Any):
        return self._call("zincrby", None, key, amount, member)

    def zrevrange(self, key: str, start: int, end: int, withscores: bool = False):
        return self._call("zrevrange", [], key, start, end, withscores=withscores)

    def pipeline(self, transaction: bool = True):
        """Raw pipeline; commands executed through it raise on failure."""
        return self.client.pipeline(transaction=transaction)

    def lock(self, key: str, timeout: int | None = None):
        """Distributed lock on the raw client."""
        return self.client.lock(key, timeout=timeout)

    async def ping(self) -> bool:
        return await self._call("ping", False) is True

    async def health_check(self) -> dict:
        """Ping Redis and report latency plus circuit breaker state."""
        started = time.perf_counter()
        reachable = await self.ping()
        return {
            "status": "healthy" if reachable else "unhealthy",
            "response_time_ms": round((time.perf_counter() - started) * 1000, 2),
            "circuit_breaker_state": redis_circuit_breaker.state.value,
            "failure_count": redis_circuit_breaker.failure_count,
        }


REDIS_ASYNC_CLIENT = RedisWrapper(
    redis.asyncio.Redis(
        connection_pool=redis.asyncio.ConnectionPool.from_url(
            settings.redis_url, **pool_settings
        )
    )
)
