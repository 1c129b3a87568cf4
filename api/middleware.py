import logging
import os
import signal
import time
from threading import Lock

import dramatiq
from dramatiq.middleware import Retries as OriginalRetries, Shutdown, SkipMessage
from fastapi.requests import Request
from fastapi.responses import Response
from starlette.middleware.base import BaseHTTPMiddleware

from utils import const
from utils.network import get_client_ip

logger = logging.getLogger(__name__)


def internal_error_response() -> Response:
    return Response(
        content="Internal Server Error. Check the server log.",
        status_code=500,
        headers=const.NO_CACHE_HEADERS,
    )


class SecureLoggingMiddleware(BaseHTTPMiddleware):
    """One access line per request, with the resolved client address."""

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        logger.info(
            '%s - "%s %s" %s %s',
            get_client_ip(request),
            request.method,
            request.url.path,
            response.status_code,
            response.headers.get("X-Process-Time", ""),
        )
        return response


class TimingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        started = time.perf_counter()
        try:
            response = await call_next(request)
        except RuntimeError as exc:
            # Client went away before the handler produced a response
            if str(exc) == "No response returned." and await request.is_disconnected():
                response = Response(status_code=204)
            else:
                logger.exception(f"Internal Server Error: {exc}")
                response = internal_error_response()
        except Exception as exc:
            logger.exception(f"Internal Server Error: {exc}")
            response = internal_error_response()

        response.headers["X-Process-Time"] = f"{time.perf_counter() - started:.4f} seconds"
        return response


class MaxTasksPerChild(dramatiq.Middleware):
    """Ask the parent to replace this worker process after ``max_tasks`` messages."""

    def __init__(self, max_tasks=100):
        self._lock = Lock()
        self.remaining = max_tasks
        self.signaled = False
        self.logger = dramatiq.get_logger("api.middleware", MaxTasksPerChild)

    def before_process_message(self, broker, message):
        with self._lock:
            exhausted = self.remaining <= 0
        if exhausted:
            self.logger.warning("Task budget used up, requeueing %s.", message.message_id)
            broker.enqueue(message, delay=30000)
            raise SkipMessage()

    def after_process_message(self, broker, message, *, result=None, exception=None):
        with self._lock:
            self.remaining -= 1
            if self.remaining > 0 or self.signaled:
                return
            self.signaled = True

        self.logger.warning("Task budget used up, signaling parent for a fresh worker.")
        os.kill(os.getppid(), getattr(signal, "SIGHUP", signal.SIGTERM))


class Retries(OriginalRetries):
    """Do not retry messages interrupted by a worker shutdown."""

    def after_process_message(self, broker, message, *, result=None, exception=None):
        if isinstance(exception, Shutdown):
            message.fail()
            return

        return super().after_process_message(
            broker, message, result=result, exception=exception
        )
