# Desc: Dramatiq broker for the analytics actors.
# The API process only enqueues; workers start with `dramatiq api.task`.
import dramatiq
from dramatiq.brokers.redis import RedisBroker
from dramatiq.middleware import (
    AsyncIO,
    AgeLimit,
    TimeLimit,
    ShutdownNotifications,
    Callbacks,
    Pipelines,
)

from api.middleware import MaxTasksPerChild, Retries
from db.config import settings


def create_broker() -> RedisBroker:
    return RedisBroker(
        url=settings.redis_url,
        namespace=settings.worker_queue_namespace,
        middleware=[
            AgeLimit(max_age=settings.worker_message_max_age),
            TimeLimit(),
            ShutdownNotifications(),
            Callbacks(),
            Pipelines(),
            Retries(max_retries=settings.worker_max_retries),
            AsyncIO(),
            MaxTasksPerChild(settings.worker_max_tasks_per_child),
        ],
    )


redis_broker = create_broker()
dramatiq.set_broker(redis_broker)
