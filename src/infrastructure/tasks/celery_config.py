"""
Celery configuration and application setup.

Celery over Redis is the message broker between the account API (producer)
and the notification consumer. Each topic is split into partitions, and each
partition is a dedicated queue:

    user-confirmation-topic.0, user-confirmation-topic.1, ...
    user-login-topic.0, user-login-topic.1, ...

Run exactly one worker with --concurrency=1 per partition queue so a
partition is consumed by one logical worker at a time, in order:

    celery -A src.infrastructure.tasks.celery_config worker \
        -Q user-confirmation-topic.0 --concurrency=1 -n user-group.confirmation.0@%h

Decision: Late acknowledgement (task_acks_late) is what makes delivery
at-least-once: a message is acked only once its task returns, and is handed
back to the broker if the worker dies mid-task.
"""

import logging

from celery import Celery
from config.settings import settings
from kombu import Queue

from src.infrastructure.messaging.partitioning import queue_name

logger = logging.getLogger(__name__)

REGISTRATION_TASK = "notifications.consume_user_confirmation"
LOGIN_TASK = "notifications.consume_user_login"

# Topic -> consumer task name
TOPIC_TASKS = {
    settings.registration_topic: REGISTRATION_TASK,
    settings.login_topic: LOGIN_TASK,
}


def partition_queues(topics: list[str], partitions: int) -> list[Queue]:
    """Declare one durable queue per topic partition."""
    return [
        Queue(queue_name(topic, partition), routing_key=queue_name(topic, partition), durable=True)
        for topic in topics
        for partition in range(partitions)
    ]


celery_app = Celery(
    settings.consumer_group,
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
)

celery_app.conf.update(
    task_serializer=settings.celery_task_serializer,
    accept_content=settings.celery_accept_content,
    timezone=settings.celery_timezone,
    enable_utc=settings.celery_enable_utc,
    task_queues=partition_queues(list(TOPIC_TASKS), settings.topic_partitions),
    # Delivery guarantees
    task_acks_late=settings.celery_task_acks_late,
    task_reject_on_worker_lost=settings.celery_task_reject_on_worker_lost,
    # Bounded broker calls on the publishing side
    broker_connection_timeout=settings.publish_timeout_seconds,
    # Ordering and worker hygiene
    worker_prefetch_multiplier=settings.celery_worker_prefetch_multiplier,
    worker_max_tasks_per_child=settings.celery_worker_max_tasks_per_child,
    # Consumers don't return anything worth keeping
    task_ignore_result=True,
)

celery_app.autodiscover_tasks(["src.infrastructure.tasks.notifications"])

logger.info(
    f"Celery application configured ({len(TOPIC_TASKS)} topics x "
    f"{settings.topic_partitions} partitions)"
)
