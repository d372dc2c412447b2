"""
Celery-backed EventPublisher.

Serializes an account event and sends it to the consumer task of its topic,
on the partition queue chosen from the event's user_id.
"""

import logging
from datetime import UTC, tzinfo

from celery import Celery
from kombu.exceptions import OperationalError

from src.application.exceptions import PublishError, PublishErrorKind
from src.application.ports import PublishAck
from src.domain.events import AccountEvent, EventKind
from src.infrastructure.messaging.partitioning import partition_for, queue_name
from src.infrastructure.messaging.wire import encode_event

logger = logging.getLogger(__name__)


class CeleryEventPublisher:
    """
    EventPublisher implementation on top of a Celery app.

    send_task returns once the broker has accepted the message, so publish is
    synchronous from the caller's point of view. Publishing needs no
    coordination between callers; ordering comes from the partition key.
    """

    def __init__(
        self,
        app: Celery,
        topics: dict[EventKind, str],
        topic_tasks: dict[str, str],
        partitions: int,
        zone: tzinfo = UTC,
        publish_timeout: float = 5.0,
    ):
        """
        Args:
            app: Celery application bound to the broker
            topics: Event kind -> topic name
            topic_tasks: Topic name -> consumer task name
            partitions: Partitions per topic
            zone: Zone the wire timestamps are rendered in
            publish_timeout: Upper bound on broker reconnect attempts, in seconds
        """
        self.app = app
        self.topics = topics
        self.topic_tasks = topic_tasks
        self.partitions = partitions
        self.zone = zone
        # Kombu retries with growing intervals; keep the total under the timeout
        self.retry_policy = {
            "max_retries": 3,
            "interval_start": 0,
            "interval_step": publish_timeout / 6,
            "interval_max": publish_timeout / 3,
        }

    def publish(self, event: AccountEvent) -> PublishAck:
        """
        Publish an event.

        Raises:
            PublishError: SERIALIZATION if the event can't be encoded,
                UNAVAILABLE if the broker can't be reached
        """
        try:
            payload = encode_event(event, self.zone)
        except (TypeError, ValueError) as e:
            raise PublishError(PublishErrorKind.SERIALIZATION, str(e)) from e

        topic = self.topics[event.kind]
        partition = partition_for(event.user_id, self.partitions)
        queue = queue_name(topic, partition)

        try:
            result = self.app.send_task(
                self.topic_tasks[topic],
                args=[payload.decode("utf-8")],
                queue=queue,
                routing_key=queue,
                retry=True,
                retry_policy=self.retry_policy,
            )
        except (OperationalError, OSError) as e:
            logger.error(f"Broker unavailable while publishing to {queue}: {e}")
            raise PublishError(PublishErrorKind.UNAVAILABLE, str(e)) from e

        logger.info(
            f"Published {event.kind.value} for user {event.user_id} to {queue} ({result.id})"
        )
        return PublishAck(topic=topic, partition=partition, message_id=str(result.id))
