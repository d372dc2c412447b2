"""
Notification consumer Celery tasks.

One task per topic. Each delivery runs the full persist + send sequence;
the outcome decides whether the message is acknowledged or redelivered.

Decision: Redelivery goes through Celery's autoretry machinery rather than a
loop in our code. Backoff, jitter and the retry ceiling are broker
configuration (settings.redelivery_*), so the dispatcher never sleeps or
counts attempts itself.
"""

import asyncio
import logging
from datetime import tzinfo
from typing import Any

import asyncpg
from config.settings import settings

from src.application.dispatch_notification import NotificationDispatcher
from src.application.exceptions import MalformedMessageError
from src.application.notification_consumer import (
    UNKNOWN_USER_ID,
    Acknowledgement,
    EventDecoder,
    NotificationConsumer,
)
from src.application.ports import LoggingErrorReporter
from src.domain.events import EventKind
from src.infrastructure.database.connection import DatabaseConnection
from src.infrastructure.database.postgres_notification_store import PostgresNotificationStore
from src.infrastructure.email.smtp_email_service import SmtpEmailDispatchClient
from src.infrastructure.messaging.wire import decode_login, decode_registration, resolve_zone
from src.infrastructure.tasks.celery_config import LOGIN_TASK, REGISTRATION_TASK, celery_app

logger = logging.getLogger(__name__)


class RedeliveryRequested(Exception):
    """Raised from a task to have the broker deliver the message again."""

    def __init__(self, topic: str, reason: str = "transient dispatch failure"):
        self.topic = topic
        super().__init__(f"Redelivery requested on {topic}: {reason}")


def topic_decoders(zone: tzinfo) -> dict[str, tuple[EventKind, EventDecoder]]:
    return {
        settings.registration_topic: (
            EventKind.REGISTRATION,
            lambda payload: decode_registration(payload, zone),
        ),
        settings.login_topic: (EventKind.LOGIN, lambda payload: decode_login(payload, zone)),
    }


def build_consumer(db: DatabaseConnection) -> NotificationConsumer:
    """Wire a NotificationConsumer against the configured store and SMTP server."""
    zone = resolve_zone(settings.event_timezone)
    reporter = LoggingErrorReporter()
    dispatcher = NotificationDispatcher(
        record_store=PostgresNotificationStore(db),
        email_client=SmtpEmailDispatchClient(
            smtp_host=settings.smtp_host,
            smtp_port=settings.smtp_port,
            smtp_username=settings.smtp_username,
            smtp_password=settings.smtp_password,
            from_email=settings.smtp_from_email,
            use_tls=settings.smtp_use_tls,
            timeout=settings.email_timeout_seconds,
        ),
        error_reporter=reporter,
        store_timeout=settings.store_timeout_seconds,
        email_timeout=settings.email_timeout_seconds,
    )
    return NotificationConsumer(
        dispatcher=dispatcher, decoders=topic_decoders(zone), error_reporter=reporter
    )


async def consume_message(topic: str, payload: str) -> Acknowledgement:
    """
    Consume one message with a short-lived connection pool.

    A store that can't even be reached is a transient failure like any other
    store error: the message is redelivered.
    """
    db = DatabaseConnection.from_settings(
        settings, max_connections=1, command_timeout=settings.store_timeout_seconds
    )
    try:
        await asyncio.wait_for(db.connect(), timeout=settings.store_timeout_seconds)
    except (OSError, TimeoutError, asyncpg.PostgresError) as e:
        logger.warning(f"Notification store unreachable, redelivering message on {topic}: {e}")
        return Acknowledgement.REDELIVER

    try:
        return await build_consumer(db).consume(topic, payload)
    finally:
        await db.disconnect()


def _run(task: Any, topic: str, payload: str) -> str:
    logger.info(
        f"[CELERY] Received message on {topic} "
        f"(Task: {task.request.id}, delivery {task.request.retries + 1})"
    )
    ack = asyncio.run(consume_message(topic, payload))
    if ack is Acknowledgement.REDELIVER:
        if task.max_retries is not None and task.request.retries >= task.max_retries:
            report_undelivered(topic, payload, deliveries=task.request.retries + 1)
        # Caught by autoretry_for: the message is republished with backoff,
        # or the task fails once max_retries is used up
        raise RedeliveryRequested(topic)
    return ack.value


def report_undelivered(topic: str, payload: str, deliveries: int) -> None:
    """Send a notification that ran out of redeliveries to the operational channel."""
    kind, decode = topic_decoders(resolve_zone(settings.event_timezone))[topic]
    try:
        user_id = decode(payload).user_id
    except MalformedMessageError:
        user_id = UNKNOWN_USER_ID
    logger.error(
        f"Giving up on {kind.value} message for user {user_id} after {deliveries} deliveries"
    )
    LoggingErrorReporter().report(
        kind, user_id, f"redelivery limit reached after {deliveries} deliveries"
    )


_redelivery_policy: dict[str, Any] = {
    "autoretry_for": (RedeliveryRequested,),
    "retry_backoff": True,
    "retry_backoff_max": settings.redelivery_backoff_max_seconds,
    "retry_jitter": settings.redelivery_jitter,
    "max_retries": settings.redelivery_max_retries,
}


@celery_app.task(bind=True, name=REGISTRATION_TASK, **_redelivery_policy)
def consume_user_confirmation(self: Any, payload: str) -> str:
    """Consume a RegistrationEvent and send the verification-code email."""
    return _run(self, settings.registration_topic, payload)


@celery_app.task(bind=True, name=LOGIN_TASK, **_redelivery_policy)
def consume_user_login(self: Any, payload: str) -> str:
    """Consume a LoginEvent and send the login-notice email."""
    return _run(self, settings.login_topic, payload)
