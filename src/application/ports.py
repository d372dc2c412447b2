"""
Protocols for collaborators the use cases depend on.

These allow the application layer to remain agnostic of Celery, bcrypt and
whatever alerting backend operations wires in.
"""

import logging
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from src.domain.events import AccountEvent, EventKind


@dataclass(frozen=True)
class PublishAck:
    """Broker acknowledgement of a published event."""

    topic: str
    partition: int
    message_id: str


class EventPublisher(Protocol):
    """Hands account events to the message broker."""

    def publish(self, event: AccountEvent) -> PublishAck:
        """
        Publish an event, partitioned by its user_id.

        Returns:
            Where the broker accepted the message

        Raises:
            PublishError: UNAVAILABLE or SERIALIZATION
        """
        ...


class PasswordHasher(Protocol):
    def hash(self, password: str) -> str: ...

    def verify(self, password: str, password_hash: str) -> bool: ...


class ErrorReporter(Protocol):
    """Operational error channel for notifications that will never be delivered."""

    def report(self, kind: EventKind, user_id: UUID, reason: str) -> None: ...


operational_logger = logging.getLogger("notifications.operational")


class LoggingErrorReporter:
    """ErrorReporter that writes to the operational log stream."""

    def report(self, kind: EventKind, user_id: UUID, reason: str) -> None:
        operational_logger.error(
            f"Notification permanently failed for {kind.value} (user {user_id}): {reason}",
            extra={
                "type": "notification_failure",
                "event_kind": kind.value,
                "user_id": str(user_id),
            },
        )
