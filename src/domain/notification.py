"""
Notification records and dispatch outcomes.

A NotificationRecord is an audit entry meaning "delivery of a notification of
this type was attempted at this time". One record is written per attempt, so
broker redelivery legitimately produces several records for one event.
"""

import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum


class NotificationType(Enum):
    USER_VERIFICATION = "USER_VERIFICATION"
    USER_LOGIN = "USER_LOGIN"


@dataclass(frozen=True)
class NotificationRecord:
    """Append-only audit record of one delivery attempt."""

    type: NotificationType
    sent_at: datetime
    id: uuid.UUID = field(default_factory=uuid.uuid4)

    @classmethod
    def attempt(
        cls, notification_type: NotificationType, now: datetime | None = None
    ) -> "NotificationRecord":
        return cls(type=notification_type, sent_at=now or datetime.now(UTC))


class DispatchStatus(Enum):
    SENT = "sent"
    TRANSIENT_FAILURE = "transient_failure"
    PERMANENT_FAILURE = "permanent_failure"


@dataclass(frozen=True)
class DispatchOutcome:
    """
    Result of one delivery attempt.

    Never persisted; it only drives the acknowledge-or-redeliver decision.
    """

    status: DispatchStatus
    reason: str | None = None

    @classmethod
    def sent(cls) -> "DispatchOutcome":
        return cls(DispatchStatus.SENT)

    @classmethod
    def transient(cls, reason: str) -> "DispatchOutcome":
        return cls(DispatchStatus.TRANSIENT_FAILURE, reason)

    @classmethod
    def permanent(cls, reason: str) -> "DispatchOutcome":
        return cls(DispatchStatus.PERMANENT_FAILURE, reason)

    @property
    def should_redeliver(self) -> bool:
        return self.status is DispatchStatus.TRANSIENT_FAILURE
