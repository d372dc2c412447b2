"""
Notification dispatcher.

Drives one delivery attempt for a received account event:

    Received -> Persisting -> Dispatching -> {Sent | TransientFailure | PermanentFailure}

Decision: persist-before-send. The NotificationRecord is written before the
email is attempted, so every attempt is audited even if sending crashes. The
cost is that records describe attempts, not successful deliveries: a message
redelivered K times leaves K records behind. There is no deduplication.
"""

import asyncio
import logging
from typing import Any

from src.application.email_service import EmailDispatchClient, EmailTemplate
from src.application.exceptions import SendError, StoreError
from src.application.ports import ErrorReporter
from src.domain.events import AccountEvent, LoginEvent, RegistrationEvent
from src.domain.notification import DispatchOutcome, NotificationRecord, NotificationType
from src.domain.notification_repository import NotificationRecordStore

logger = logging.getLogger(__name__)


def _render_plan(event: AccountEvent) -> tuple[NotificationType, EmailTemplate, dict[str, Any]]:
    if isinstance(event, RegistrationEvent):
        return (
            NotificationType.USER_VERIFICATION,
            EmailTemplate.USER_VERIFICATION,
            {
                "verificationCode": event.code,
                "verificationCodeExpiration": event.code_expiry,
            },
        )
    if isinstance(event, LoginEvent):
        return (
            NotificationType.USER_LOGIN,
            EmailTemplate.USER_LOGIN,
            {"userLoginTime": event.login_time},
        )
    raise TypeError(f"Unsupported event type: {type(event).__name__}")


class NotificationDispatcher:
    """
    Records and sends the notification for one account event.

    The dispatcher never acknowledges anything itself; it returns a
    DispatchOutcome and the consumer turns that into ack or redelivery.
    Safe to share between workers as long as the store and email client are.
    """

    def __init__(
        self,
        record_store: NotificationRecordStore,
        email_client: EmailDispatchClient,
        error_reporter: ErrorReporter,
        store_timeout: float = 5.0,
        email_timeout: float = 10.0,
    ):
        self.record_store = record_store
        self.email_client = email_client
        self.error_reporter = error_reporter
        self.store_timeout = store_timeout
        self.email_timeout = email_timeout

    async def dispatch(self, event: AccountEvent) -> DispatchOutcome:
        """
        Persist a NotificationRecord, then send the matching email.

        Args:
            event: The decoded account event

        Returns:
            SENT, TRANSIENT_FAILURE (store or transport trouble, redeliver) or
            PERMANENT_FAILURE (already reported, acknowledge)

        Note: asyncio.CancelledError is not caught. A cancelled dispatch leaves
        the message unacknowledged, possibly with a record and no email.
        """
        notification_type, template, variables = _render_plan(event)

        try:
            await asyncio.wait_for(
                self.record_store.save(NotificationRecord.attempt(notification_type)),
                timeout=self.store_timeout,
            )
        except StoreError as e:
            logger.warning(
                f"Could not record {notification_type.value} for user {event.user_id}: {e}"
            )
            return DispatchOutcome.transient(str(e))
        except TimeoutError:
            logger.warning(
                f"Recording {notification_type.value} for user {event.user_id} "
                f"timed out after {self.store_timeout}s"
            )
            return DispatchOutcome.transient("notification store timed out")

        logger.info(f"Recorded {notification_type.value} attempt for user {event.user_id}")

        try:
            await asyncio.wait_for(
                self.email_client.send(template, event.email, variables),
                timeout=self.email_timeout,
            )
        except SendError as e:
            if e.is_transient:
                logger.warning(
                    f"Transient failure sending {template.template_id} to {event.email}: {e}"
                )
                return DispatchOutcome.transient(str(e))
            logger.error(f"Permanent failure sending {template.template_id} to {event.email}: {e}")
            self.error_reporter.report(event.kind, event.user_id, str(e))
            return DispatchOutcome.permanent(str(e))
        except TimeoutError:
            logger.warning(
                f"Sending {template.template_id} to {event.email} "
                f"timed out after {self.email_timeout}s"
            )
            return DispatchOutcome.transient("email dispatch timed out")

        logger.info(f"Sent {template.template_id} email to {event.email}")
        return DispatchOutcome.sent()
