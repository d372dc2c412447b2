"""
Notification consumer.

Turns a raw broker message into a dispatch and decides whether the broker
should consider it done (ACK) or deliver it again (REDELIVER).
"""

import logging
from collections.abc import Callable, Mapping
from enum import Enum
from uuid import UUID

from src.application.dispatch_notification import NotificationDispatcher
from src.application.exceptions import MalformedMessageError, UnknownTopicError
from src.application.ports import ErrorReporter
from src.domain.events import AccountEvent, EventKind

logger = logging.getLogger(__name__)

EventDecoder = Callable[[bytes | str], AccountEvent]

# Reported for payloads whose userId could not be read
UNKNOWN_USER_ID = UUID(int=0)


class Acknowledgement(Enum):
    ACK = "ack"
    REDELIVER = "redeliver"


class NotificationConsumer:
    """
    Per-topic message handler.

    Outcome mapping:
    - SENT: ACK
    - TRANSIENT_FAILURE: REDELIVER (the broker's retry policy decides when and how often)
    - PERMANENT_FAILURE: ACK, the dispatcher has already reported it

    A payload that cannot be decoded will never succeed, so it is reported
    and acknowledged instead of being redelivered forever.
    """

    def __init__(
        self,
        dispatcher: NotificationDispatcher,
        decoders: Mapping[str, tuple[EventKind, EventDecoder]],
        error_reporter: ErrorReporter,
    ):
        """
        Args:
            dispatcher: Runs the persist + send sequence
            decoders: Topic name -> (event kind, payload decoder)
            error_reporter: Operational channel for poison messages
        """
        self.dispatcher = dispatcher
        self.decoders = dict(decoders)
        self.error_reporter = error_reporter

    async def consume(self, topic: str, payload: bytes | str) -> Acknowledgement:
        """
        Handle one delivery of one message.

        Raises:
            UnknownTopicError: If no decoder is registered for the topic
        """
        if topic not in self.decoders:
            raise UnknownTopicError(topic)
        kind, decode = self.decoders[topic]

        try:
            event = decode(payload)
        except MalformedMessageError as e:
            logger.error(f"Dropping malformed message on {topic}: {e}")
            self.error_reporter.report(kind, UNKNOWN_USER_ID, str(e))
            return Acknowledgement.ACK

        logger.info(f"Consuming {kind.value} message for user {event.user_id}")
        outcome = await self.dispatcher.dispatch(event)

        if outcome.should_redeliver:
            logger.info(f"Requesting redelivery of {kind.value} message for user {event.user_id}")
            return Acknowledgement.REDELIVER
        return Acknowledgement.ACK

