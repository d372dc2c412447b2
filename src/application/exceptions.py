"""
Application and pipeline exceptions.

Messaging failures carry a `kind` so callers decide retry-vs-fatal on
structured data rather than on exception messages.
"""

from enum import Enum


class NotificationPipelineError(Exception):
    """Base exception for publish, store and send failures."""

    def __init__(self, kind: Enum, message: str):
        self.kind = kind
        super().__init__(message)


class PublishErrorKind(Enum):
    UNAVAILABLE = "unavailable"
    SERIALIZATION = "serialization"


class PublishError(NotificationPipelineError):
    """Raised when an event could not be handed to the broker."""

    def __init__(self, kind: PublishErrorKind, message: str):
        super().__init__(kind, f"Failed to publish event ({kind.value}): {message}")


class StoreErrorKind(Enum):
    UNAVAILABLE = "unavailable"
    CONSTRAINT_VIOLATION = "constraint_violation"


class StoreError(NotificationPipelineError):
    """Raised when a notification record could not be durably written."""

    def __init__(self, kind: StoreErrorKind, message: str):
        super().__init__(kind, f"Failed to store notification record ({kind.value}): {message}")


class SendErrorKind(Enum):
    TRANSIENT = "transient"
    PERMANENT = "permanent"


class SendError(NotificationPipelineError):
    """
    Raised by an EmailDispatchClient.

    TRANSIENT: network or transport trouble, expected to succeed on retry.
    PERMANENT: bad address, template error, rejected message; retrying won't help.
    """

    def __init__(self, kind: SendErrorKind, message: str):
        super().__init__(kind, f"Failed to send email ({kind.value}): {message}")

    @property
    def is_transient(self) -> bool:
        return self.kind is SendErrorKind.TRANSIENT


class MalformedMessageError(Exception):
    """Raised when a message payload cannot be decoded into an event."""

    pass


class UnknownTopicError(Exception):
    """Raised when a message arrives on a topic nobody handles."""

    def __init__(self, topic: str):
        self.topic = topic
        super().__init__(f"No handler registered for topic '{topic}'")


class InvalidCredentialsError(Exception):
    """Raised when authentication credentials are invalid."""

    def __init__(self) -> None:
        super().__init__("Invalid email or password")


class RegistrationFailedError(Exception):
    """Raised when a registration could not be completed because its event was not published."""

    def __init__(self, email: str):
        self.email = email
        super().__init__(f"Registration for '{email}' could not be completed, please retry")
