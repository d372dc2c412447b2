"""
Wire format for account events.

One JSON object per message, camelCase field names:

    RegistrationEvent: {userId, email, verificationCode, verificationCodeExpiration}
    LoginEvent:        {userId, email, userLoginTime}

Timestamps are rendered as "yyyy-MM-ddTHH:mm:ss" with no offset. Producer and
consumer agree on the zone out of band (settings.event_timezone).

Decision: Pydantic models give us validation on the consumer side and a
stable field order on the producer side, so encoding the same event twice
yields byte-identical payloads.
"""

from datetime import UTC, datetime, tzinfo
from uuid import UUID
from zoneinfo import ZoneInfo

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_serializer

from src.application.exceptions import MalformedMessageError
from src.domain.events import AccountEvent, LoginEvent, RegistrationEvent

WIRE_TIME_FORMAT = "%Y-%m-%dT%H:%M:%S"


def resolve_zone(name: str) -> tzinfo:
    return UTC if name.upper() == "UTC" else ZoneInfo(name)


def to_wire_time(value: datetime, zone: tzinfo) -> datetime:
    """Convert an aware datetime to a naive wall-clock time in the wire zone."""
    if value.tzinfo is None:
        raise ValueError("Event timestamps must be timezone-aware")
    return value.astimezone(zone).replace(tzinfo=None, microsecond=0)


def from_wire_time(value: datetime, zone: tzinfo) -> datetime:
    if value.tzinfo is not None:
        return value
    return value.replace(tzinfo=zone)


class _WireMessage(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    user_id: UUID = Field(alias="userId")
    email: str = Field(min_length=1)


class RegistrationMessage(_WireMessage):
    verification_code: str = Field(alias="verificationCode", min_length=1)
    verification_code_expiration: datetime = Field(alias="verificationCodeExpiration")

    @field_serializer("verification_code_expiration")
    def _format_expiration(self, value: datetime) -> str:
        return value.strftime(WIRE_TIME_FORMAT)


class LoginMessage(_WireMessage):
    user_login_time: datetime = Field(alias="userLoginTime")

    @field_serializer("user_login_time")
    def _format_login_time(self, value: datetime) -> str:
        return value.strftime(WIRE_TIME_FORMAT)


def encode_event(event: AccountEvent, zone: tzinfo = UTC) -> bytes:
    """
    Serialize an event to its wire payload.

    Raises:
        ValueError: If the event cannot be represented (e.g. naive timestamps)
        TypeError: If the object is not an account event
    """
    message: _WireMessage
    if isinstance(event, RegistrationEvent):
        message = RegistrationMessage(
            user_id=event.user_id,
            email=event.email,
            verification_code=event.code,
            verification_code_expiration=to_wire_time(event.code_expiry, zone),
        )
    elif isinstance(event, LoginEvent):
        message = LoginMessage(
            user_id=event.user_id,
            email=event.email,
            user_login_time=to_wire_time(event.login_time, zone),
        )
    else:
        raise TypeError(f"Unsupported event type: {type(event).__name__}")

    return message.model_dump_json(by_alias=True).encode("utf-8")


def decode_registration(payload: bytes | str, zone: tzinfo = UTC) -> RegistrationEvent:
    try:
        message = RegistrationMessage.model_validate_json(payload)
    except ValidationError as e:
        raise MalformedMessageError(f"Invalid registration message: {e}") from e
    return RegistrationEvent(
        user_id=message.user_id,
        email=message.email,
        code=message.verification_code,
        code_expiry=from_wire_time(message.verification_code_expiration, zone),
    )


def decode_login(payload: bytes | str, zone: tzinfo = UTC) -> LoginEvent:
    try:
        message = LoginMessage.model_validate_json(payload)
    except ValidationError as e:
        raise MalformedMessageError(f"Invalid login message: {e}") from e
    return LoginEvent(
        user_id=message.user_id,
        email=message.email,
        login_time=from_wire_time(message.user_login_time, zone),
    )
