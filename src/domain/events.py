"""
Account events.

Immutable records of account activity that the notification service reacts to.
An event captures the delivery address at the moment it happened; consumers
never re-read it from the account, so a later email change cannot redirect
an in-flight notification.
"""

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from uuid import UUID

from src.domain.account import Account


class EventKind(Enum):
    """Event kinds and the logical topic key each one is published under."""

    REGISTRATION = "account.registration"
    LOGIN = "account.login"


@dataclass(frozen=True)
class RegistrationEvent:
    """A verification code was issued (on registration or on resend)."""

    user_id: UUID
    email: str
    code: str
    code_expiry: datetime

    kind = EventKind.REGISTRATION

    @classmethod
    def for_account(cls, account: Account) -> "RegistrationEvent":
        if account.verification_code is None:
            raise ValueError(f"Account {account.id} has no verification code on file")
        return cls(
            user_id=account.id,
            email=account.email,
            code=account.verification_code.value,
            code_expiry=account.verification_code.expires_at,
        )


@dataclass(frozen=True)
class LoginEvent:
    """An account logged in successfully."""

    user_id: UUID
    email: str
    login_time: datetime

    kind = EventKind.LOGIN

    @classmethod
    def for_account(cls, account: Account, now: datetime | None = None) -> "LoginEvent":
        return cls(
            user_id=account.id,
            email=account.email,
            login_time=now or datetime.now(UTC),
        )


AccountEvent = RegistrationEvent | LoginEvent
