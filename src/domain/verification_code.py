"""
VerificationCode value object.

Represents a short-lived, single-use code sent to a new account's email.
This is a value object in DDD terms - immutable and defined by its attributes.
"""

import re
import secrets
from datetime import UTC, datetime, timedelta

from src.domain.exceptions import InvalidVerificationCodeError, VerificationCodeExpiredError

DEFAULT_TTL = timedelta(minutes=5)


class VerificationCode:
    """
    Value object representing a verification code and its validity window.

    A code is valid iff the check time is at or before expires_at and the
    provided value matches. Generation has no shared state, so it is safe to
    call from any number of request handlers concurrently.
    """

    ENTROPY_BITS = 64
    MIN_LENGTH = 10
    VALUE_PATTERN = re.compile(r"^[0-9a-f]+$")

    def __init__(self, value: str, issued_at: datetime, expires_at: datetime):
        """
        Initialize a VerificationCode.

        Args:
            value: The code as a lowercase hex string
            issued_at: When the code was issued
            expires_at: Last instant at which the code is accepted

        Raises:
            InvalidVerificationCodeError: If the value is malformed or the
                validity window is empty
        """
        if not self._is_valid_format(value):
            raise InvalidVerificationCodeError()
        if expires_at <= issued_at:
            raise InvalidVerificationCodeError()

        self._value = value
        self._issued_at = issued_at
        self._expires_at = expires_at

    @classmethod
    def _is_valid_format(cls, value: str) -> bool:
        return len(value) >= cls.MIN_LENGTH and bool(cls.VALUE_PATTERN.match(value))

    @classmethod
    def generate(
        cls, now: datetime | None = None, ttl: timedelta = DEFAULT_TTL
    ) -> "VerificationCode":
        """
        Generate a new random verification code.

        Args:
            now: Issue time (default: current UTC time)
            ttl: Validity window (default: 5 minutes)

        Returns:
            A new VerificationCode expiring at now + ttl

        Decision: secrets.token_hex gives 64 bits from the OS CSPRNG. The
        code is short enough to type but collisions are negligible.
        """
        issued_at = now or datetime.now(UTC)
        return cls(
            value=secrets.token_hex(cls.ENTROPY_BITS // 8),
            issued_at=issued_at,
            expires_at=issued_at + ttl,
        )

    def verify(self, provided_value: str, now: datetime | None = None) -> None:
        """
        Verify the provided value against this code.

        Args:
            provided_value: The code the user typed, compared as-is
            now: The check time (default: now, allows testing with specific times)

        Raises:
            InvalidVerificationCodeError: If the value doesn't match
            VerificationCodeExpiredError: If the code has expired
        """
        # Exact match only; compare_digest accepts ASCII strings only
        if not provided_value.isascii() or not secrets.compare_digest(
            provided_value, self._value
        ):
            raise InvalidVerificationCodeError()

        if self.is_expired(now):
            raise VerificationCodeExpiredError()

    def is_expired(self, now: datetime | None = None) -> bool:
        """Check whether the code is past its expiry instant."""
        check_time = now or datetime.now(UTC)
        return check_time > self._expires_at

    @property
    def value(self) -> str:
        return self._value

    @property
    def issued_at(self) -> datetime:
        return self._issued_at

    @property
    def expires_at(self) -> datetime:
        return self._expires_at

    def __str__(self) -> str:
        return self._value

    def __repr__(self) -> str:
        return f"VerificationCode(expires_at={self._expires_at.isoformat()})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, VerificationCode):
            return False
        return (
            self._value == other._value
            and self._issued_at == other._issued_at
            and self._expires_at == other._expires_at
        )

    def __hash__(self) -> int:
        return hash((self._value, self._issued_at, self._expires_at))
