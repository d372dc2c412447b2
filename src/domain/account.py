"""
Account entity.

Represents the Account aggregate root in our domain model.
Contains the business rules for the verification-code lifecycle.
"""

import re
import uuid
from datetime import UTC, datetime, timedelta

from src.domain.exceptions import AccountAlreadyVerifiedError, InvalidEmailError
from src.domain.verification_code import DEFAULT_TTL, VerificationCode


class Account:
    """
    Account aggregate root.

    Attributes:
        id: Unique identifier, never reused
        email: Account's email address (unique, lowercase)
        password_hash: Opaque hash produced by a PasswordHasher
        is_verified: Whether the account has confirmed its email
        created_at: When the account was created
        verified_at: When the account was verified (None if not verified)
        verification_code: Code currently on file (None once consumed)
    """

    EMAIL_REGEX = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")

    def __init__(
        self,
        id: uuid.UUID,
        email: str,
        password_hash: str,
        is_verified: bool = False,
        created_at: datetime | None = None,
        verified_at: datetime | None = None,
        verification_code: VerificationCode | None = None,
    ):
        """
        Initialize an Account entity.

        Note: This constructor is primarily for reconstructing entities from persistence.
        Use the 'create' class method for new accounts.
        """
        self.id = id
        self.email = email
        self.password_hash = password_hash
        self.is_verified = is_verified
        self.created_at = created_at or datetime.now(UTC)
        self.verified_at = verified_at
        self.verification_code = verification_code

    @classmethod
    def create(
        cls,
        email: str,
        password_hash: str,
        now: datetime | None = None,
        code_ttl: timedelta = DEFAULT_TTL,
    ) -> "Account":
        """
        Create a new, unverified account with a fresh verification code.

        Args:
            email: Account's email address
            password_hash: Already-hashed password
            now: Creation time (default: current UTC time)
            code_ttl: Validity window of the first verification code

        Returns:
            A new Account entity

        Raises:
            InvalidEmailError: If email format is invalid
        """
        if not cls._is_valid_email(email):
            raise InvalidEmailError(email)

        created_at = now or datetime.now(UTC)
        return cls(
            id=uuid.uuid4(),
            email=email.lower(),
            password_hash=password_hash,
            is_verified=False,
            created_at=created_at,
            verified_at=None,
            verification_code=VerificationCode.generate(now=created_at, ttl=code_ttl),
        )

    @staticmethod
    def _is_valid_email(email: str) -> bool:
        return bool(Account.EMAIL_REGEX.match(email))

    def verify(self, provided_code: str, now: datetime | None = None) -> None:
        """
        Verify the account with the provided code.

        Args:
            provided_code: The code received by email
            now: Check time (default: current UTC time)

        Raises:
            AccountAlreadyVerifiedError: If the account is already verified
            InvalidVerificationCodeError: If the code doesn't match the one on file
            VerificationCodeExpiredError: If the code has expired

        Decision: The code is cleared on success so it can never be replayed.
        """
        if self.is_verified or self.verification_code is None:
            raise AccountAlreadyVerifiedError(self.email)

        check_time = now or datetime.now(UTC)
        self.verification_code.verify(provided_code, check_time)

        self.is_verified = True
        self.verified_at = check_time
        self.verification_code = None

    def reissue_verification_code(
        self, now: datetime | None = None, code_ttl: timedelta = DEFAULT_TTL
    ) -> VerificationCode:
        """
        Replace the code on file with a new one.

        The previous code stops being accepted immediately, even if it has
        not expired yet.

        Raises:
            AccountAlreadyVerifiedError: If the account is already verified
        """
        if self.is_verified:
            raise AccountAlreadyVerifiedError(self.email)

        self.verification_code = VerificationCode.generate(now=now, ttl=code_ttl)
        return self.verification_code

    def __eq__(self, other: object) -> bool:
        """Entities are equal if they have the same identity."""
        if not isinstance(other, Account):
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)
