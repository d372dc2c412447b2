"""
Register Account use case.

Orchestrates account registration:
1. Creating a new account with a verification code
2. Persisting it
3. Publishing a RegistrationEvent so the notification service emails the code
"""

import logging
from datetime import timedelta

from src.application.exceptions import PublishError, RegistrationFailedError
from src.application.ports import EventPublisher, PasswordHasher
from src.domain.account import Account
from src.domain.account_repository import AccountRepository
from src.domain.events import RegistrationEvent
from src.domain.exceptions import AccountAlreadyExistsError, WeakPasswordError
from src.domain.verification_code import DEFAULT_TTL

logger = logging.getLogger(__name__)

# bcrypt only looks at the first 72 bytes; bcrypt>=5 rejects anything longer
MAX_PASSWORD_BYTES = 72


class RegisterAccountUseCase:
    """
    Use case for registering a new account.

    Decision: Publication is synchronous here. A registration is not complete
    until its verification event is on the broker, so a PublishError rolls the
    account back and fails the call instead of leaving a user with no code.
    """

    def __init__(
        self,
        account_repository: AccountRepository,
        event_publisher: EventPublisher,
        password_hasher: PasswordHasher,
        min_password_length: int = 8,
        code_ttl: timedelta = DEFAULT_TTL,
    ):
        self.account_repository = account_repository
        self.event_publisher = event_publisher
        self.password_hasher = password_hasher
        self.min_password_length = min_password_length
        self.code_ttl = code_ttl

    async def execute(self, email: str, password: str) -> Account:
        """
        Execute the registration use case.

        Args:
            email: Account's email address
            password: Plain text password (hashed before it leaves this method)

        Returns:
            The created Account entity

        Raises:
            AccountAlreadyExistsError: If an account with this email already exists
            InvalidEmailError: If email format is invalid
            WeakPasswordError: If password doesn't meet requirements
            RegistrationFailedError: If the verification event could not be published
        """
        if await self.account_repository.exists_by_email(email.lower()):
            raise AccountAlreadyExistsError(email)

        if len(password) < self.min_password_length:
            raise WeakPasswordError(
                f"Password must be at least {self.min_password_length} characters long"
            )
        if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise WeakPasswordError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes long")

        account = Account.create(
            email=email,
            password_hash=self.password_hasher.hash(password),
            code_ttl=self.code_ttl,
        )
        await self.account_repository.save(account)

        try:
            ack = self.event_publisher.publish(RegistrationEvent.for_account(account))
        except PublishError as e:
            logger.error(f"Registration event for {account.email} not published: {e}")
            await self.account_repository.delete(account.id)
            raise RegistrationFailedError(account.email) from e

        logger.info(
            f"Registration event for account {account.id} published "
            f"to {ack.topic}[{ack.partition}] (message {ack.message_id})"
        )
        return account
