"""
Login Account use case.

Checks credentials and emits a LoginEvent for the login-notice email.
"""

import logging
from datetime import UTC, datetime

from src.application.exceptions import InvalidCredentialsError, PublishError
from src.application.ports import EventPublisher, PasswordHasher
from src.domain.account import Account
from src.domain.account_repository import AccountRepository
from src.domain.events import LoginEvent
from src.domain.exceptions import AccountNotVerifiedError

logger = logging.getLogger(__name__)


class LoginAccountUseCase:
    """
    Use case for logging an account in.

    Decision: The login notice is best-effort telemetry. A PublishError is
    logged and swallowed so a broker outage never blocks a login.
    """

    def __init__(
        self,
        account_repository: AccountRepository,
        event_publisher: EventPublisher,
        password_hasher: PasswordHasher,
    ):
        self.account_repository = account_repository
        self.event_publisher = event_publisher
        self.password_hasher = password_hasher

    async def execute(self, email: str, password: str) -> tuple[Account, datetime]:
        """
        Execute the login use case.

        Returns:
            The logged-in account and the login time carried by its event

        Raises:
            InvalidCredentialsError: Unknown email or wrong password
            AccountNotVerifiedError: The account has not confirmed its email
        """
        account = await self.account_repository.find_by_email(email.lower())
        if account is None or not self.password_hasher.verify(password, account.password_hash):
            raise InvalidCredentialsError()

        if not account.is_verified:
            raise AccountNotVerifiedError(account.email)

        event = LoginEvent.for_account(account, datetime.now(UTC))
        try:
            self.event_publisher.publish(event)
        except PublishError as e:
            logger.warning(f"Login notification for account {account.id} dropped: {e}")

        return account, event.login_time
