"""
Resend Verification Code use case.

The designed recovery path when a verification email never arrives or the
code expired: a new code supersedes the old one and a fresh RegistrationEvent
is published.
"""

import logging
from datetime import timedelta

from src.application.ports import EventPublisher
from src.domain.account import Account
from src.domain.account_repository import AccountRepository
from src.domain.events import RegistrationEvent
from src.domain.exceptions import AccountNotFoundError
from src.domain.verification_code import DEFAULT_TTL

logger = logging.getLogger(__name__)


class ResendVerificationCodeUseCase:
    """Use case for reissuing a verification code."""

    def __init__(
        self,
        account_repository: AccountRepository,
        event_publisher: EventPublisher,
        code_ttl: timedelta = DEFAULT_TTL,
    ):
        self.account_repository = account_repository
        self.event_publisher = event_publisher
        self.code_ttl = code_ttl

    async def execute(self, email: str) -> Account:
        """
        Execute the resend use case.

        Raises:
            AccountNotFoundError: If the account doesn't exist
            AccountAlreadyVerifiedError: If the account is already verified
            PublishError: If the new code could not be published; the new code
                stays on file and the caller may simply retry
        """
        account = await self.account_repository.find_by_email(email.lower())
        if account is None:
            raise AccountNotFoundError(email)

        account.reissue_verification_code(code_ttl=self.code_ttl)
        await self.account_repository.save(account)

        ack = self.event_publisher.publish(RegistrationEvent.for_account(account))
        logger.info(f"Verification code reissued for account {account.id} ({ack.message_id})")
        return account
