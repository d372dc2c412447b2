"""
Verify Account use case.

Consumes the verification code on file and marks the account verified.
"""

from datetime import datetime

from src.domain.account import Account
from src.domain.account_repository import AccountRepository
from src.domain.exceptions import AccountNotFoundError


class VerifyAccountUseCase:
    """Use case for verifying an account with the emailed code."""

    def __init__(self, account_repository: AccountRepository):
        self.account_repository = account_repository

    async def execute(self, email: str, code: str, now: datetime | None = None) -> Account:
        """
        Execute the verification use case.

        Raises:
            AccountNotFoundError: If the account doesn't exist
            AccountAlreadyVerifiedError: If the account is already verified
            InvalidVerificationCodeError: If the code doesn't match the one on file
            VerificationCodeExpiredError: If the code has expired
        """
        account = await self.account_repository.find_by_email(email.lower())
        if account is None:
            raise AccountNotFoundError(email)

        account.verify(code, now)
        await self.account_repository.save(account)
        return account
