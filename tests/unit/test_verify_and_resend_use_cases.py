"""
Unit tests for the VerifyAccount and ResendVerificationCode use cases.

Uses mocks for the repository to isolate the use cases.
"""

from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock

import pytest

from src.application.exceptions import PublishError, PublishErrorKind
from src.application.resend_verification_code import ResendVerificationCodeUseCase
from src.application.verify_account import VerifyAccountUseCase
from src.domain.account import Account
from src.domain.events import RegistrationEvent
from src.domain.exceptions import (
    AccountAlreadyVerifiedError,
    AccountNotFoundError,
    InvalidVerificationCodeError,
    VerificationCodeExpiredError,
)
from tests.mocks.in_memory import InMemoryAccountRepository, RecordingEventPublisher


class TestVerifyAccountUseCase:
    """Test VerifyAccount use case."""

    @pytest.fixture
    def mock_repository(self) -> AsyncMock:
        return AsyncMock()

    @pytest.fixture
    def use_case(self, mock_repository: AsyncMock) -> VerifyAccountUseCase:
        return VerifyAccountUseCase(mock_repository)

    @pytest.mark.asyncio
    async def test_verify_account_success(
        self, use_case: VerifyAccountUseCase, mock_repository: AsyncMock
    ) -> None:
        account = Account.create(email="test@example.com", password_hash="hashed")
        code = account.verification_code.value
        mock_repository.find_by_email = AsyncMock(return_value=account)

        result = await use_case.execute("Test@Example.com", code)

        assert result is account
        assert account.is_verified
        assert account.verified_at is not None
        assert account.verification_code is None
        mock_repository.find_by_email.assert_called_once_with("test@example.com")
        mock_repository.save.assert_called_once_with(account)

    @pytest.mark.asyncio
    async def test_verify_account_not_found(
        self, use_case: VerifyAccountUseCase, mock_repository: AsyncMock
    ) -> None:
        mock_repository.find_by_email = AsyncMock(return_value=None)

        with pytest.raises(AccountNotFoundError):
            await use_case.execute("nobody@example.com", "0123456789abcdef")

        mock_repository.save.assert_not_called()

    @pytest.mark.asyncio
    async def test_verify_with_wrong_code(
        self, use_case: VerifyAccountUseCase, mock_repository: AsyncMock
    ) -> None:
        account = Account.create(email="test@example.com", password_hash="hashed")
        mock_repository.find_by_email = AsyncMock(return_value=account)

        with pytest.raises(InvalidVerificationCodeError):
            await use_case.execute("test@example.com", "ffffffffffffffff")

        assert not account.is_verified
        mock_repository.save.assert_not_called()

    @pytest.mark.asyncio
    async def test_verify_with_expired_code(
        self, use_case: VerifyAccountUseCase, mock_repository: AsyncMock
    ) -> None:
        issued = datetime.now(UTC) - timedelta(minutes=10)
        account = Account.create(email="test@example.com", password_hash="hashed", now=issued)
        mock_repository.find_by_email = AsyncMock(return_value=account)

        with pytest.raises(VerificationCodeExpiredError):
            await use_case.execute("test@example.com", account.verification_code.value)

    @pytest.mark.asyncio
    async def test_verify_already_verified(
        self, use_case: VerifyAccountUseCase, mock_repository: AsyncMock
    ) -> None:
        account = Account.create(email="test@example.com", password_hash="hashed")
        code = account.verification_code.value
        account.verify(code)
        mock_repository.find_by_email = AsyncMock(return_value=account)

        with pytest.raises(AccountAlreadyVerifiedError):
            await use_case.execute("test@example.com", code)


class TestResendVerificationCodeUseCase:
    """Test ResendVerificationCode use case."""

    @pytest.fixture
    def account(self, account_repository: InMemoryAccountRepository) -> Account:
        account = Account.create(email="a@x.com", password_hash="hashed")
        account_repository.accounts[account.id] = account
        return account

    @pytest.fixture
    def use_case(
        self, account_repository: InMemoryAccountRepository, event_publisher
    ) -> ResendVerificationCodeUseCase:
        return ResendVerificationCodeUseCase(account_repository, event_publisher)

    @pytest.mark.asyncio
    async def test_resend_publishes_a_fresh_code(
        self,
        use_case: ResendVerificationCodeUseCase,
        event_publisher: RecordingEventPublisher,
        account: Account,
    ) -> None:
        old_code = account.verification_code.value

        result = await use_case.execute("a@x.com")

        assert result is account
        (message,) = event_publisher.messages
        assert message.event == RegistrationEvent.for_account(account)
        assert message.event.code != old_code

    @pytest.mark.asyncio
    async def test_resent_code_supersedes_the_old_one(
        self,
        use_case: ResendVerificationCodeUseCase,
        account_repository: InMemoryAccountRepository,
        account: Account,
    ) -> None:
        old_code = account.verification_code.value
        await use_case.execute("a@x.com")
        verify = VerifyAccountUseCase(account_repository)

        with pytest.raises(InvalidVerificationCodeError):
            await verify.execute("a@x.com", old_code)

        await verify.execute("a@x.com", account.verification_code.value)
        assert account.is_verified

    @pytest.mark.asyncio
    async def test_resend_for_unknown_account(
        self, use_case: ResendVerificationCodeUseCase, event_publisher: RecordingEventPublisher
    ) -> None:
        with pytest.raises(AccountNotFoundError):
            await use_case.execute("nobody@x.com")

        assert not event_publisher.messages

    @pytest.mark.asyncio
    async def test_resend_for_verified_account(
        self,
        use_case: ResendVerificationCodeUseCase,
        event_publisher: RecordingEventPublisher,
        account: Account,
    ) -> None:
        account.verify(account.verification_code.value)

        with pytest.raises(AccountAlreadyVerifiedError):
            await use_case.execute("a@x.com")

        assert not event_publisher.messages

    @pytest.mark.asyncio
    async def test_resend_publish_failure_propagates(
        self, account_repository: InMemoryAccountRepository, account: Account
    ) -> None:
        publisher = RecordingEventPublisher(
            fail_with=PublishError(PublishErrorKind.UNAVAILABLE, "broker down")
        )
        use_case = ResendVerificationCodeUseCase(account_repository, publisher)

        with pytest.raises(PublishError):
            await use_case.execute("a@x.com")

        assert account_repository.accounts[account.id] is account
