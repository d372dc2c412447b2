"""
Unit tests for Account entity.

Tests creation and the verification-code lifecycle: issue, supersede, consume.
"""

from datetime import UTC, datetime, timedelta

import pytest

from src.domain.account import Account
from src.domain.exceptions import (
    AccountAlreadyVerifiedError,
    InvalidEmailError,
    InvalidVerificationCodeError,
    VerificationCodeExpiredError,
)

NOW = datetime(2024, 5, 1, 12, 0, 0, tzinfo=UTC)


@pytest.fixture
def account() -> Account:
    return Account.create(email="a@x.com", password_hash="hashed", now=NOW)


class TestAccountCreation:
    def test_create_issues_a_verification_code(self, account: Account) -> None:
        assert account.id is not None
        assert not account.is_verified
        assert account.verified_at is None
        assert account.verification_code is not None
        assert account.verification_code.expires_at == NOW + timedelta(minutes=5)

    def test_create_normalizes_email_to_lowercase(self) -> None:
        account = Account.create(email="Test@EXAMPLE.com", password_hash="hashed")

        assert account.email == "test@example.com"

    @pytest.mark.parametrize("email", ["invalid", "@example.com", "user@", "user@example"])
    def test_create_with_invalid_email_raises_error(self, email: str) -> None:
        with pytest.raises(InvalidEmailError):
            Account.create(email=email, password_hash="hashed")

    def test_ids_are_unique(self) -> None:
        ids = {Account.create(email="a@x.com", password_hash="h").id for _ in range(50)}

        assert len(ids) == 50


class TestAccountVerification:
    def test_verify_with_code_on_file_succeeds_and_clears_code(self, account: Account) -> None:
        code = account.verification_code.value

        account.verify(code, now=NOW + timedelta(minutes=2))

        assert account.is_verified
        assert account.verified_at == NOW + timedelta(minutes=2)
        assert account.verification_code is None

    def test_code_is_single_use(self, account: Account) -> None:
        code = account.verification_code.value
        account.verify(code, now=NOW)

        with pytest.raises(AccountAlreadyVerifiedError):
            account.verify(code, now=NOW)

    def test_verify_with_wrong_code_keeps_account_unverified(self, account: Account) -> None:
        with pytest.raises(InvalidVerificationCodeError):
            account.verify("ffffffffffffffff", now=NOW)

        assert not account.is_verified
        assert account.verification_code is not None

    def test_verify_with_expired_code(self, account: Account) -> None:
        code = account.verification_code.value

        with pytest.raises(VerificationCodeExpiredError):
            account.verify(code, now=NOW + timedelta(minutes=5, seconds=1))

        assert not account.is_verified


class TestVerificationCodeReissue:
    def test_reissue_supersedes_previous_code(self, account: Account) -> None:
        old_code = account.verification_code.value

        new_code = account.reissue_verification_code(now=NOW + timedelta(minutes=1))

        assert account.verification_code is new_code
        with pytest.raises(InvalidVerificationCodeError):
            account.verify(old_code, now=NOW + timedelta(minutes=2))
        account.verify(new_code.value, now=NOW + timedelta(minutes=2))
        assert account.is_verified

    def test_reissue_restarts_expiry_window(self, account: Account) -> None:
        later = NOW + timedelta(minutes=10)

        new_code = account.reissue_verification_code(now=later)

        assert new_code.expires_at == later + timedelta(minutes=5)

    def test_reissue_on_verified_account_raises_error(self, account: Account) -> None:
        account.verify(account.verification_code.value, now=NOW)

        with pytest.raises(AccountAlreadyVerifiedError):
            account.reissue_verification_code()


class TestAccountEquality:
    def test_accounts_compare_by_id(self, account: Account) -> None:
        clone = Account(id=account.id, email="other@x.com", password_hash="other")

        assert account == clone
        assert hash(account) == hash(clone)
        assert account != Account.create(email="a@x.com", password_hash="hashed")
