"""
Domain-specific exceptions.

These exceptions represent business rule violations and domain errors.
They are independent of infrastructure concerns.
"""


class DomainError(Exception):
    """Base exception for all domain errors."""

    pass


class AccountAlreadyExistsError(DomainError):
    """Raised when attempting to create an account with an email that already exists."""

    def __init__(self, email: str):
        self.email = email
        super().__init__(f"Account with email '{email}' already exists")


class AccountNotFoundError(DomainError):
    """Raised when an account cannot be found."""

    def __init__(self, email: str):
        self.email = email
        super().__init__(f"Account with email '{email}' not found")


class AccountAlreadyVerifiedError(DomainError):
    """Raised when attempting to verify an already verified account."""

    def __init__(self, email: str):
        self.email = email
        super().__init__(f"Account with email '{email}' is already verified")


class AccountNotVerifiedError(DomainError):
    """Raised when an unverified account attempts to log in."""

    def __init__(self, email: str):
        self.email = email
        super().__init__(f"Account with email '{email}' has not been verified yet")


class InvalidVerificationCodeError(DomainError):
    """Raised when the provided verification code is invalid."""

    def __init__(self) -> None:
        super().__init__("Invalid verification code provided")


class VerificationCodeExpiredError(DomainError):
    """Raised when the verification code has expired."""

    def __init__(self) -> None:
        super().__init__("Verification code has expired")


class InvalidEmailError(DomainError):
    """Raised when an email format is invalid."""

    def __init__(self, email: str):
        self.email = email
        super().__init__(f"Invalid email format: '{email}'")


class WeakPasswordError(DomainError):
    """Raised when a password doesn't meet security requirements."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Password does not meet requirements: {reason}")
