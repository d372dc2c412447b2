"""
FastAPI routes for the account API.

Each route is thin - it handles HTTP concerns and delegates to a use case.
Only register and login emit events; verify and resend-code complete the
verification-code lifecycle.
"""

import logging
from datetime import UTC, datetime
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from src.application.exceptions import (
    InvalidCredentialsError,
    PublishError,
    RegistrationFailedError,
)
from src.application.login_account import LoginAccountUseCase
from src.application.register_account import RegisterAccountUseCase
from src.application.resend_verification_code import ResendVerificationCodeUseCase
from src.application.verify_account import VerifyAccountUseCase
from src.domain.exceptions import (
    AccountAlreadyExistsError,
    AccountAlreadyVerifiedError,
    AccountNotFoundError,
    AccountNotVerifiedError,
    DomainError,
    InvalidEmailError,
    InvalidVerificationCodeError,
    VerificationCodeExpiredError,
    WeakPasswordError,
)
from src.presentation.dependencies import (
    get_login_account_use_case,
    get_register_account_use_case,
    get_resend_verification_code_use_case,
    get_verify_account_use_case,
)
from src.presentation.schemas import (
    ErrorResponse,
    HealthCheckResponse,
    LoginRequest,
    LoginResponse,
    RegisterAccountRequest,
    RegisterAccountResponse,
    ResendCodeRequest,
    ResendCodeResponse,
    VerifyAccountRequest,
    VerifyAccountResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["accounts"])


def _http_error(status_code: int, error: str, exc: Exception, **extra: str) -> HTTPException:
    return HTTPException(
        status_code=status_code,
        detail={"error": error, "message": str(exc), **extra},
    )


def _internal_error(action: str, exc: Exception) -> HTTPException:
    logger.error(f"Unexpected error during {action}: {exc}", exc_info=True)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={"error": "InternalError", "message": "An unexpected error occurred"},
    )


@router.post(
    "/accounts/register",
    response_model=RegisterAccountResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid request"},
        409: {"model": ErrorResponse, "description": "Account already exists"},
        503: {"model": ErrorResponse, "description": "Verification email could not be queued"},
    },
    summary="Register a new account",
)
async def register_account(
    request: RegisterAccountRequest,
    use_case: Annotated[RegisterAccountUseCase, Depends(get_register_account_use_case)],
) -> RegisterAccountResponse:
    """
    Register a new account and queue its verification email.

    Decision: If the verification event can't be published the registration is
    rolled back and we answer 503, so the client can simply retry.
    """
    try:
        account = await use_case.execute(email=str(request.email), password=request.password)
    except AccountAlreadyExistsError as e:
        logger.warning(f"Registration failed: {e!s}")
        raise _http_error(status.HTTP_409_CONFLICT, "AccountAlreadyExists", e) from e
    except InvalidEmailError as e:
        logger.warning(f"Registration failed: {e!s}")
        raise _http_error(status.HTTP_400_BAD_REQUEST, "InvalidEmail", e) from e
    except WeakPasswordError as e:
        logger.warning(f"Registration failed: {e!s}")
        raise _http_error(status.HTTP_400_BAD_REQUEST, "WeakPassword", e) from e
    except RegistrationFailedError as e:
        raise _http_error(status.HTTP_503_SERVICE_UNAVAILABLE, "RegistrationFailed", e) from e
    except DomainError as e:
        logger.error(f"Domain error during registration: {e}")
        raise _http_error(status.HTTP_400_BAD_REQUEST, "DomainError", e) from e
    except Exception as e:
        raise _internal_error("registration", e) from e

    return RegisterAccountResponse(
        id=account.id,
        email=account.email,
        is_verified=account.is_verified,
        created_at=account.created_at,
        message="Account registered. Check your email for the verification code.",
    )


@router.post(
    "/accounts/login",
    response_model=LoginResponse,
    responses={
        401: {"model": ErrorResponse, "description": "Invalid credentials"},
        403: {"model": ErrorResponse, "description": "Account not verified"},
    },
    summary="Log in",
)
async def login(
    request: LoginRequest,
    use_case: Annotated[LoginAccountUseCase, Depends(get_login_account_use_case)],
) -> LoginResponse:
    """Log in. A failed login notification never fails the login itself."""
    try:
        account, login_time = await use_case.execute(
            email=str(request.email), password=request.password
        )
    except InvalidCredentialsError as e:
        logger.warning(f"Login failed for {request.email}")
        raise _http_error(status.HTTP_401_UNAUTHORIZED, "InvalidCredentials", e) from e
    except AccountNotVerifiedError as e:
        raise _http_error(
            status.HTTP_403_FORBIDDEN, "AccountNotVerified", e, hint="Verify your email first"
        ) from e
    except Exception as e:
        raise _internal_error("login", e) from e

    return LoginResponse(
        id=account.id,
        email=account.email,
        login_time=login_time,
        message="Login successful",
    )


@router.post(
    "/accounts/verify",
    response_model=VerifyAccountResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid verification code"},
        404: {"model": ErrorResponse, "description": "Account not found"},
        409: {"model": ErrorResponse, "description": "Account already verified"},
        410: {"model": ErrorResponse, "description": "Verification code expired"},
    },
    summary="Verify an account",
)
async def verify_account(
    request: VerifyAccountRequest,
    use_case: Annotated[VerifyAccountUseCase, Depends(get_verify_account_use_case)],
) -> VerifyAccountResponse:
    try:
        account = await use_case.execute(email=str(request.email), code=request.verification_code)
    except AccountNotFoundError as e:
        raise _http_error(status.HTTP_404_NOT_FOUND, "AccountNotFound", e) from e
    except AccountAlreadyVerifiedError as e:
        raise _http_error(status.HTTP_409_CONFLICT, "AccountAlreadyVerified", e) from e
    except InvalidVerificationCodeError as e:
        logger.warning(f"Verification failed: invalid code for {request.email}")
        raise _http_error(status.HTTP_400_BAD_REQUEST, "InvalidVerificationCode", e) from e
    except VerificationCodeExpiredError as e:
        logger.warning(f"Verification failed: code expired for {request.email}")
        raise _http_error(
            status.HTTP_410_GONE,
            "VerificationCodeExpired",
            e,
            hint="Request a new verification code",
        ) from e
    except Exception as e:
        raise _internal_error("verification", e) from e

    return VerifyAccountResponse(
        email=account.email,
        is_verified=account.is_verified,
        verified_at=account.verified_at,
        message="Account verified successfully",
    )


@router.post(
    "/accounts/resend-code",
    response_model=ResendCodeResponse,
    responses={
        404: {"model": ErrorResponse, "description": "Account not found"},
        409: {"model": ErrorResponse, "description": "Account already verified"},
        503: {"model": ErrorResponse, "description": "Verification email could not be queued"},
    },
    summary="Send a new verification code",
)
async def resend_verification_code(
    request: ResendCodeRequest,
    use_case: Annotated[
        ResendVerificationCodeUseCase, Depends(get_resend_verification_code_use_case)
    ],
) -> ResendCodeResponse:
    try:
        account = await use_case.execute(email=str(request.email))
    except AccountNotFoundError as e:
        raise _http_error(status.HTTP_404_NOT_FOUND, "AccountNotFound", e) from e
    except AccountAlreadyVerifiedError as e:
        raise _http_error(status.HTTP_409_CONFLICT, "AccountAlreadyVerified", e) from e
    except PublishError as e:
        logger.error(f"Resend failed for {request.email}: {e}")
        raise _http_error(status.HTTP_503_SERVICE_UNAVAILABLE, "PublishFailed", e) from e
    except Exception as e:
        raise _internal_error("code resend", e) from e

    assert account.verification_code is not None
    return ResendCodeResponse(
        email=account.email,
        expires_at=account.verification_code.expires_at,
        message="A new verification code has been sent",
    )


@router.get(
    "/health",
    response_model=HealthCheckResponse,
    summary="Health check",
    tags=["health"],
)
async def health_check() -> HealthCheckResponse:
    return HealthCheckResponse(
        status="healthy",
        service="account-notifications-api",
        version="1.0.0",
        timestamp=datetime.now(UTC),
    )
