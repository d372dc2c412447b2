"""
API request/response schemas (DTOs).

These Pydantic models define the API contract for requests and responses.
They are kept separate from domain entities and from the broker wire format.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field


class RegisterAccountRequest(BaseModel):
    """Request schema for account registration."""

    email: EmailStr = Field(
        ..., description="Account's email address", examples=["user@example.com"]
    )
    password: str = Field(
        ...,
        min_length=8,
        description="Account's password (minimum 8 characters)",
        examples=["SecurePassword123"],
    )


class RegisterAccountResponse(BaseModel):
    """Response schema for account registration."""

    id: UUID = Field(..., description="Account's unique identifier")
    email: str = Field(..., description="Account's email address")
    is_verified: bool = Field(..., description="Whether the account is verified")
    created_at: datetime = Field(..., description="When the account was created")
    message: str = Field(
        ...,
        description="Success message",
        examples=["Account registered. Check your email for the verification code."],
    )


class LoginRequest(BaseModel):
    email: EmailStr = Field(..., description="Account's email address")
    password: str = Field(..., min_length=1, description="Account's password")


class LoginResponse(BaseModel):
    id: UUID = Field(..., description="Account's unique identifier")
    email: str = Field(..., description="Account's email address")
    login_time: datetime = Field(..., description="When the login happened")
    message: str = Field(..., examples=["Login successful"])


class VerifyAccountRequest(BaseModel):
    """Request schema for account verification."""

    email: EmailStr = Field(..., description="Account's email address")
    verification_code: str = Field(
        ...,
        min_length=10,
        max_length=64,
        pattern=r"^[0-9a-f]+$",
        description="Verification code received by email",
        examples=["3f9a1c0b7d2e4a51"],
    )


class VerifyAccountResponse(BaseModel):
    email: str = Field(..., description="Account's email address")
    is_verified: bool = Field(..., description="Verification status (should be True)")
    verified_at: datetime | None = Field(..., description="When the account was verified")
    message: str = Field(..., examples=["Account verified successfully"])


class ResendCodeRequest(BaseModel):
    email: EmailStr = Field(..., description="Account's email address")


class ResendCodeResponse(BaseModel):
    email: str = Field(..., description="Account's email address")
    expires_at: datetime = Field(..., description="When the new code expires")
    message: str = Field(..., examples=["A new verification code has been sent"])


class ErrorResponse(BaseModel):
    """Standard error response schema."""

    error: str = Field(..., description="Error type")
    message: str = Field(..., description="Human-readable error message")
    details: str | None = Field(None, description="Additional error details")


class HealthCheckResponse(BaseModel):
    """Health check response schema."""

    status: str = Field(..., description="Service status", examples=["healthy"])
    service: str = Field(..., description="Service name")
    version: str = Field(..., description="Service version")
    timestamp: datetime = Field(..., description="Current server time")
