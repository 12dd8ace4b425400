"""Authentication schemas for API requests and responses.

This module defines request/response schemas for auth endpoints
including login, registration, federated login and session status.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from keeper.domains.user.models import AuthProvider
from keeper.domains.user.sessions import SessionState


# ============ Request Schemas ============


class LoginRequest(BaseModel):
    """Schema for email/password login."""

    email: EmailStr
    password: str = Field(..., min_length=1, max_length=1024)


class RegisterRequest(BaseModel):
    """Schema for user registration."""

    email: EmailStr
    password: str = Field(..., min_length=8, max_length=1024)


class FederatedLoginRequest(BaseModel):
    """Schema for federated login (Google/Facebook).

    The token is the OAuth access token or ID token from the provider.
    """

    token: str = Field(
        ...,
        min_length=1,
        description="OAuth access token or ID token from the provider",
    )


# ============ Response Schemas ============


class UserInResponse(BaseModel):
    """User data included in auth responses.

    Never carries the password digest or the secret.
    """

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: str | None = None
    has_local_password: bool
    providers: list[AuthProvider]
    created_at: datetime


class SessionResponse(BaseModel):
    """Schema for an issued session."""

    token: str
    token_type: str = "bearer"
    expires_in: int = Field(description="Session lifetime in seconds")


class AuthResponse(BaseModel):
    """Standard auth response with session and user profile."""

    message: str
    session: SessionResponse
    user: UserInResponse


class SessionStatusResponse(BaseModel):
    """Current session state of the caller."""

    state: SessionState
    user: UserInResponse | None = None


class MessageResponse(BaseModel):
    """Simple message response."""

    message: str
    success: bool = True
