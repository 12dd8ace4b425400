"""API v1 schemas package."""

from keeper.api.v1.schemas.auth import (
    AuthResponse,
    FederatedLoginRequest,
    LoginRequest,
    MessageResponse,
    RegisterRequest,
    SessionResponse,
    SessionStatusResponse,
    UserInResponse,
)
from keeper.api.v1.schemas.secrets import (
    SecretResponse,
    SecretsFeedResponse,
    SecretSubmitRequest,
)

__all__ = [
    "AuthResponse",
    "FederatedLoginRequest",
    "LoginRequest",
    "MessageResponse",
    "RegisterRequest",
    "SecretResponse",
    "SecretSubmitRequest",
    "SecretsFeedResponse",
    "SessionResponse",
    "SessionStatusResponse",
    "UserInResponse",
]
