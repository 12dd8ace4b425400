"""Custom exceptions for authentication and authorization.

This module defines HTTP exceptions used throughout the auth system.
Each one corresponds to a user-visible outcome of an auth flow.
"""

from fastapi import HTTPException, status


class AuthenticationError(HTTPException):
    """Base exception for authentication errors."""

    def __init__(
        self,
        detail: str = "Could not validate credentials",
        headers: dict[str, str] | None = None,
    ) -> None:
        if headers is None:
            headers = {"WWW-Authenticate": "Bearer"}
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers=headers,
        )


class InvalidCredentialsError(AuthenticationError):
    """Raised when login credentials are invalid.

    The detail is the same for an unknown email and a wrong password.
    """

    def __init__(self) -> None:
        super().__init__(detail="Incorrect email or password")


class FederatedLoginError(AuthenticationError):
    """Raised when a provider does not vouch for the presented token."""

    def __init__(self, provider: str) -> None:
        super().__init__(detail=f"Could not authenticate with {provider}")


class NotAuthenticatedError(AuthenticationError):
    """Raised when an endpoint needs a session and none is active."""

    def __init__(self) -> None:
        super().__init__(detail="Not authenticated")


class DuplicateAccountError(HTTPException):
    """Raised when trying to register an email that is already taken."""

    def __init__(self) -> None:
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail="User with this email already exists",
        )


class StoreUnavailableError(HTTPException):
    """Raised when the credential store fails during a request."""

    def __init__(self) -> None:
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Credential store unavailable",
        )


class MalformedCredentialRecordError(HTTPException):
    """Raised when a stored password digest cannot be parsed."""

    def __init__(self) -> None:
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Stored credential record is corrupted",
        )
