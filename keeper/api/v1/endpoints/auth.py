"""Authentication API endpoints.

This module provides REST API endpoints for:
- User registration (email/password)
- User login (email/password)
- Federated login (Google/Facebook)
- Logout
- Session status and current user profile

Every successful flow sets the session cookie and also returns the
session token in the body for clients that prefer a Bearer header.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Response, status
from fastapi.security import OAuth2PasswordRequestForm
from pydantic import ValidationError

from keeper.api.v1.schemas.auth import (
    AuthResponse,
    FederatedLoginRequest,
    LoginRequest,
    MessageResponse,
    RegisterRequest,
    SessionStatusResponse,
    UserInResponse,
)
from keeper.core.config import Settings
from keeper.core.deps import (
    AppSettings,
    AuthServiceDep,
    CurrentUser,
    OptionalUser,
    SessionToken,
    SocialValidator,
)
from keeper.core.exceptions import FederatedLoginError, InvalidCredentialsError
from keeper.domains.user.models import AuthProvider
from keeper.domains.user.social_auth import SocialAuthError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


def _set_session_cookie(response: Response, result: AuthResponse, settings: Settings) -> None:
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=result.session.token,
        max_age=result.session.expires_in,
        httponly=True,
        samesite="lax",
        secure=settings.SESSION_COOKIE_SECURE,
    )


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
    description="Create a new user account with email and password.",
)
async def register(
    data: RegisterRequest,
    response: Response,
    auth_service: AuthServiceDep,
    settings: AppSettings,
) -> AuthResponse:
    """Register a new user with email/password.

    Raises:
        409 Conflict: If email already registered
        422 Unprocessable Entity: If validation fails
        500 Internal Server Error: If the credential store failed
    """
    result = await auth_service.register(data)
    _set_session_cookie(response, result, settings)
    return result


@router.post(
    "/login",
    response_model=AuthResponse,
    summary="Login with email/password",
    description="Authenticate user with email and password.",
)
async def login(
    data: LoginRequest,
    response: Response,
    auth_service: AuthServiceDep,
    settings: AppSettings,
) -> AuthResponse:
    """Login with email and password.

    Raises:
        401 Unauthorized: If credentials invalid
        500 Internal Server Error: If the credential store failed
    """
    result = await auth_service.login(data)
    _set_session_cookie(response, result, settings)
    return result


@router.post(
    "/login/form",
    response_model=AuthResponse,
    summary="Login with OAuth2 form",
    description="Login endpoint compatible with OAuth2 password flow.",
    include_in_schema=False,  # Hide from docs, used for OAuth2 scheme
)
async def login_form(
    form_data: Annotated[OAuth2PasswordRequestForm, Depends()],
    response: Response,
    auth_service: AuthServiceDep,
    settings: AppSettings,
) -> AuthResponse:
    """Login with OAuth2 password form.

    This endpoint is for OAuth2 compatibility.
    Use /auth/login for regular API calls.
    """
    try:
        login_data = LoginRequest(
            email=form_data.username,
            password=form_data.password,
        )
    except ValidationError as e:
        raise InvalidCredentialsError() from e
    result = await auth_service.login(login_data)
    _set_session_cookie(response, result, settings)
    return result


@router.post(
    "/{provider}/callback",
    response_model=AuthResponse,
    summary="Login with a federated provider",
    description="Authenticate or register user via Google or Facebook.",
)
async def federated_callback(
    provider: AuthProvider,
    data: FederatedLoginRequest,
    response: Response,
    auth_service: AuthServiceDep,
    validator: SocialValidator,
    settings: AppSettings,
) -> AuthResponse:
    """Login or register via a federated provider.

    Validates the token with the provider and either:
    - Returns the existing user for that provider identity
    - Creates a new user if the identity is unseen

    Raises:
        401 Unauthorized: If the provider does not accept the token
        500 Internal Server Error: If the credential store failed
    """
    try:
        info = await validator.validate_token(provider, data.token)
    except SocialAuthError as e:
        logger.info("%s rejected a federated login: %s", provider.value, e.message)
        raise FederatedLoginError(provider.value) from e

    result = await auth_service.federated_login(info)
    _set_session_cookie(response, result, settings)
    return result


@router.post(
    "/logout",
    response_model=MessageResponse,
    summary="Logout",
    description="Revoke the current session.",
)
async def logout(
    token: SessionToken,
    response: Response,
    auth_service: AuthServiceDep,
    settings: AppSettings,
) -> MessageResponse:
    """Revoke the caller's session and clear the cookie.

    Succeeds whether or not a session was active.
    """
    result = await auth_service.logout(token)
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    return result


@router.get(
    "/session",
    response_model=SessionStatusResponse,
    summary="Session status",
)
async def session_status(
    user: OptionalUser,
    auth_service: AuthServiceDep,
) -> SessionStatusResponse:
    """Report whether the caller is anonymous or authenticated."""
    return await auth_service.session_status(user)


@router.get(
    "/me",
    response_model=UserInResponse,
    summary="Get current user profile",
)
async def get_me(current_user: CurrentUser) -> UserInResponse:
    """Get current user profile.

    Raises:
        401 Unauthorized: If not authenticated
    """
    return UserInResponse.model_validate(current_user)
