"""FastAPI dependencies for authentication and authorization.

This module provides injectable dependencies for:
- Application-scoped components (settings, session manager, hasher)
- Session token extraction from the session cookie or a Bearer header
- Current user retrieval (optional and required)
"""

from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from keeper.core.config import Settings
from keeper.core.exceptions import NotAuthenticatedError
from keeper.domains.user.errors import StoreError
from keeper.domains.user.models import User
from keeper.domains.user.repository import UserRepository
from keeper.domains.user.security import PasswordHasher
from keeper.domains.user.services import AuthService, outcome_error
from keeper.domains.user.sessions import SessionManager
from keeper.domains.user.social_auth import SocialAuthValidator
from keeper.infra.database import get_db

# Optional OAuth2 scheme (doesn't raise error if token missing)
oauth2_scheme_optional = OAuth2PasswordBearer(
    tokenUrl="/api/v1/auth/login/form",
    auto_error=False,
)


def get_app_settings(request: Request) -> Settings:
    """Settings the running application was built with."""
    return request.app.state.settings


def get_session_manager(request: Request) -> SessionManager:
    return request.app.state.sessions


def get_password_hasher(request: Request) -> PasswordHasher:
    return request.app.state.hasher


def get_social_validator(request: Request) -> SocialAuthValidator:
    return request.app.state.social_auth


async def get_session_token(
    request: Request,
    bearer: Annotated[str | None, Depends(oauth2_scheme_optional)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> str | None:
    """Session token from the Authorization header, else the session cookie."""
    if bearer:
        return bearer
    return request.cookies.get(settings.SESSION_COOKIE_NAME) or None


async def get_auth_service(
    session: Annotated[AsyncSession, Depends(get_db)],
    sessions: Annotated[SessionManager, Depends(get_session_manager)],
    hasher: Annotated[PasswordHasher, Depends(get_password_hasher)],
) -> AuthService:
    """Get auth service instance."""
    return AuthService(session, sessions, hasher)


async def get_optional_current_user(
    token: Annotated[str | None, Depends(get_session_token)],
    session: Annotated[AsyncSession, Depends(get_db)],
    sessions: Annotated[SessionManager, Depends(get_session_manager)],
) -> User | None:
    """Get current user if authenticated, None otherwise.

    A token whose session was revoked, or whose user no longer exists,
    is treated as no token at all.

    Raises:
        StoreUnavailableError: If the session registry or store failed
    """
    try:
        return await sessions.resolve(token, UserRepository(session))
    except StoreError as e:
        raise outcome_error(e) from e


async def get_current_user(
    user: Annotated[User | None, Depends(get_optional_current_user)],
) -> User:
    """Get the current authenticated user.

    Raises:
        NotAuthenticatedError: If there is no valid session
    """
    if user is None:
        raise NotAuthenticatedError()
    return user


# Type aliases for cleaner dependency injection
SessionToken = Annotated[str | None, Depends(get_session_token)]
CurrentUser = Annotated[User, Depends(get_current_user)]
OptionalUser = Annotated[User | None, Depends(get_optional_current_user)]
AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]
AppSettings = Annotated[Settings, Depends(get_app_settings)]
SocialValidator = Annotated[SocialAuthValidator, Depends(get_social_validator)]
