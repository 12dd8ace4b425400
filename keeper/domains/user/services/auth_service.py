"""Authentication service for registration, login, sessions and secrets.

This module wires the identity resolver and the session manager to the
API: it turns every AuthResult into either an issued session or the
matching HTTP exception, and guards secret access on an authenticated
principal.
"""

import logging

from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from keeper.api.v1.schemas.auth import (
    AuthResponse,
    LoginRequest,
    MessageResponse,
    RegisterRequest,
    SessionResponse,
    SessionStatusResponse,
    UserInResponse,
)
from keeper.api.v1.schemas.secrets import SecretResponse, SecretsFeedResponse
from keeper.core.exceptions import (
    DuplicateAccountError,
    InvalidCredentialsError,
    MalformedCredentialRecordError,
    NotAuthenticatedError,
    StoreUnavailableError,
)
from keeper.domains.user.errors import MalformedCredentialRecord, StoreError
from keeper.domains.user.identity import (
    Authenticated,
    AuthResult,
    IdentityResolver,
    Rejected,
    RejectReason,
    StoreFailure,
)
from keeper.domains.user.models import User
from keeper.domains.user.repository import UserRepository
from keeper.domains.user.security import PasswordHasher
from keeper.domains.user.sessions import SessionManager, SessionState
from keeper.domains.user.social_auth import SocialUserInfo

logger = logging.getLogger(__name__)

_REJECTIONS: dict[RejectReason, type[HTTPException]] = {
    RejectReason.DUPLICATE_ACCOUNT: DuplicateAccountError,
    RejectReason.INVALID_CREDENTIALS: InvalidCredentialsError,
    RejectReason.NOT_AUTHENTICATED: NotAuthenticatedError,
}


def outcome_error(result: AuthResult | StoreError) -> HTTPException:
    """HTTP exception for a failed AuthResult or a raw store fault."""
    if isinstance(result, Rejected):
        return _REJECTIONS[result.reason]()
    cause = result.cause if isinstance(result, StoreFailure) else result
    if isinstance(cause, MalformedCredentialRecord):
        logger.error("Rejecting request: malformed credential record", exc_info=cause)
        return MalformedCredentialRecordError()
    logger.error("Rejecting request: credential store failure", exc_info=cause)
    return StoreUnavailableError()


class AuthService:
    """Service for authentication operations.

    Handles user registration, login (local and federated), logout,
    session status and the secret of the authenticated user.
    """

    def __init__(
        self,
        session: AsyncSession,
        sessions: SessionManager,
        hasher: PasswordHasher,
    ) -> None:
        """Initialize with database session and session manager."""
        self._repo = UserRepository(session)
        self._resolver = IdentityResolver(self._repo, hasher)
        self._sessions = sessions

    async def _complete(self, result: AuthResult, message: str) -> AuthResponse:
        """Issue a session for an Authenticated result, raise otherwise."""
        if not isinstance(result, Authenticated):
            raise outcome_error(result)

        logger.debug("Session %s -> %s", SessionState.AUTHENTICATING.value, SessionState.AUTHENTICATED.value)
        try:
            issued = await self._sessions.issue(result.user)
        except StoreError as e:
            raise outcome_error(e) from e

        return AuthResponse(
            message=message,
            session=SessionResponse(token=issued.token, expires_in=issued.expires_in),
            user=UserInResponse.model_validate(result.user),
        )

    async def register(self, data: RegisterRequest) -> AuthResponse:
        """Register a new user with email/password.

        Raises:
            DuplicateAccountError: If email already registered
            StoreUnavailableError: If the store failed
        """
        result = await self._resolver.register(data.email, data.password)
        return await self._complete(result, "Registration successful")

    async def login(self, data: LoginRequest) -> AuthResponse:
        """Authenticate user with email/password.

        Raises:
            InvalidCredentialsError: If the email is unknown or the password wrong
            MalformedCredentialRecordError: If the stored digest is corrupted
            StoreUnavailableError: If the store failed
        """
        result = await self._resolver.login(data.email, data.password)
        return await self._complete(result, "Login successful")

    async def federated_login(self, info: SocialUserInfo) -> AuthResponse:
        """Authenticate or register a user vouched for by a provider.

        Raises:
            StoreUnavailableError: If the store failed
        """
        result = await self._resolver.federated_login(info.provider, info.social_id, info.email)
        created = isinstance(result, Authenticated) and result.created
        return await self._complete(result, "Registration successful" if created else "Login successful")

    async def logout(self, token: str | None) -> MessageResponse:
        """End the caller's session. Succeeds for anonymous callers too."""
        try:
            await self._sessions.revoke(token)
        except StoreError as e:
            raise outcome_error(e) from e
        return MessageResponse(message="Logged out")

    async def session_status(self, user: User | None) -> SessionStatusResponse:
        """Describe the caller's session state."""
        if user is None:
            return SessionStatusResponse(state=SessionState.ANONYMOUS)
        return SessionStatusResponse(
            state=SessionState.AUTHENTICATED,
            user=UserInResponse.model_validate(user),
        )

    async def get_secret(self, user: User | None) -> SecretResponse:
        """Return the caller's own secret.

        Raises:
            NotAuthenticatedError: If there is no authenticated principal
        """
        if user is None:
            raise outcome_error(Rejected(RejectReason.NOT_AUTHENTICATED))
        return SecretResponse(secret=user.secret)

    async def submit_secret(self, user: User | None, text: str) -> SecretResponse:
        """Store the caller's secret.

        Raises:
            NotAuthenticatedError: If there is no authenticated principal
            StoreUnavailableError: If the store failed
        """
        if user is None:
            raise outcome_error(Rejected(RejectReason.NOT_AUTHENTICATED))
        try:
            updated = await self._repo.update_secret(user.id, text)
        except StoreError as e:
            raise outcome_error(e) from e
        if updated is None:
            # The user vanished after the session was resolved
            raise outcome_error(Rejected(RejectReason.NOT_AUTHENTICATED))
        logger.info("User %s updated their secret", user.id)
        return SecretResponse(secret=updated.secret)

    async def list_secrets(self) -> SecretsFeedResponse:
        """Every submitted secret, anonymised."""
        try:
            secrets = await self._repo.list_secrets()
        except StoreError as e:
            raise outcome_error(e) from e
        return SecretsFeedResponse(secrets=secrets)
