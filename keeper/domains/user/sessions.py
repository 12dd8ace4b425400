"""Session principal management.

A session binds a signed token to a user id, never to an email or a
provider id. Each request rehydrates the full user from the credential
store; if that fails the caller is anonymous.

    ANONYMOUS -> AUTHENTICATING -> AUTHENTICATED -> ANONYMOUS
                 (identity resolver)              (logout, stale session)
"""

import enum
import logging
import secrets
from dataclasses import dataclass
from uuid import UUID

from keeper.core.auth import TokenService
from keeper.domains.user.models import User
from keeper.domains.user.repository import UserRepository
from keeper.infra.session_store import SessionStore

logger = logging.getLogger(__name__)


class SessionState(str, enum.Enum):
    """Where a caller stands in the login lifecycle."""

    ANONYMOUS = "anonymous"
    AUTHENTICATING = "authenticating"
    AUTHENTICATED = "authenticated"


@dataclass(frozen=True)
class IssuedSession:
    token: str
    session_id: str
    expires_in: int  # seconds


class SessionManager:
    """Issues, resolves and revokes session tokens.

    Example:
        manager = SessionManager(TokenService(secret_key), MemorySessionStore())
        issued = await manager.issue(user)
        user = await manager.resolve(issued.token, UserRepository(session))
    """

    def __init__(self, token_service: TokenService, store: SessionStore) -> None:
        self._tokens = token_service
        self._store = store

    async def issue(self, user: User) -> IssuedSession:
        """Register a new session for an authenticated user."""
        session_id = secrets.token_urlsafe(32)
        ttl = self._tokens.lifetime_seconds
        await self._store.add(session_id, str(user.id), ttl)
        token = self._tokens.create_session_token(user.id, session_id)
        logger.info("Issued session for user %s", user.id)
        return IssuedSession(token=token, session_id=session_id, expires_in=ttl)

    async def resolve(self, token: str | None, repository: UserRepository) -> User | None:
        """Rehydrate the user behind a session token.

        Returns None for a missing, forged, expired or revoked token, and
        for a session whose user no longer exists.

        Raises:
            StoreError: If the session registry or the user store fails
        """
        if not token:
            return None
        payload = self._tokens.decode_session_token(token)
        if payload is None:
            return None

        bound_user_id = await self._store.get(payload.jti)
        if bound_user_id is None or bound_user_id != payload.sub:
            return None

        try:
            user_id = UUID(payload.sub)
        except ValueError:
            return None

        user = await repository.find_by_id(user_id)
        if user is None:
            logger.warning("Session %s points at a missing user; revoking", payload.jti[:8])
            await self._store.remove(payload.jti)
            return None
        return user

    async def revoke(self, token: str | None) -> bool:
        """End the session behind a token.

        Returns:
            True if a registered session was removed
        """
        if not token:
            return False
        payload = self._tokens.decode_session_token(token)
        if payload is None:
            return False
        removed = await self._store.remove(payload.jti)
        if removed:
            logger.info("Revoked session for user %s", payload.sub)
        return removed

    async def state_of(self, token: str | None, repository: UserRepository) -> tuple[SessionState, User | None]:
        """Session state of a caller presenting ``token``."""
        user = await self.resolve(token, repository)
        if user is None:
            return SessionState.ANONYMOUS, None
        return SessionState.AUTHENTICATED, user
