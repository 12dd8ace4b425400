"""Session token encoding with JWT.

This module provides:
- Session token generation bound to a user id and a session id
- Token validation and decoding

A token alone does not authenticate anyone: the session id it carries
must also be registered in the session store (see
``keeper.domains.user.sessions``).
"""

from datetime import datetime, timedelta, timezone
from enum import Enum
from uuid import UUID

from jose import JWTError, jwt
from pydantic import BaseModel


class TokenType(str, Enum):
    """Enum for token types."""

    SESSION = "session"


# JWT Configuration
ALGORITHM = "HS256"


class TokenPayload(BaseModel):
    """Schema for JWT token payload."""

    sub: str  # Subject (user_id)
    exp: datetime  # Expiration time
    iat: datetime  # Issued at
    type: TokenType  # Token type
    jti: str  # Session id


class TokenService:
    """Service for JWT token operations.

    Example:
        token_service = TokenService(secret_key="...")
        token = token_service.create_session_token(user_id, session_id)
        payload = token_service.decode_session_token(token)
    """

    def __init__(
        self,
        secret_key: str,
        expire_minutes: int = 60 * 24,
        algorithm: str = ALGORITHM,
    ) -> None:
        """Initialize the token service.

        Args:
            secret_key: Secret key for JWT signing
            expire_minutes: Session token lifetime
            algorithm: JWT algorithm (default: HS256)
        """
        if not secret_key:
            raise ValueError("A session signing key is required")
        self._secret_key = secret_key
        self._algorithm = algorithm
        self.expire_minutes = expire_minutes

    @property
    def lifetime_seconds(self) -> int:
        return self.expire_minutes * 60

    def create_session_token(
        self,
        user_id: UUID | str,
        session_id: str,
        expires_delta: timedelta | None = None,
    ) -> str:
        """Create a signed session token.

        Args:
            user_id: The user's unique identifier
            session_id: Identifier registered in the session store
            expires_delta: Optional custom expiration time

        Returns:
            Encoded JWT string
        """
        if expires_delta is None:
            expires_delta = timedelta(minutes=self.expire_minutes)

        now = datetime.now(timezone.utc)
        payload = {
            "sub": str(user_id),
            "exp": now + expires_delta,
            "iat": now,
            "type": TokenType.SESSION.value,
            "jti": session_id,
        }
        return jwt.encode(payload, self._secret_key, algorithm=self._algorithm)

    def decode_token(self, token: str) -> TokenPayload | None:
        """Decode and validate a JWT token.

        Args:
            token: The JWT token string

        Returns:
            TokenPayload if valid, None otherwise
        """
        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self._algorithm],
            )
            return TokenPayload(
                sub=payload["sub"],
                exp=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
                iat=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
                type=TokenType(payload["type"]),
                jti=payload["jti"],
            )
        except (JWTError, KeyError, ValueError):
            return None

    def decode_session_token(self, token: str) -> TokenPayload | None:
        """Decode a token and check it is a session token."""
        payload = self.decode_token(token)
        if payload and payload.type == TokenType.SESSION:
            return payload
        return None
