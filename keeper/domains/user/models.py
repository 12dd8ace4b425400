"""SQLAlchemy models for the User domain.

This module defines the User model with support for:
- Local authentication (email/password)
- Federated login (Google, Facebook)
- One free-text secret per user
"""

import enum

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from keeper.infra.database import Base


class AuthProvider(str, enum.Enum):
    """Enum for federated identity providers."""

    GOOGLE = "google"
    FACEBOOK = "facebook"

    @property
    def id_column(self) -> str:
        """Name of the User column holding this provider's identifier."""
        return f"{self.value}_id"


class User(Base):
    """User model with local and federated credentials.

    Attributes:
        email: User's email address (unique when present)
        hashed_password: bcrypt digest (null for provider-only users)
        google_id: Google account subject identifier
        facebook_id: Facebook account identifier
        secret: The user's stored secret
    """

    __tablename__ = "users"

    # Authentication fields
    email: Mapped[str | None] = mapped_column(
        String(255),
        unique=True,
        nullable=True,  # Providers may not share an email
    )
    hashed_password: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,  # Null for federated-only users
    )

    # Federated login fields
    google_id: Mapped[str | None] = mapped_column(
        String(255),
        unique=True,
        nullable=True,
    )
    facebook_id: Mapped[str | None] = mapped_column(
        String(255),
        unique=True,
        nullable=True,
    )

    secret: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )

    def __repr__(self) -> str:
        """String representation of the user."""
        return f"<User(id={self.id}, email={self.email})>"

    @property
    def has_local_password(self) -> bool:
        return bool(self.hashed_password)

    @property
    def providers(self) -> list[AuthProvider]:
        """Federated providers linked to this user."""
        return [p for p in AuthProvider if getattr(self, p.id_column)]
