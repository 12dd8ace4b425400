"""Pydantic schemas for the User domain.

This module defines the data handed to the credential store when a user
is created. Emails are stored in one canonical form.
"""

from pydantic import BaseModel, EmailStr, Field, field_validator

from keeper.domains.user.models import AuthProvider


def normalize_email(value: str | None) -> str | None:
    """Canonical form used for storage and lookup."""
    if value is None:
        return None
    value = value.strip().lower()
    return value or None


# ============ Create Schemas ============


class LocalUserCreate(BaseModel):
    """Schema for creating a user with a local password.

    The password is already hashed; plaintext never reaches the store.
    """

    email: EmailStr
    hashed_password: str = Field(..., min_length=1, max_length=255)

    @field_validator("email", mode="after")
    @classmethod
    def lower_email(cls, v: str) -> str:
        return normalize_email(v)

    def to_row(self) -> dict[str, str | None]:
        """Column values for the new user row."""
        return {"email": self.email, "hashed_password": self.hashed_password}


class FederatedUserCreate(BaseModel):
    """Schema for creating a user keyed by a provider identifier."""

    provider: AuthProvider
    provider_id: str = Field(..., min_length=1, max_length=255)
    # Taken as the provider reports it; providers verify their own emails
    email: str | None = Field(None, max_length=255)

    @field_validator("email", mode="after")
    @classmethod
    def lower_email(cls, v: str | None) -> str | None:
        return normalize_email(v)

    def to_row(self) -> dict[str, str | None]:
        """Column values for the new user row."""
        return {
            "email": self.email,
            self.provider.id_column: self.provider_id,
        }

