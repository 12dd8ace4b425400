"""Schemas for reading and submitting secrets."""

from pydantic import BaseModel, Field


class SecretSubmitRequest(BaseModel):
    """Schema for submitting the caller's secret."""

    secret: str = Field(..., min_length=1, max_length=10_000)


class SecretResponse(BaseModel):
    """The caller's own secret (None until one is submitted)."""

    secret: str | None = None


class SecretsFeedResponse(BaseModel):
    """Every submitted secret, without owner information."""

    secrets: list[str]
