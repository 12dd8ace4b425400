"""API v1 endpoints."""

from keeper.api.v1.endpoints import auth, health, secrets

__all__ = ["auth", "health", "secrets"]
