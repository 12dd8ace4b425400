"""User domain services."""

from keeper.domains.user.services.auth_service import AuthService, outcome_error

__all__ = ["AuthService", "outcome_error"]
