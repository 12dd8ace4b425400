"""User domain module.

This module contains all user-related functionality including:
- User model with local and federated credentials
- Password hashing (bcrypt)
- Identity resolution for local and federated login
- Session issue, rehydration and revocation

Note: Use direct imports to avoid circular dependencies:

    from keeper.domains.user.models import User, AuthProvider
    from keeper.domains.user.repository import UserRepository
    from keeper.domains.user.identity import IdentityResolver, Authenticated
    from keeper.domains.user.sessions import SessionManager
    from keeper.domains.user.security import PasswordHasher
"""
