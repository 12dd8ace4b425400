"""Domain modules - Business logic organized by bounded contexts.

Note: Domain modules are imported lazily to avoid circular imports.
Import them directly where needed:

    from keeper.domains.user.models import User, AuthProvider
    from keeper.domains.user.repository import UserRepository
"""
