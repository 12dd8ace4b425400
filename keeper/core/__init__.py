"""Core module - Settings, session tokens, and shared utilities.

Note: Dependencies (deps.py) and auth modules are imported lazily
to avoid circular imports. Import them directly where needed:

    from keeper.core.deps import CurrentUser, OptionalUser
    from keeper.core.auth import TokenService
    from keeper.core.exceptions import InvalidCredentialsError
"""

from keeper.core.config import settings

__all__ = [
    "settings",
]
