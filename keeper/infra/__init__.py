"""Infrastructure module - Database and session registry."""

from keeper.infra.database import Base, DatabaseManager, get_db
from keeper.infra.session_store import (
    MemorySessionStore,
    RedisSessionStore,
    SessionStore,
    create_session_store,
)

__all__ = [
    # Database
    "Base",
    "DatabaseManager",
    "get_db",
    # Sessions
    "MemorySessionStore",
    "RedisSessionStore",
    "SessionStore",
    "create_session_store",
]
