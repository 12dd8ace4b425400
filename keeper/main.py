"""FastAPI main application entry point."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from keeper.api.v1.router import api_router
from keeper.core.auth import TokenService
from keeper.core.config import Settings, get_settings
from keeper.core.logs import configure_logging
from keeper.domains.user.security import PasswordHasher
from keeper.domains.user.sessions import SessionManager
from keeper.domains.user.social_auth import SocialAuthValidator
from keeper.infra.database import DatabaseManager
from keeper.infra.session_store import SessionStore, create_session_store

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan manager for startup and shutdown events."""
    settings: Settings = app.state.settings
    logger.info("Starting %s v%s", settings.APP_NAME, settings.APP_VERSION)
    logger.info("Environment: %s", settings.ENVIRONMENT)

    if settings.DB_AUTO_CREATE:
        await app.state.db.init()
        logger.info("Database tables created")

    yield

    logger.info("Shutting down")
    await app.state.social_auth.close()
    await app.state.session_store.close()
    await app.state.db.close()
    logger.info("Shutdown complete")


def create_application(
    settings: Settings | None = None,
    *,
    db: DatabaseManager | None = None,
    session_store: SessionStore | None = None,
    social_auth: SocialAuthValidator | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Collaborators not passed in are built from ``settings``.
    """
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Register, log in and keep one secret",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    store = session_store or create_session_store(settings)
    app.state.settings = settings
    app.state.db = db or DatabaseManager(settings.database_url, echo=settings.DEBUG)
    app.state.session_store = store
    app.state.sessions = SessionManager(
        TokenService(
            settings.SECRET_KEY.get_secret_value(),
            expire_minutes=settings.SESSION_EXPIRE_MINUTES,
        ),
        store,
    )
    app.state.hasher = PasswordHasher(rounds=settings.BCRYPT_ROUNDS)
    app.state.social_auth = social_auth or SocialAuthValidator(settings)

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include API routers
    app.include_router(api_router, prefix="/api/v1")

    # Health check endpoint (for Docker healthcheck)
    @app.get("/health", tags=["Health"])
    async def health_check() -> dict[str, str]:
        """Liveness probe for container orchestration."""
        return {
            "status": "healthy",
            "app": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "environment": settings.ENVIRONMENT,
        }

    return app


# Create application instance
app = create_application()


if __name__ == "__main__":
    import uvicorn

    _settings = get_settings()
    uvicorn.run(
        "keeper.main:app",
        host=_settings.HOST,
        port=_settings.PORT,
        reload=_settings.DEBUG,
    )
