"""API v1 main router - aggregates all domain routers."""

from fastapi import APIRouter

from keeper.api.v1.endpoints import auth, health, secrets

api_router = APIRouter()

# Include authentication endpoints
api_router.include_router(
    auth.router,
    tags=["Authentication"],
)

# Include secret endpoints
api_router.include_router(
    secrets.router,
    tags=["Secrets"],
)

# Include health check endpoint
api_router.include_router(
    health.router,
    tags=["Health"],
)
