"""Health check endpoints."""

from fastapi import APIRouter, Depends, Request

from keeper.infra.database import DatabaseManager, get_db_manager

router = APIRouter()


@router.get("/health")
async def health_check(
    request: Request,
    db: DatabaseManager = Depends(get_db_manager),
) -> dict[str, str]:
    """Health check including the database and the session registry."""
    database = "ok" if await db.health_check() else "unavailable"
    sessions = "ok" if await request.app.state.session_store.ping() else "unavailable"
    healthy = database == "ok" and sessions == "ok"
    return {
        "status": "healthy" if healthy else "degraded",
        "database": database,
        "sessions": sessions,
    }
