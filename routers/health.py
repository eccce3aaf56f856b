# routers/health.py

from fastapi import APIRouter

from core.config import settings
from core.supabase_client import ping_supabase
from database import ping_database

router = APIRouter(
    prefix="/health",
    tags=["Health"],
)


# -----------------------------------------------------
# GET /health/db
# Checks relational store + Supabase Auth
# No auth required
# -----------------------------------------------------
@router.get("/db", summary="Database / auth health check")
def health_db():
    database = ping_database()
    auth = ping_supabase()

    return {
        "status": "ok" if database["status"] == "ok" else "error",
        "database": database,
        "auth": auth,
    }


# -----------------------------------------------------
# GET /health/app
# Simple API health check for uptime monitors
# -----------------------------------------------------
@router.get("/app", summary="App health check")
async def health_app():
    return {
        "service": settings.PROJECT_NAME,
        "status": "ok",
    }
