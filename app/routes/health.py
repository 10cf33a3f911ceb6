"""
Health check endpoints.
Used for monitoring, deployment readiness checks, and basic connectivity tests.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, HTTPException

from app.core.settings import settings

router = APIRouter(prefix="/health", tags=["Health"])


@router.get("")
async def health_check():
    """
    Basic health check endpoint.
    Returns 200 if service is running.
    """
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat()
    }


@router.get("/db")
async def database_health():
    """
    Database connectivity check.
    Reports the in-memory backend as healthy without touching Firestore.
    """
    if settings.USE_MOCK_DB:
        return {
            "status": "healthy",
            "database": "memory",
            "connected": True,
            "timestamp": datetime.now(timezone.utc).isoformat()
        }

    try:
        from app.config.firebase import get_db

        db = get_db()
        collections = list(db.collections())
        return {
            "status": "healthy",
            "database": "firestore",
            "connected": True,
            "collections_count": len(collections),
            "timestamp": datetime.now(timezone.utc).isoformat()
        }
    except Exception as e:
        raise HTTPException(
            status_code=503,
            detail=f"Database connection failed: {str(e)}"
        )
