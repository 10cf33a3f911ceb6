"""
Waste Complaint Hub - FastAPI Application Entry Point

Citizens report waste and sanitation problems, admins hand them to
response teams, teams resolve them with proof. Every transition is
pushed to connected clients in real time.

DESIGN PRINCIPLES:
- Complaint state is the source of truth; team and user counters are
  best-effort bookkeeping
- Notifications are fire-and-forget, never retried
- Errors are reported as {"error": message}
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.errors import ComplaintError
from app.core.settings import settings
from app.routes import complaints, health, notifications

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


# Initialize FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Citizen waste complaint tracking with team assignment and live notifications",
    debug=settings.DEBUG
)


@app.exception_handler(ComplaintError)
async def complaint_error_handler(request: Request, exc: ComplaintError):
    """Lifecycle errors carry their own status code."""
    logger.info(f"{request.method} {request.url.path} → {exc.status_code}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies (wrong types, not JSON)."""
    logger.warning(f"🔥 Validation error on {request.method} {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"error": "Invalid request body", "detail": exc.errors()}
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Catch all unhandled exceptions and log them with full traceback."""
    logger.error(f"🔥 Unhandled exception on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": f"Internal server error: {str(exc)}"}
    )


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Application lifecycle events
@app.on_event("startup")
async def startup_event():
    """
    Initialize services on application startup.
    Currently: Firestore connection (skipped with USE_MOCK_DB)
    """
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")

    try:
        from app.config.firebase import initialize_firestore
        initialize_firestore()
    except Exception as e:
        logger.warning(f"Warning: Firestore initialization failed: {e}")
        logger.warning("   The app will start but database operations may fail.")


@app.on_event("shutdown")
async def shutdown_event():
    logger.info(f"Shutting down {settings.APP_NAME}")


# Include routers
app.include_router(health.router)
app.include_router(complaints.router)
app.include_router(notifications.router)

# Same complaint routes under the prefix the web frontend uses
app.include_router(complaints.router, prefix="/api")


# Root endpoint
@app.get("/")
async def root():
    """
    Root endpoint - API information.
    """
    return {
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "running",
        "docs": "/docs",
        "health": "/health",
        "notifications": "/ws/notifications?token={token}"
    }
