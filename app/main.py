from fastapi import FastAPI, Depends
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from sqlalchemy import text

from app.db.base import get_db
from app.core.config import settings
from app.schemas.common import ErrorResponse
from app.core.logging import configure_logging
from app.routers import pillars as pillars_router
from app.routers import habits as habits_router
from app.routers import reflections as reflections_router
from app.routers import alignment as alignment_router
from app.routers import advisory as advisory_router
from app.routers import goals as goals_router
from app.core.errors import (
    CompassException,
    compass_exception_handler,
    validation_exception_handler,
    unhandled_exception_handler,
)

configure_logging()

app = FastAPI(
    title="Compass API",
    description=(
        "**Pillar alignment for a personal life operating system**\n\n"
        "Declare pillars, standards and habits, log completions, and compare "
        "observed behaviour against declared standards per pillar.\n\n"
        "All error responses follow the `{code, message, details}` envelope."
    ),
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# --- CORS ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- Exception handlers (most specific first) ---
app.add_exception_handler(CompassException, compass_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

# --- Routers ---
_ERROR_RESPONSES = {
    422: {"model": ErrorResponse, "description": "Validation error."},
    500: {"model": ErrorResponse, "description": "Unexpected error."},
}

app.include_router(pillars_router.router, responses=_ERROR_RESPONSES)
app.include_router(habits_router.router, responses=_ERROR_RESPONSES)
app.include_router(goals_router.router, responses=_ERROR_RESPONSES)
app.include_router(reflections_router.router, responses=_ERROR_RESPONSES)
app.include_router(alignment_router.router, responses=_ERROR_RESPONSES)
app.include_router(advisory_router.router, responses=_ERROR_RESPONSES)


@app.get("/health", tags=["health"], summary="Health check")
def health(db: Session = Depends(get_db)):
    """
    Returns `{"status": "ok", "db": "ok"}` when both the API and the database
    are reachable. Returns HTTP 503 if the DB is down.
    """
    try:
        db.execute(text("SELECT 1"))
        db_status = "ok"
    except Exception:
        db_status = "unreachable"

    if db_status != "ok":
        return JSONResponse(
            status_code=503,
            content={"status": "error", "db": db_status},
        )
    return {"status": "ok", "db": "ok", "env": settings.APP_ENV}
