"""Main FastAPI application."""

import logging
import re
import time
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.orm import Session

from .database import engine, get_db, init_db, SessionLocal, DATABASE_URL
from .api import projects_router, published_router, users_router
from .core.config import settings, ConfigurationError, Environment
from .core.logging_config import setup_logging
from .middleware.exception_handler import sitecraft_exception_handler
from .middleware.request_context import RequestContextMiddleware
from .exceptions import SiteCraftException
from .services import GenerationClient

setup_logging(log_level=settings.log_level, log_format=settings.log_format)
logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"


def _mask_url(url: str) -> str:
    """Mask password in database URL for safe logging."""
    return re.sub(r'://([^:]+):([^@]+)@', r'://\1:***@', url)


def _validate_database_connection() -> None:
    """Fail fast with a readable message when the database is unreachable."""
    masked = _mask_url(DATABASE_URL)
    logger.info(f"Connecting to database: {masked}")

    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except Exception as e:
        if DATABASE_URL.startswith("sqlite"):
            hint = "Check that the directory exists and is writable."
        else:
            hint = "Verify the server is running and DATABASE_URL credentials are correct."
        logger.critical(
            "Database connection failed.\n"
            f"  DATABASE_URL: {masked}\n"
            f"  {hint}\n"
            f"  Error: {e}"
        )
        raise SystemExit(1) from e
    logger.info("Database connection verified")


_validate_database_connection()
init_db()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown lifecycle for the SiteCraft API."""
    logger.info(f"Environment: {settings.environment.value}")
    try:
        settings.validate_production_config()
    except ConfigurationError as e:
        logger.critical(f"STARTUP BLOCKED: {e}")
        raise SystemExit(1) from e

    if settings.environment == Environment.DEVELOPMENT:
        if settings.auth_enabled and settings.jwt_secret_key == "dev-insecure-key-change-me":
            logger.critical(
                "SECURITY: AUTH_ENABLED=true but JWT_SECRET_KEY is the default. "
                "Anyone can forge tokens. Generate a secure key: openssl rand -hex 32"
            )
        if not settings.auth_enabled:
            logger.warning(
                "SECURITY: Authentication is disabled (AUTH_ENABLED=false). "
                "Every request acts as %s.", settings.dev_user_id,
            )

    if not GenerationClient().is_configured():
        logger.warning(
            "GENERATION_MODEL is empty: every revision will fail and be refunded."
        )

    if not settings.auth_enabled:
        from .core.seeder import seed_dev_user
        db = SessionLocal()
        try:
            seed_dev_user(db, settings.dev_user_id, settings.initial_credits)
        except Exception as e:
            logger.warning(f"Development user seed failed (non-fatal): {e}")
        finally:
            db.close()

    yield


app = FastAPI(
    title="SiteCraft API",
    description=(
        "Describe a website in natural language, have a generative model build and "
        "revise it, and keep every revision as a version you can roll back to.\n\n"
        "**Authentication:** When `AUTH_ENABLED=true`, project endpoints require a "
        "`Bearer` token whose subject is the user id. Published-project endpoints are public."
    ),
    version=API_VERSION,
    lifespan=lifespan,
)

# Middleware stack (outermost first — CORS wraps request context).
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins(),
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
    allow_headers=["Content-Type", "Authorization"],
)
app.add_middleware(RequestContextMiddleware)

app.add_exception_handler(SiteCraftException, sitecraft_exception_handler)

logger.info(
    "SiteCraft API started | env=%s | db=%s | auth=%s | model=%s",
    settings.environment.value,
    "PostgreSQL" if DATABASE_URL.startswith("postgresql") else "SQLite",
    "enabled" if settings.auth_enabled else "disabled",
    settings.generation_model or "<none>",
)

app.include_router(projects_router)
app.include_router(published_router)
app.include_router(users_router)


@app.get("/")
def root():
    """Root endpoint."""
    return {
        "name": "SiteCraft API",
        "version": API_VERSION,
        "status": "running"
    }


_startup_time = time.monotonic()


@app.get("/health")
def health_check(db: Session = Depends(get_db)):
    """Database status, uptime, and project count. Never raises."""
    db_status = "ok"
    project_count = 0
    try:
        project_count = db.execute(text("SELECT COUNT(*) FROM projects")).scalar() or 0
    except Exception:
        db_status = "error"

    return {
        "status": "healthy" if db_status == "ok" else "degraded",
        "db": db_status,
        "uptime_seconds": round(time.monotonic() - _startup_time),
        "version": API_VERSION,
        "project_count": project_count,
    }
