"""Main FastAPI application."""

import logging
import time
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.orm import Session

from . import __version__, models  # noqa: F401  (registers tables on Base)
from .api import auth_router, rights_router
from .core.config import settings, Environment
from .core.logging_config import setup_logging
from .core.route_table import assemble_route_table
from .database import engine, Base, get_db, DATABASE_URL
from .exceptions import ConfigurationError, RightsException
from .middleware.exception_handler import rights_exception_handler
from .middleware.request_context import RequestContextMiddleware
from .services.rights_service import RightsService

setup_logging(log_level=settings.log_level, log_format=settings.log_format)
logger = logging.getLogger(__name__)


def _warn_insecure_development_settings() -> None:
    if settings.environment != Environment.DEVELOPMENT:
        return
    if not settings.auth_enabled:
        logger.warning(
            "SECURITY: Authentication is disabled (AUTH_ENABLED=false). "
            "Every request runs as superuser. Set AUTH_ENABLED=true for production."
        )
    elif settings.uses_default_secret():
        logger.critical(
            "SECURITY: AUTH_ENABLED=true but JWT_SECRET_KEY is the default. "
            "Anyone can forge tokens. Generate a secure key: openssl rand -hex 32"
        )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Validate settings, create tables and build the rule index."""
    logger.info(f"Environment: {settings.environment.value}")
    try:
        settings.validate_production_config()
    except ConfigurationError as e:
        logger.critical(f"STARTUP BLOCKED: {e}")
        raise SystemExit(1) from e
    _warn_insecure_development_settings()

    Base.metadata.create_all(bind=engine)

    # The index is built once here and only read afterwards.
    try:
        routes = assemble_route_table(app.routes, settings.routes_file)
    except ConfigurationError as e:
        logger.critical(f"Route table could not be loaded: {e}")
        raise SystemExit(1) from e
    app.state.rights = RightsService.from_routes(routes, superuser_level=settings.superuser_level)

    yield


app = FastAPI(
    title="routeguard API",
    description=(
        "Route-based access rights: rule index introspection, access checks, "
        "menu security matrices and per-user special rights.\n\n"
        "**Authentication:** When `AUTH_ENABLED=true`, endpoints require a "
        "`Bearer` token; each endpoint is guarded by its own entry in the rule index."
    ),
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins(),
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT"],
    allow_headers=["Content-Type", "Authorization"],
)
app.add_middleware(RequestContextMiddleware)

app.add_exception_handler(RightsException, rights_exception_handler)

app.include_router(auth_router)
app.include_router(rights_router)

db_type = "PostgreSQL" if DATABASE_URL.startswith("postgresql") else "SQLite"
logger.info(
    "routeguard API started | env=%s | db=%s | auth=%s",
    settings.environment.value,
    db_type,
    "enabled" if settings.auth_enabled else "disabled",
)


@app.get("/")
def root():
    return {
        "name": "routeguard API",
        "version": __version__,
        "status": "running"
    }


_startup_time = time.monotonic()


@app.get("/health")
def health_check(db: Session = Depends(get_db)):
    """Database status and uptime. Never raises, so probes never see a 5xx."""
    db_status = "ok"
    try:
        db.execute(text("SELECT 1"))
    except Exception:
        db_status = "error"

    return {
        "status": "healthy" if db_status == "ok" else "degraded",
        "db": db_status,
        "uptime_seconds": round(time.monotonic() - _startup_time),
        "version": __version__,
    }
