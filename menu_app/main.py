"""
FastAPI Application Entry Point

Restaurant Menu - server-rendered pages with session authentication.

Endpoints:
    - GET  /, /menu, /menu/meal/{id}: public pages
    - POST /menu/meal/{id}/create-comment: comments (logged-in users)
    - GET/POST /signup, /login, POST /logout, GET /profile/{id}: accounts
    - /meals/...: catalog management (administrators)
    - GET  /health: system health check

Run locally:
    uvicorn menu_app.main:app --reload --port 8001

Version: 1.0.0
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from pathlib import Path

from fastapi import Depends, FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.staticfiles import StaticFiles
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.exceptions import HTTPException as StarletteHTTPException

from menu_app.core.config import StorageBackend, get_settings, setup_logging
from menu_app.database import dispose_engine, get_db, init_db
from menu_app.exceptions import ForbiddenError, GuardRedirect, NotFoundError
from menu_app.middleware import (
    RequestLoggingMiddleware,
    forbidden_handler,
    general_exception_handler,
    guard_redirect_handler,
    http_exception_handler,
    not_found_handler,
    validation_exception_handler,
)
from menu_app.routes import auth, meals, menu
from menu_app.schemas import HealthResponse
from menu_app.services.sessions import BaseSessionStore, get_session_store
from menu_app.services.storage import BaseImageStorage, get_image_storage

# Initialize configuration and logging
settings = get_settings()
setup_logging()
logger = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).parent / "static"


# =============================================================================
# APPLICATION LIFECYCLE
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application startup and shutdown events.
    """
    # Startup
    logger.info("=" * 60)
    logger.info(f"🚀 Starting {settings.app_name}")
    logger.info(f"   Version: {settings.app_version}")
    logger.info(f"   Environment: {settings.env_mode.value}")
    logger.info(f"   Debug: {settings.debug}")
    logger.info("=" * 60)

    await init_db()
    logger.info("✅ Database initialized")

    session_store = get_session_store()
    image_storage = get_image_storage()
    logger.info(f"✅ Session Store: {session_store.provider_name}")
    logger.info(f"✅ Image Storage: {image_storage.provider_name}")

    missing = settings.validate_production_config()
    if missing:
        logger.warning(f"⚠️ Missing production config: {missing}")

    logger.info("✅ Application ready!")

    yield  # Application runs

    # Shutdown
    logger.info("Shutting down...")
    await session_store.close()
    await dispose_engine()
    logger.info("✅ Cleanup complete")


# =============================================================================
# APPLICATION INSTANCE
# =============================================================================

app = FastAPI(
    title=settings.app_name,
    description="Restaurant menu with customer comments and an admin catalog.",
    version=settings.app_version,
    lifespan=lifespan,
    debug=settings.debug,
    docs_url=None if settings.is_production else "/docs",
    redoc_url=None,
)

app.add_middleware(RequestLoggingMiddleware)

app.add_exception_handler(GuardRedirect, guard_redirect_handler)
app.add_exception_handler(ForbiddenError, forbidden_handler)
app.add_exception_handler(NotFoundError, not_found_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(Exception, general_exception_handler)

app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")
if settings.effective_storage_backend == StorageBackend.LOCAL:
    Path(settings.upload_directory).mkdir(parents=True, exist_ok=True)
    app.mount(
        settings.upload_url_prefix,
        StaticFiles(directory=settings.upload_directory),
        name="uploads",
    )

app.include_router(auth.router)
app.include_router(menu.router)
app.include_router(meals.router)


# =============================================================================
# HEALTH
# =============================================================================

@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["Health"],
    summary="System Health Check",
)
async def health_check(
    db: AsyncSession = Depends(get_db),
    session_store: BaseSessionStore = Depends(get_session_store),
    image_storage: BaseImageStorage = Depends(get_image_storage),
) -> HealthResponse:
    """Verify the database, session store and image storage are usable."""

    db_status = "healthy"
    try:
        await db.execute(text("SELECT 1"))
    except Exception as e:
        db_status = f"unhealthy: {str(e)}"
        logger.error(f"Database health check failed: {e}")

    sessions_status = "healthy" if await session_store.health_check() else "unhealthy"
    storage_status = "healthy" if await image_storage.health_check() else "unhealthy"

    overall = "operational" if all(
        s == "healthy" for s in [db_status, sessions_status, storage_status]
    ) else "degraded"

    return HealthResponse(
        status=overall,
        database=db_status,
        sessions=f"{sessions_status} ({session_store.provider_name})",
        storage=f"{storage_status} ({image_storage.provider_name})",
        timestamp=datetime.now(),
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "menu_app.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.is_development,
    )
