"""
Asador POS backend - application entry point
Register, sale lifecycle, expenses and reports for a street food stand

Modules:
- password login with a signed session cookie
- menu administration
- draft sale with pair pricing
- active / closed sales with split payment and tips
- expenses and profit reports with CSV export

Stack: FastAPI + DuckDB + JWT session cookies
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .api import api_router
from .config.settings import settings
from .core.database import db_manager
from .core.error_handler import (
    application_error_handler,
    general_exception_handler,
    http_exception_handler,
    validation_exception_handler,
)
from .core.exceptions import BaseApplicationError, PersistenceError
from .core.middleware import setup_middleware
from .core.security import security_manager

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the database on startup and close it on shutdown"""
    try:
        db_manager.init_database()
        logger.info("Database ready at %s", db_manager.db_path)
    except PersistenceError as e:
        # Requests retry the connection lazily
        logger.error("Database initialization failed: %s", e.message)
    if not security_manager.auth_enabled:
        logger.warning("No auth password configured - authentication disabled")

    yield

    db_manager.close()


def create_app() -> FastAPI:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        description=f"{settings.app_name} point of sale API",
        debug=settings.debug,
        lifespan=lifespan
    )

    setup_middleware(app)

    app.add_exception_handler(BaseApplicationError, application_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    app.include_router(api_router, prefix=settings.api_prefix)

    @app.get("/health")
    async def health_check():
        try:
            db_manager.get_connection().execute("SELECT 1").fetchone()
            return {"status": "healthy", "version": settings.api_version, "database": "connected"}
        except Exception as e:
            logger.error("Health check failed: %s", e)
            return {"status": "unhealthy", "version": settings.api_version, "database": f"error: {e}"}

    @app.get("/")
    async def root():
        return {
            "name": settings.api_title,
            "version": settings.api_version,
            "description": f"{settings.app_name} point of sale API"
        }

    return app


app = create_app()
