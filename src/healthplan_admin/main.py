# HealthPlan Admin - Health Insurance Administration Platform
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""HealthPlan Admin - Main Application Module."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import uvicorn
from beartype import beartype
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware

from . import __version__
from .api.dependencies import get_repositories
from .api.v1 import router as v1_router
from .core.config import Settings, get_settings
from .core.database import get_database
from .core.logging_utils import configure_logging, get_logger, level_from_name
from .core.result_types import Err
from .core.security import get_security
from .schemas.common import APIInfo
from .services.auth_service import AuthService

configure_logging(level=level_from_name(get_settings().log_level))
logger = get_logger(__name__)


@beartype
async def ensure_bootstrap_admin(settings: Settings) -> None:
    """Create the configured platform ADMIN account if it is missing."""
    if not settings.bootstrap_admin_username or not settings.bootstrap_admin_password:
        return
    auth = AuthService(get_repositories().admin_users, get_security())
    result = await auth.ensure_bootstrap_admin(
        settings.bootstrap_admin_username,
        settings.bootstrap_admin_password,
        settings.bootstrap_admin_email,
    )
    if isinstance(result, Err):
        logger.error("Could not create bootstrap admin: %s", result.error)
    else:
        logger.info("Bootstrap admin %s is available", result.value.username)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage application lifecycle - startup and shutdown."""
    settings = get_settings()
    logger.info(
        "Starting %s in %s mode (%s storage)",
        settings.app_name,
        settings.api_env,
        settings.storage_backend,
    )

    db = get_database()
    if settings.storage_backend == "postgres":
        await db.connect()
        logger.info("Database connection pool initialized")

    await ensure_bootstrap_admin(settings)

    yield

    logger.info("Shutting down %s", settings.app_name)
    if db.is_connected:
        await db.disconnect()
        logger.info("Database connections closed")


@beartype
def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        FastAPI: Configured application instance
    """
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Multi-tenant health insurance administration and analytics",
        version=__version__,
        docs_url="/docs" if not settings.is_production else None,
        redoc_url="/redoc" if not settings.is_production else None,
        openapi_url="/openapi.json" if not settings.is_production else None,
        lifespan=lifespan,
    )

    # Security middleware
    app.add_middleware(
        TrustedHostMiddleware,
        allowed_hosts=["*"] if settings.is_development else settings.api_allowed_hosts,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.api_cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(v1_router)

    @app.get("/")
    async def root() -> APIInfo:
        """Root endpoint returning API information."""
        return APIInfo(
            name=settings.app_name,
            version=__version__,
            status="operational",
            environment=settings.api_env,
        )

    return app


# Create the application instance
app = create_app()


@beartype
def main() -> None:
    """Run the main application entry point."""
    settings = get_settings()

    uvicorn.run(
        "healthplan_admin.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.is_development,
        log_level="info" if not settings.is_production else "error",
    )


if __name__ == "__main__":
    main()
