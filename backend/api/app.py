"""
FastAPI application factory.

Creates and configures the FastAPI application instance.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from shared.config import get_settings
from shared.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConfigurationError,
    ExternalServiceError,
    NetworkTimeoutError,
    NotFoundError,
    PortalError,
    ValidationError,
)
from .routes import activity, auth, content, customers, devices, distributors, health, passwords, users
from .session import persist_session_cookie

logger = logging.getLogger(__name__)

# Most specific first; the first match wins.
ERROR_STATUS: list[tuple[type[PortalError], int]] = [
    (NotFoundError, 404),
    (ValidationError, 422),
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (NetworkTimeoutError, 504),
    (ExternalServiceError, 502),
    (ConfigurationError, 500),
]


def status_for(error: PortalError) -> int:
    for error_type, status_code in ERROR_STATUS:
        if isinstance(error, error_type):
            return status_code
    return 500


async def portal_error_handler(request: Request, exc: PortalError) -> JSONResponse:
    status_code = status_for(exc)
    if status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=status_code, content=exc.to_dict())


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Runs startup and shutdown logic. Startup fails when Supabase is not
    configured.
    """
    # Startup
    settings = get_settings()
    settings.require_supabase()
    logger.info("Starting %s on %s:%s", settings.app_name, settings.host, settings.port)
    yield
    # Shutdown
    logger.info("Shutting down %s", settings.app_name)


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI instance
    """
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(
        title=settings.app_name,
        description="Distributor and admin portal API",
        version=settings.app_version,
        lifespan=lifespan,
        docs_url="/api/docs" if settings.debug else None,
        redoc_url="/api/redoc" if settings.debug else None,
    )

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

    # Write back session changes (sign-in, refresh, sign-out) to the cookie
    app.middleware("http")(persist_session_cookie)

    app.add_exception_handler(PortalError, portal_error_handler)

    # Register routes
    app.include_router(health.router, prefix="/api", tags=["health"])
    app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
    app.include_router(passwords.router, prefix="/api/auth", tags=["passwords"])
    app.include_router(users.router, prefix="/api/users", tags=["users"])
    # Ahead of content, whose /admin/{kind} would otherwise claim /admin/distributors
    app.include_router(distributors.router, prefix="/api/admin/distributors", tags=["distributors"])
    app.include_router(content.router, prefix="/api", tags=["content"])
    app.include_router(customers.router, prefix="/api/customers", tags=["customers"])
    app.include_router(devices.router, prefix="/api/devices", tags=["devices"])
    app.include_router(activity.router, prefix="/api", tags=["activity"])

    return app


# Application instance for uvicorn
app = create_app()
