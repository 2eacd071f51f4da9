"""
FastAPI Application Entry Point

This module creates and configures the FastAPI application.

Key Concepts:
=============

1. Application Factory Pattern
   - create_app() function returns configured app
   - Tests build their own app and point it at a test database

2. Lifespan Events
   - startup: open the Database and store it on app.state
   - shutdown: dispose of the connection pool

3. Middleware Stack
   - Rate limiting (slowapi)
   - CORS: Allow cross-origin requests

4. Exception Handlers
   - Domain errors (LibraryError) → their own status and {"detail": message}
   - Database errors → opaque 500
   - Anything else → 500, message shown only in debug mode
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from sqlalchemy.exc import SQLAlchemyError

from catalogue import __version__
from catalogue.config import get_settings
from catalogue.database import Database
from catalogue.errors import LibraryError
from catalogue.routers import auth_router, books_router, borrowings_router
from catalogue.services.rate_limiter import limiter, rate_limit_exceeded_handler

# =============================================================================
# Logging Configuration
# =============================================================================
settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


# =============================================================================
# Lifespan Events
# =============================================================================
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan context manager.

    Code before yield: Runs on startup
    Code after yield: Runs on shutdown

    A Database already placed on app.state (tests do this) is used as is
    and left open on shutdown.
    """
    # ----- STARTUP -----
    logger.info(f"Starting {settings.app_name}...")
    logger.info(f"Environment: {settings.environment}, debug: {settings.debug}")

    database = getattr(app.state, "database", None)
    owns_database = database is None
    if owns_database:
        database = Database(
            settings.database_url,
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            echo=settings.debug,
        )
        app.state.database = database

    if database.is_sqlite and settings.environment == "production":
        logger.warning(
            "SQLite serializes every request; use PostgreSQL in production"
        )

    if settings.auto_create_tables:
        logger.info("Creating database tables")
        database.create_tables()

    if database.ping():
        logger.info("Database connected")
    else:
        logger.warning("Database unreachable at startup")

    yield  # Application runs here

    # ----- SHUTDOWN -----
    logger.info(f"Shutting down {settings.app_name}...")

    if owns_database:
        database.dispose()


# =============================================================================
# Application Factory
# =============================================================================
def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance
    """
    app = FastAPI(
        title=settings.app_name,
        description="""
## Library Catalogue API

Backend for a library catalogue with a borrow/return ledger.

### Features
- **Books**: Browse and search the catalogue (admins manage it)
- **Borrowings**: Borrow and return books with 14-day due dates
- **Auth**: Register and log in to get a bearer token

### Authentication
Send `Authorization: Bearer <access_token>` on borrowing and admin endpoints.
        """,
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # -------------------------------------------------------------------------
    # Rate Limiting
    # -------------------------------------------------------------------------
    # Attach the limiter to the app state so it can be accessed by decorators
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    # -------------------------------------------------------------------------
    # CORS Middleware
    # -------------------------------------------------------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # -------------------------------------------------------------------------
    # Exception Handlers
    # -------------------------------------------------------------------------
    @app.exception_handler(LibraryError)
    async def library_error_handler(
        request: Request,
        exc: LibraryError,
    ) -> JSONResponse:
        """Render a domain error with its own status code."""
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.message},
            headers=exc.headers,
        )

    @app.exception_handler(SQLAlchemyError)
    async def sqlalchemy_exception_handler(
        request: Request,
        exc: SQLAlchemyError,
    ) -> JSONResponse:
        """
        Handle SQLAlchemy database errors.

        Logs the actual error for debugging while hiding details from users.
        """
        logger.error(f"Database error: {exc}")
        return JSONResponse(
            status_code=500,
            content={
                "detail": "A database error occurred. Please try again later."
            },
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        """
        Catch-all exception handler.

        In production, hide internal errors from users.
        In debug mode, show more details.
        """
        logger.error(f"Unhandled error: {exc}", exc_info=True)

        if settings.debug:
            return JSONResponse(
                status_code=500,
                content={"detail": str(exc)},
            )

        return JSONResponse(
            status_code=500,
            content={"detail": "An internal error occurred."},
        )

    # -------------------------------------------------------------------------
    # Register Routers
    # -------------------------------------------------------------------------
    # prefix="/api/v1" creates versioned URLs: /api/v1/books, /api/v1/borrowings
    api_prefix = f"/api/{settings.api_version}"

    app.include_router(auth_router, prefix=api_prefix)
    app.include_router(books_router, prefix=api_prefix)
    app.include_router(borrowings_router, prefix=api_prefix)

    # -------------------------------------------------------------------------
    # Health Check Endpoint
    # -------------------------------------------------------------------------
    @app.get(
        "/health",
        tags=["Health"],
        summary="Health check",
        description="Check if the API is running and the database answers.",
    )
    def health_check(request: Request) -> dict:
        """
        Health check endpoint.

        Used by load balancers and monitoring. Reports "degraded" when the
        database cannot be reached.
        """
        database: Database = request.app.state.database
        connected = database.ping()

        return {
            "status": "ok" if connected else "degraded",
            "database": "connected" if connected else "disconnected",
            "timestamp": datetime.now(UTC).isoformat(),
            "rate_limiting": {
                "enabled": settings.rate_limit_enabled,
                "default_limit": settings.rate_limit_default,
            },
        }

    @app.get(
        "/",
        tags=["Root"],
        summary="API root",
        description="Welcome message and API information.",
    )
    async def root() -> dict:
        """Root endpoint with API information."""
        return {
            "message": f"Welcome to {settings.app_name}",
            "version": __version__,
            "docs": "/docs",
            "health": "/health",
            "endpoints": {
                "auth": f"{api_prefix}/auth",
                "books": f"{api_prefix}/books",
                "borrowings": f"{api_prefix}/borrowings",
            },
        }

    return app


# =============================================================================
# Application Instance
# =============================================================================
# This is what uvicorn imports: uvicorn catalogue.main:app

app = create_app()


# =============================================================================
# Development Server
# =============================================================================
# Run directly with: python -m catalogue.main

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "catalogue.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
