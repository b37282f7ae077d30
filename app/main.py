# app/main.py
"""Main FastAPI application entry point.

Initializes the FastAPI application with:
- Database connections and table creation
- CORS and GZip middleware
- Domain error to HTTP response mapping
- API route registration
- Logging setup using Loguru
- Health check endpoints
"""
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import ORJSONResponse
from loguru import logger

from app.core.config import Settings, get_settings
from app.core.database import Base, dispose_engine, engine, test_connection_async
from app.core.exceptions import InventoryError
from app.core.logging import setup_logging

# Import API routers
from app.api.drugs import router as drugs_router
from app.api.reports import router as reports_router
from app.api.reports import sales_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage FastAPI application lifespan.

    - Startup: creates database tables, tests the connection
    - Shutdown: disposes of the connection pool
    """
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Environment: {settings.environment}")

    if engine is not None:
        try:
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            logger.info("Database tables created/verified")
        except Exception as e:
            logger.error(f"Failed to create database tables: {e}")
    else:
        logger.warning("Database engine not initialized")

    if await test_connection_async():
        logger.success("Database connection established")
    else:
        logger.error("Failed to connect to database")

    yield

    await dispose_engine()
    logger.info(f"Shutting down {settings.app_name}")


# Initialize settings
settings = get_settings()

# Configure logging with Loguru
setup_logging(settings)

app = FastAPI(
    default_response_class=ORJSONResponse,
    lifespan=lifespan,
    **settings.fastapi_kwargs
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

app.add_middleware(GZipMiddleware, minimum_size=1000)


@app.exception_handler(InventoryError)
async def inventory_error_handler(request: Request, exc: InventoryError):
    """Map domain errors to JSON error responses."""
    logger.warning(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
    return ORJSONResponse(
        status_code=exc.status_code,
        content={
            "status": False,
            "status_code": exc.status_code,
            "detail": exc.to_dict(),
        },
    )


# Register API routers
app.include_router(drugs_router, prefix=settings.api_prefix)
app.include_router(reports_router, prefix=settings.api_prefix)
app.include_router(sales_router, prefix=settings.api_prefix)


@app.get("/")
async def root():
    """Root endpoint providing basic application information.

    Returns:
        dict: Application name, version, environment, and status.
    """
    return {
        "app": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment,
        "status": "running",
    }


@app.get("/health")
async def health_check(settings: Settings = Depends(get_settings)):
    """Health check endpoint for monitoring application status.

    Args:
        settings: Injected application settings.

    Returns:
        dict: Health status, environment, and database connection status.
    """
    database_ok = await test_connection_async()
    return {
        "status": "healthy" if database_ok else "degraded",
        "environment": settings.environment,
        "database": "connected" if database_ok else "unavailable",
    }
