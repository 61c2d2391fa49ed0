"""
PlanSync Service - FastAPI Application

This service handles:
- Building ProductBoard / Azure DevOps planning hierarchies from flat lists
- Validating workspace data snapshots for export and import

Everything here is stateless: requests carry their own data and nothing is
persisted.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from plansync.app.config import settings
from plansync.app.routers import hierarchy, migration
from plansync.core.exceptions import PlanSyncException
from plansync.core.utils.logging import sanitize_error_message, setup_logging

# Initialize logging
setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    Handles startup and shutdown events.
    """
    logger.info(
        f"Starting {settings.app_name} v{settings.app_version}",
        extra={"environment": settings.environment}
    )

    if settings.is_production and (settings.debug or settings.expose_error_details):
        logger.critical("DEBUG and EXPOSE_ERROR_DETAILS must be false in production")
        raise RuntimeError("Production configuration invalid: error details would be exposed")

    yield

    logger.info(f"Shutting down {settings.app_name}")


tags_metadata = [
    {
        "name": "Health",
        "description": "Health check endpoint. No authentication required."
    },
    {
        "name": "Hierarchy",
        "description": "Build parent/child trees from flat ProductBoard and Azure DevOps entity lists."
    },
    {
        "name": "Migration",
        "description": "Validate workspace data snapshots before export and import."
    }
]

app = FastAPI(
    title="PlanSync Service",
    version=settings.app_version,
    description="Planning hierarchy builder and workspace snapshot validator for the ProductBoard / Azure DevOps dashboard.",
    docs_url="/docs" if settings.enable_api_docs else None,
    redoc_url="/redoc" if settings.enable_api_docs else None,
    openapi_tags=tags_metadata,
    lifespan=lifespan
)

# ============================================
# Middleware
# ============================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)


# ============================================
# Exception Handlers
# ============================================

@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """Handler for HTTPException - preserves the intended status code."""
    request_id = request.headers.get("x-request-id")
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "detail": exc.detail,
            "request_id": request_id
        }
    )


@app.exception_handler(PlanSyncException)
async def plansync_exception_handler(request: Request, exc: PlanSyncException):
    """Structured PlanSync errors that escaped a router."""
    request_id = request.headers.get("x-request-id")
    logger.warning(
        f"{exc.error_code.value}: {exc.message}",
        extra={"path": request.url.path, "request_id": request_id}
    )
    return JSONResponse(
        status_code=exc.http_status,
        content={"detail": exc.to_dict(), "request_id": request_id}
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler for unhandled errors (non-HTTP exceptions only)."""
    request_id = request.headers.get("x-request-id")

    logger.error(
        "Unhandled exception",
        exc_info=True,
        extra={
            "method": request.method,
            "path": request.url.path,
            "request_id": request_id
        }
    )

    if settings.expose_error_details or settings.debug:
        error_message = sanitize_error_message(str(exc))
    else:
        error_message = "An unexpected error occurred. Please try again or contact support."

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "Internal server error",
            "message": error_message,
            "request_id": request_id
        }
    )


# ============================================
# Health Check Endpoints
# ============================================

@app.get("/health", tags=["Health"])
async def health_check():
    """
    Basic health check endpoint.
    Returns 200 if service is running.
    """
    return {
        "status": "healthy",
        "service": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment
    }


# ============================================
# Routers
# ============================================

app.include_router(hierarchy.router, prefix="/api/v1/hierarchy", tags=["Hierarchy"])
app.include_router(migration.router, prefix="/api/v1/migration", tags=["Migration"])


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "plansync.app.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug and settings.is_development
    )
