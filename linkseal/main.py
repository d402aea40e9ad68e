"""
FastAPI Application Entry Point

This module initializes the FastAPI application and configures:
- API routes
- Middleware (request logging)
- Rate limiting
- Application metadata

Design Decisions:
- Clean separation: Routes, middleware, and app config are separate
- The signing services do not depend on this module and can be used
  without FastAPI
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from linkseal.api import endpoints
from linkseal.core.exceptions import ServiceUnavailableError
from linkseal.core.rate_limit import limiter
from linkseal.core.setting import settings
from linkseal.middleware.logging import add_logging_middleware

logger = logging.getLogger("linkseal")

# Title and description are used in auto-generated API documentation
app = FastAPI(
    title="Link Protection Service",
    description="Signs URLs against tampering and expires them after a validity window",
    version="1.0.0",
    docs_url="/docs",  # Swagger UI documentation
    redoc_url="/redoc",  # ReDoc documentation
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


async def service_unavailable_handler(request: Request, exc: ServiceUnavailableError) -> JSONResponse:
    """Report a service that is not configured as 503."""
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": f"Service '{exc.service_name}' is not configured"}
    )


app.add_exception_handler(ServiceUnavailableError, service_unavailable_handler)

add_logging_middleware(app)


@app.get("/", tags=["Health"])
async def root():
    """
    Root endpoint for health checks.

    Returns:
        Simple JSON response indicating service is running
    """
    return {
        "message": "Link Protection Service",
        "version": "1.0.0",
        "docs": "/docs"
    }


@app.get("/health", tags=["Health"])
async def health_check():
    """
    Health check endpoint for monitoring.

    Returns:
        Health status of the service
    """
    return {"status": "healthy"}


app.include_router(endpoints.router, tags=["Links"])


@app.on_event("startup")
async def startup_event():
    """Warn early when the service cannot sign anything."""
    if not settings.URL_SALT:
        logger.warning("URL_SALT is not set; signing endpoints will return 503")
    else:
        logger.info(
            f"Link protection ready: scheme={settings.SIGNATURE_SCHEME.value}, "
            f"hash_parameter={settings.HASH_PARAMETER}, time_parameter={settings.TIME_PARAMETER}"
        )
