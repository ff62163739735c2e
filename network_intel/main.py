"""
FastAPI Application Entry Point
"""

from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from scalar_fastapi import get_scalar_api_reference
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from network_intel.core.db_manager import close_database, init_database
from network_intel.core.environment import env_config
from network_intel.core.errors import ServiceError
from network_intel.core.logger import get_logger, setup_logging
from network_intel.core.rate_limit import limiter

from network_intel.access_requests.access_request_routers import router as access_request_router
from network_intel.admins.admin_routers import router as admin_router
from network_intel.admins.admin_whitelist_service import admin_whitelist_service
from network_intel.audit.audit_routers import router as audit_router
from network_intel.auth.auth_routers import router as auth_router
from network_intel.contacts.contact_routers import router as contact_router
from network_intel.notes.note_routers import router as note_router
from network_intel.users.user_routers import router as user_router

setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup and shutdown events."""
    # Startup
    await init_database()
    await admin_whitelist_service.seed_primary_admin()
    yield
    # Shutdown
    await close_database()


app = FastAPI(
    title="Strategic Network Intelligence API",
    description="Contact directory with whitelist-gated access, admin review and audit trail",
    version="1.0.0",
    lifespan=lifespan,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    """Business-rule violations become client errors carrying the service's message."""
    logger.warning("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=env_config.get("cors_origins", ["*"]),
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

# Include routers
app.include_router(auth_router)
app.include_router(user_router)
app.include_router(access_request_router)
app.include_router(admin_router)
app.include_router(contact_router)
app.include_router(note_router)
app.include_router(audit_router)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "environment": env_config.environment.value}


# Scalar API Documentation
@app.get("/scalar", include_in_schema=False)
async def scalar_html():
    """
    Scalar API Documentation endpoint.
    Access at: http://localhost:8000/scalar
    """
    return get_scalar_api_reference(
        openapi_url=app.openapi_url,
        title=app.title + " - Scalar API Documentation",
    )


if __name__ == "__main__":
    uvicorn.run(
        "network_intel.main:app",
        host="0.0.0.0",
        port=8000,
        reload=env_config.get("debug", False),
        log_level=str(env_config.get("log_level", "INFO")).lower(),
    )
