"""
RentalShop - Main Application Entry Point
Multi-tenant rental shop platform, one database per tenant
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import structlog

from rentalshop.core.config import get_settings
from rentalshop.core.database import default_client, main_engine
from rentalshop.core.exceptions import TenantManagerError
from rentalshop.core.tenant_manager import get_tenant_manager
from rentalshop.core.tenant_middleware import TenantContextMiddleware, tenant_error_handler
from rentalshop.api import tenants

# Configure structured logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.JSONRenderer()
    ],
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
)

logger = structlog.get_logger(__name__)
settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    # Startup
    logger.info("Initializing RentalShop backend")
    if getattr(app.state, "tenant_manager", None) is None:
        app.state.tenant_manager = get_tenant_manager()
    # Registry tables are created by Alembic migrations, not auto-generated

    yield

    # Shutdown
    logger.info("Shutting down RentalShop backend")
    await app.state.tenant_manager.shutdown()
    await default_client.disconnect()
    await main_engine.dispose()


# Create FastAPI application
app = FastAPI(
    title="RentalShop API",
    description="Multi-tenant rental shop platform with per-tenant databases",
    version="1.0.0",
    lifespan=lifespan,
)

# Configure middleware stack
app.add_middleware(TenantContextMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["*"],
)

app.add_exception_handler(TenantManagerError, tenant_error_handler)

# Include routers
app.include_router(tenants.router, prefix=f"{settings.API_V1_PREFIX}/tenants", tags=["tenants"])


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "service": "rentalshop-api"}


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": "RentalShop API",
        "version": "1.0.0",
        "docs": "/docs",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "rentalshop.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.ENVIRONMENT == "development",
        log_level="info",
    )
