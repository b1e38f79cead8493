"""
Tenant API endpoints
"""

from fastapi import APIRouter, Depends, Request, status
from typing import List
import structlog

from rentalshop.core.exceptions import TenantIdentifierMissingError
from rentalshop.core.tenant_manager import TenantContext, TenantManager
from rentalshop.core.tenant_middleware import request_tenant_manager
from rentalshop.schemas.tenant import TenantContextRead

logger = structlog.get_logger(__name__)
router = APIRouter()


def get_current_tenant(request: Request) -> TenantContext:
    """Dependency returning the tenant context resolved by the middleware"""
    context = getattr(request.state, "tenant_context", None)
    if context is None:
        raise TenantIdentifierMissingError()
    return context


@router.get("/current", response_model=TenantContextRead)
async def get_current_tenant_context(
    context: TenantContext = Depends(get_current_tenant)
):
    """Get the tenant, subscription and plan of the current request"""
    return context.to_read()


@router.get("/cache", response_model=List[str])
async def list_cached_tenants(
    manager: TenantManager = Depends(request_tenant_manager)
):
    """List cache keys of resolved tenants (admin only in production)"""
    return manager.cached_tenant_keys()


@router.delete("/cache/{cache_key}", status_code=status.HTTP_204_NO_CONTENT)
async def invalidate_cached_tenant(
    cache_key: str,
    manager: TenantManager = Depends(request_tenant_manager)
):
    """Drop a tenant from the cache and disconnect its client"""
    await manager.invalidate_tenant(cache_key)
    logger.info(f"Tenant cache invalidated via API: {cache_key}")
