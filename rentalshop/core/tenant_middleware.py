"""
Tenant context middleware for multi-tenant isolation

Resolves the tenant of each request (X-Tenant-ID header, X-Tenant-Key
header, then subdomain) and runs the rest of the request with that
tenant's database client active.
"""

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from typing import Callable, Optional
import structlog

from rentalshop.core.config import get_settings
from rentalshop.core.exceptions import TenantManagerError
from rentalshop.core.tenant_keys import extract_tenant_key
from rentalshop.core.tenant_manager import TenantManager, get_tenant_manager, with_tenant_context
from rentalshop.schemas.tenant import TenantIdentifier

logger = structlog.get_logger(__name__)
settings = get_settings()


def resolve_request_identifier(request: Request) -> Optional[TenantIdentifier]:
    """Tenant identifier carried by a request, if any"""
    tenant_id = request.headers.get(settings.TENANT_ID_HEADER)
    if tenant_id and tenant_id.strip():
        return TenantIdentifier(tenant_id=tenant_id.strip())

    tenant_key = request.headers.get(settings.TENANT_KEY_HEADER)
    if tenant_key and tenant_key.strip():
        return TenantIdentifier(tenant_key=tenant_key)

    tenant_key = extract_tenant_key(request.headers.get("host"), settings.ROOT_DOMAIN)
    if tenant_key:
        return TenantIdentifier(tenant_key=tenant_key)
    return None


def request_tenant_manager(request: Request) -> TenantManager:
    """Manager attached to the application, else the process singleton"""
    manager = getattr(request.app.state, "tenant_manager", None)
    return manager or get_tenant_manager()


def tenant_error_response(error: TenantManagerError) -> JSONResponse:
    return JSONResponse(status_code=error.status_code, content={"detail": error.to_dict()})


async def tenant_error_handler(request: Request, exc: TenantManagerError) -> JSONResponse:
    """Exception handler for tenant errors raised inside routes"""
    logger.info(f"Tenant error on {request.url.path}: {exc.code}")
    return tenant_error_response(exc)


class TenantContextMiddleware(BaseHTTPMiddleware):
    """Middleware to resolve tenant context and bind the tenant client"""

    async def dispatch(self, request: Request, call_next: Callable):
        identifier = resolve_request_identifier(request)
        request.state.tenant_context = None

        if identifier is None:
            return await call_next(request)

        async def handle(context):
            request.state.tenant_context = context
            logger.debug(f"Tenant context: {context.tenant.id}")
            return await call_next(request)

        try:
            return await with_tenant_context(identifier, handle, manager=request_tenant_manager(request))
        except TenantManagerError as e:
            logger.info(f"Tenant resolution failed: {e.code}")
            return tenant_error_response(e)
