"""
Tenant manager

Resolves a tenant id or tenant key to a TenantContext: the registry row,
its latest subscription and plan, and a database client scoped to the
tenant's own database. Contexts are cached per process with a TTL and a
size bound (least recently accessed entries are evicted first). The
manager owns every cached client and is the only one that disconnects
them.

Typical use from a request handler:

    async def handler(ctx):
        async with get_active_client().session() as session:
            ...

    await with_tenant_context(TenantIdentifier(tenant_key="acme"), handler)
"""

from datetime import datetime, timezone
from functools import lru_cache
from typing import Any, Awaitable, Callable, Dict, List, Optional, Set, Union
import asyncio
import time
import structlog

from rentalshop.core.config import get_settings
from rentalshop.core.database import TenantClient, create_tenant_client
from rentalshop.core.exceptions import (
    TenantIdentifierMissingError,
    TenantInactiveError,
    TenantManagerError,
    TenantNotFoundError,
    TenantSubscriptionError,
)
from rentalshop.core.execution_context import client_context
from rentalshop.models.base import utcnow
from rentalshop.models.subscription import SubscriptionStatus
from rentalshop.models.tenant import TenantStatus
from rentalshop.schemas.tenant import (
    PlanRead,
    SubscriptionRead,
    TenantContextRead,
    TenantIdentifier,
    TenantRead,
)
from rentalshop.services.tenant_registry import TenantRegistry

logger = structlog.get_logger(__name__)

IdentifierLike = Union[TenantIdentifier, Dict[str, Optional[str]]]


def _monotonic_ms() -> float:
    return time.monotonic() * 1000


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def is_subscription_valid(subscription: Optional[SubscriptionRead], now: Optional[datetime] = None) -> bool:
    """
    Whether a subscription grants access.

    ACTIVE needs a current period ending in the future; TRIAL needs its
    trial end (or, when unset, its period end) in the future. PAST_DUE,
    CANCELLED, a missing subscription and any unknown status never do.
    Naive datetimes are treated as UTC.
    """
    if subscription is None:
        return False

    now = _as_utc(now or utcnow())

    if subscription.status == SubscriptionStatus.ACTIVE:
        ends_at = subscription.current_period_end
    elif subscription.status == SubscriptionStatus.TRIAL:
        ends_at = subscription.trial_ends_at or subscription.current_period_end
    else:
        return False

    if ends_at is None:
        return False
    return _as_utc(ends_at) > now


class TenantContext:
    """Resolved tenant with its live database client"""

    def __init__(
        self,
        tenant: TenantRead,
        subscription: Optional[SubscriptionRead],
        plan: Optional[PlanRead],
        client: TenantClient,
        last_accessed: float,
    ):
        self.tenant = tenant
        self.subscription = subscription
        self.plan = plan
        self.client = client
        self.last_accessed = last_accessed

    def to_read(self) -> TenantContextRead:
        """Public view of the context (no client, no database URL)"""
        return TenantContextRead(
            tenant_id=self.tenant.id,
            tenant_key=self.tenant.tenant_key,
            name=self.tenant.name,
            status=self.tenant.status,
            subscription_status=self.subscription.status if self.subscription else None,
            current_period_end=self.subscription.current_period_end if self.subscription else None,
            trial_ends_at=self.subscription.trial_ends_at if self.subscription else None,
            plan=self.plan,
            metadata=self.tenant.tenant_metadata,
        )

    def __repr__(self) -> str:
        return f"TenantContext(tenant={self.tenant.id!r}, last_accessed={self.last_accessed})"


class TenantManager:
    """Caches tenant contexts and owns their database clients"""

    def __init__(
        self,
        registry: TenantRegistry,
        client_factory: Callable[[str], Any] = create_tenant_client,
        cache_ttl_ms: Optional[int] = None,
        max_cache_entries: Optional[int] = None,
        clock: Callable[[], float] = _monotonic_ms,
        now: Callable[[], datetime] = utcnow,
    ):
        settings = get_settings()
        self.registry = registry
        self.client_factory = client_factory
        self.cache_ttl_ms = cache_ttl_ms if cache_ttl_ms is not None else settings.TENANT_CACHE_TTL_MS
        self.max_cache_entries = (
            max_cache_entries if max_cache_entries is not None else settings.TENANT_MAX_CACHE_ENTRIES
        )
        if self.cache_ttl_ms <= 0:
            raise ValueError("cache_ttl_ms must be greater than 0")
        if self.max_cache_entries < 1:
            raise ValueError("max_cache_entries must be at least 1")

        self._clock = clock
        self._now = now
        self._cache: Dict[str, TenantContext] = {}

        # In-flight resolutions by cache key, shared by concurrent callers
        self._pending: Dict[str, asyncio.Task] = {}

        # Fire-and-forget disconnects still running
        self._disconnect_tasks: Set[asyncio.Task] = set()

    async def get_tenant_context(self, identifier: Optional[IdentifierLike] = None, **kwargs) -> TenantContext:
        """
        Resolve a tenant context by tenant id or tenant key.

        Raises TenantIdentifierMissingError, TenantNotFoundError,
        TenantInactiveError or TenantSubscriptionError. Registry and
        driver errors propagate unchanged.
        """
        identifier = _coerce_identifier(identifier, **kwargs)
        if identifier.is_empty:
            raise TenantIdentifierMissingError()

        cache_key = identifier.cache_key
        context = self.get_cached_tenant_context(cache_key)
        if context is not None:
            logger.debug(f"Tenant cache hit: {cache_key}")
            return context

        task = self._pending.get(cache_key)
        if task is None or task.done():
            task = asyncio.ensure_future(self._resolve(identifier, cache_key))
            self._pending[cache_key] = task
            task.add_done_callback(lambda t: self._resolution_done(cache_key, t))
        else:
            logger.debug(f"Joining in-flight resolution: {cache_key}")

        # A caller being cancelled must not cancel the shared resolution
        return await asyncio.shield(task)

    def get_cached_tenant_context(self, cache_key: str) -> Optional[TenantContext]:
        """Cache-only lookup; expired entries are evicted and reported as a miss"""
        context = self._cache.get(cache_key)
        if context is None:
            return None

        now = self._clock()
        if now - context.last_accessed > self.cache_ttl_ms:
            logger.info(f"Tenant cache entry expired: {cache_key}")
            self._evict(cache_key)
            return None

        context.last_accessed = now
        return context

    def cached_tenant_keys(self) -> List[str]:
        return list(self._cache.keys())

    async def invalidate_tenant(self, cache_key: str):
        """Evict one entry and disconnect its client; no-op when absent"""
        context = self._cache.pop(cache_key, None)
        if context is None:
            return
        logger.info(f"Tenant cache entry invalidated: {cache_key}")
        await self._disconnect(context.client, cache_key)

    async def shutdown(self):
        """Disconnect every cached client and clear the cache"""
        # Let running resolutions land in the cache so their clients get closed
        pending = list(self._pending.values())
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

        entries = list(self._cache.items())
        logger.info(f"Shutting down tenant manager ({len(entries)} cached tenants)")

        await asyncio.gather(*(self._disconnect(context.client, key) for key, context in entries))
        if self._disconnect_tasks:
            await asyncio.gather(*list(self._disconnect_tasks))
        self._cache.clear()

    async def _resolve(self, identifier: TenantIdentifier, cache_key: str) -> TenantContext:
        tenant = None
        if identifier.tenant_id:
            tenant = await self.registry.find_tenant_by_id(identifier.tenant_id)
        if tenant is None and identifier.tenant_key:
            tenant = await self.registry.find_tenant_by_key(identifier.tenant_key)

        if tenant is None:
            logger.warning(f"Tenant not found: {identifier.as_dict()}")
            raise TenantNotFoundError(identifier.as_dict())

        if tenant.status != TenantStatus.ACTIVE:
            logger.warning(f"Tenant {tenant.id} rejected: status {tenant.status.value}")
            raise TenantInactiveError(identifier.as_dict(), tenant.status.value)

        subscription = tenant.subscriptions[0] if tenant.subscriptions else None
        if not is_subscription_valid(subscription, self._now()):
            subscription_status = subscription.status.value if subscription else None
            logger.warning(f"Tenant {tenant.id} rejected: subscription {subscription_status}")
            raise TenantSubscriptionError(identifier.as_dict(), subscription_status)

        client = self.client_factory(tenant.database_url)
        context = TenantContext(
            tenant=tenant,
            subscription=subscription,
            plan=subscription.plan,
            client=client,
            last_accessed=self._clock(),
        )

        previous = self._cache.get(cache_key)
        if previous is not None and previous.client is not client:
            self._schedule_disconnect(previous.client, cache_key)
        self._cache[cache_key] = context
        logger.info(f"Tenant resolved: {tenant.id} (cache key {cache_key})")

        self._enforce_cache_limit()
        return context

    def _resolution_done(self, cache_key: str, task: asyncio.Task):
        if self._pending.get(cache_key) is task:
            del self._pending[cache_key]
        if not task.cancelled():
            # Every awaiter re-raises the error itself
            task.exception()

    def _enforce_cache_limit(self):
        while len(self._cache) > self.max_cache_entries:
            oldest_key = min(self._cache, key=lambda key: self._cache[key].last_accessed)
            logger.info(f"Evicting least recently used tenant: {oldest_key}")
            self._evict(oldest_key)

    def _evict(self, cache_key: str):
        context = self._cache.pop(cache_key, None)
        if context is not None:
            self._schedule_disconnect(context.client, cache_key)

    def _schedule_disconnect(self, client: Any, cache_key: str):
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            # Called outside the event loop (scripts): disconnect inline
            asyncio.run(self._disconnect(client, cache_key))
            return

        task = asyncio.ensure_future(self._disconnect(client, cache_key))
        self._disconnect_tasks.add(task)
        task.add_done_callback(self._disconnect_tasks.discard)

    async def _disconnect(self, client: Any, cache_key: str):
        try:
            await client.disconnect()
        except Exception as e:
            logger.warning(f"Failed to disconnect tenant client {cache_key}: {e}")


def _coerce_identifier(identifier: Optional[IdentifierLike], **kwargs) -> TenantIdentifier:
    if identifier is None:
        return TenantIdentifier(**kwargs)
    if isinstance(identifier, dict):
        return TenantIdentifier(**identifier)
    return identifier


@lru_cache()
def get_tenant_manager() -> TenantManager:
    """Process-wide tenant manager over the main database"""
    from rentalshop.core.database import main_session_maker

    return TenantManager(TenantRegistry(main_session_maker))


async def with_tenant_context(
    identifier: IdentifierLike,
    callback: Callable[[TenantContext], Union[Any, Awaitable[Any]]],
    manager: Optional[TenantManager] = None,
) -> Any:
    """
    Resolve a tenant and run callback(context) with the tenant's client
    bound as the active client for the callback's whole duration.
    """
    manager = manager or get_tenant_manager()
    context = await manager.get_tenant_context(identifier)
    return await client_context.run(context.client, callback, context)


__all__ = [
    "TenantContext",
    "TenantManager",
    "TenantManagerError",
    "get_tenant_manager",
    "is_subscription_valid",
    "with_tenant_context",
]
