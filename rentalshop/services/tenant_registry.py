"""
Tenant registry reader

Read-only lookups against the main database. Each lookup returns the
tenant together with its most recent subscription (plan attached), or
None. Database errors propagate unchanged.
"""

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import selectinload
from sqlmodel import select
from typing import Optional
import structlog

from rentalshop.core.tenant_keys import normalize_tenant_key
from rentalshop.models.subscription import Subscription
from rentalshop.models.tenant import Tenant
from rentalshop.schemas.tenant import PlanRead, SubscriptionRead, TenantRead

logger = structlog.get_logger(__name__)


class TenantRegistry:
    """Tenant lookups in the registry database"""

    def __init__(self, session_maker: async_sessionmaker):
        self.session_maker = session_maker

    async def find_tenant_by_key(self, key: str) -> Optional[TenantRead]:
        """Find tenant by its (case-insensitive) tenant key"""
        statement = select(Tenant).where(Tenant.tenant_key == normalize_tenant_key(key))
        return await self._find(statement)

    async def find_tenant_by_id(self, tenant_id: str) -> Optional[TenantRead]:
        """Find tenant by ID"""
        statement = select(Tenant).where(Tenant.id == tenant_id)
        return await self._find(statement)

    async def _find(self, statement) -> Optional[TenantRead]:
        async with self.session_maker() as session:
            result = await session.execute(statement)
            tenant = result.scalars().first()
            if tenant is None:
                return None

            subscription = await self._latest_subscription(session, tenant.id)
            subscriptions = [subscription] if subscription else []
            logger.debug(f"Registry lookup hit: {tenant.id}")
            return TenantRead(**tenant.model_dump(), subscriptions=subscriptions)

    async def _latest_subscription(self, session: AsyncSession, tenant_id: str) -> Optional[SubscriptionRead]:
        """Most recently created subscription of a tenant, with its plan"""
        result = await session.execute(
            select(Subscription)
            .where(Subscription.tenant_id == tenant_id)
            .options(selectinload(Subscription.plan))
            .order_by(Subscription.created_at.desc(), Subscription.id.desc())
            .limit(1)
        )
        subscription = result.scalars().first()
        if subscription is None:
            return None

        plan = PlanRead(**subscription.plan.model_dump()) if subscription.plan else None
        return SubscriptionRead(**subscription.model_dump(), plan=plan)
