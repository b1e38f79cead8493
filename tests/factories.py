"""
Fakes and builders shared by the tests
"""

from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional
from unittest.mock import AsyncMock

from rentalshop.models.subscription import SubscriptionStatus
from rentalshop.models.tenant import TenantStatus
from rentalshop.schemas.tenant import PlanRead, SubscriptionRead, TenantRead

NOW = datetime(2026, 10, 18, 12, 0, 0, tzinfo=timezone.utc)


class FakeClient:
    """Stand-in for a tenant database client"""

    def __init__(self, database_url: str):
        self.database_url = database_url
        self.disconnect = AsyncMock()


class FakeClientFactory:
    """Records every client it builds"""

    def __init__(self):
        self.clients: List[FakeClient] = []

    def __call__(self, database_url: str) -> FakeClient:
        client = FakeClient(database_url)
        self.clients.append(client)
        return client


class FakeRegistry:
    """In-memory tenant registry with spy lookups"""

    def __init__(self):
        self.tenants: Dict[str, TenantRead] = {}
        self.find_tenant_by_id = AsyncMock(side_effect=self._by_id)
        self.find_tenant_by_key = AsyncMock(side_effect=self._by_key)

    def add(self, tenant: TenantRead) -> TenantRead:
        self.tenants[tenant.id] = tenant
        return tenant

    async def _by_id(self, tenant_id: str) -> Optional[TenantRead]:
        return self.tenants.get(tenant_id)

    async def _by_key(self, key: str) -> Optional[TenantRead]:
        key = key.strip().lower()
        for tenant in self.tenants.values():
            if tenant.tenant_key == key:
                return tenant
        return None


class FakeClock:
    """Manually advanced millisecond clock"""

    def __init__(self, start: float = 1_000_000.0):
        self.value = start

    def __call__(self) -> float:
        return self.value

    def advance(self, ms: float):
        self.value += ms


def make_plan(plan_id: int = 1, name: str = "Basic") -> PlanRead:
    return PlanRead(id=plan_id, name=name, trial_days=14)


def make_subscription(
    tenant_id: str = "t1",
    status: SubscriptionStatus = SubscriptionStatus.ACTIVE,
    trial_ends_at: Optional[datetime] = None,
    current_period_end: Optional[datetime] = None,
    plan: Optional[PlanRead] = None,
    subscription_id: int = 1,
) -> SubscriptionRead:
    plan = plan or make_plan()
    return SubscriptionRead(
        id=subscription_id,
        tenant_id=tenant_id,
        plan_id=plan.id,
        status=status,
        trial_ends_at=trial_ends_at,
        current_period_start=NOW - timedelta(days=10),
        current_period_end=current_period_end or NOW + timedelta(days=20),
        created_at=NOW - timedelta(days=10),
        plan=plan,
    )


def make_tenant(
    tenant_id: str,
    tenant_key: Optional[str] = None,
    status: TenantStatus = TenantStatus.ACTIVE,
    subscription: Optional[SubscriptionRead] = None,
    with_subscription: bool = True,
) -> TenantRead:
    if subscription is None and with_subscription:
        subscription = make_subscription(tenant_id)
    return TenantRead(
        id=tenant_id,
        tenant_key=tenant_key or tenant_id,
        name=f"Shop {tenant_id}",
        status=status,
        database_url=f"postgres://{tenant_id}",
        subscriptions=[subscription] if subscription else [],
    )
