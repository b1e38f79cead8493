"""
Schemas for tenant registry reads and tenant resolution
"""

from pydantic import BaseModel, Field
from sqlmodel import SQLModel
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from rentalshop.core.tenant_keys import normalize_tenant_key
from rentalshop.models.subscription import SubscriptionStatus
from rentalshop.models.tenant import TenantStatus


class PlanRead(SQLModel):
    id: int
    name: str
    description: Optional[str] = None
    base_price: Decimal = Decimal("0.00")
    currency: str = "USD"
    trial_days: int = 0
    limits: Optional[dict] = None
    features: Optional[list] = None
    is_active: bool = True

    class Config:
        from_attributes = True


class SubscriptionRead(SQLModel):
    id: int
    tenant_id: str
    plan_id: int
    status: SubscriptionStatus
    trial_ends_at: Optional[datetime] = None
    current_period_start: Optional[datetime] = None
    current_period_end: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    plan: Optional[PlanRead] = None

    class Config:
        from_attributes = True


class TenantRead(SQLModel):
    """Tenant as returned by the registry, with its latest subscription"""
    id: str
    tenant_key: str
    name: str
    email: Optional[str] = None
    status: TenantStatus
    database_url: str
    tenant_metadata: Optional[dict] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    subscriptions: List[SubscriptionRead] = []

    class Config:
        from_attributes = True


class TenantIdentifier(BaseModel):
    """Tenant id or tenant key (at least one is required to resolve)"""
    tenant_id: Optional[str] = Field(default=None, description="Stable tenant ID")
    tenant_key: Optional[str] = Field(default=None, description="Tenant key (case-insensitive)")

    @property
    def is_empty(self) -> bool:
        return not self.tenant_id and not (self.tenant_key and self.tenant_key.strip())

    @property
    def cache_key(self) -> str:
        if self.tenant_id:
            return self.tenant_id
        return normalize_tenant_key(self.tenant_key or "")

    def as_dict(self) -> Dict[str, Optional[str]]:
        return {"tenant_id": self.tenant_id, "tenant_key": self.tenant_key}


class TenantContextRead(BaseModel):
    """Public view of a resolved tenant context (no client, no database URL)"""
    tenant_id: str
    tenant_key: str
    name: str
    status: TenantStatus
    subscription_status: Optional[SubscriptionStatus] = None
    current_period_end: Optional[datetime] = None
    trial_ends_at: Optional[datetime] = None
    plan: Optional[PlanRead] = None
    metadata: Optional[Dict[str, Any]] = None
