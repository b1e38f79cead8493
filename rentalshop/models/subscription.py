"""
Subscription model
Links a tenant to a plan for a billing period
"""

from sqlmodel import Field, SQLModel, Relationship
from sqlalchemy import DateTime
from datetime import datetime
from typing import Optional, TYPE_CHECKING
from enum import Enum

from rentalshop.models.base import utcnow

if TYPE_CHECKING:
    from rentalshop.models.plan import Plan
    from rentalshop.models.tenant import Tenant


class SubscriptionStatus(str, Enum):
    """Billing status of a subscription"""
    TRIAL = "TRIAL"
    ACTIVE = "ACTIVE"
    PAST_DUE = "PAST_DUE"
    CANCELLED = "CANCELLED"


class Subscription(SQLModel, table=True):
    """Tenant subscription to a plan"""

    __tablename__ = "subscriptions"

    # Autoincrement, so it also orders subscriptions created in the same instant
    id: Optional[int] = Field(default=None, primary_key=True)
    tenant_id: str = Field(foreign_key="tenants.id", index=True)
    plan_id: int = Field(foreign_key="plans.id", index=True)

    status: SubscriptionStatus = Field(default=SubscriptionStatus.TRIAL, index=True)

    # Billing period
    trial_ends_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))
    current_period_start: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
    current_period_end: datetime = Field(sa_type=DateTime(timezone=True))
    cancelled_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, index=True, sa_type=DateTime(timezone=True))
    updated_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))

    # Relationships
    tenant: Optional["Tenant"] = Relationship(back_populates="subscriptions")
    plan: Optional["Plan"] = Relationship(back_populates="subscriptions")
