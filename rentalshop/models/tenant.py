"""
Tenant model - tenant registry row in the main database

Each tenant owns an isolated physical database reachable through
``database_url``. Rows are written by provisioning, the tenant manager
only reads them.
"""

from sqlmodel import Field, SQLModel, Relationship
from sqlalchemy import Column, DateTime, JSON
from datetime import datetime
from typing import Optional, TYPE_CHECKING
from enum import Enum
import uuid

from rentalshop.models.base import utcnow

if TYPE_CHECKING:
    from rentalshop.models.subscription import Subscription


def generate_tenant_id() -> str:
    return f"tenant_{uuid.uuid4().hex}"


class TenantStatus(str, Enum):
    """Lifecycle status of a tenant"""
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    SUSPENDED = "SUSPENDED"


class Tenant(SQLModel, table=True):
    """Tenant model for multi-tenant architecture"""

    __tablename__ = "tenants"

    id: str = Field(default_factory=generate_tenant_id, primary_key=True, max_length=64)
    tenant_key: str = Field(
        unique=True,
        index=True,
        max_length=50,
        description="Normalized tenant key used for subdomain routing"
    )
    name: str = Field(index=True, max_length=255)
    email: Optional[str] = Field(default=None, index=True, max_length=255)

    status: TenantStatus = Field(default=TenantStatus.ACTIVE, index=True)
    database_url: str = Field(description="Connection string of the tenant's isolated database")

    # "metadata" is reserved on declarative classes
    tenant_metadata: Optional[dict] = Field(
        default=None,
        sa_column=Column("metadata", JSON, nullable=True)
    )

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
    updated_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))

    # Relationships
    subscriptions: list["Subscription"] = Relationship(back_populates="tenant")
