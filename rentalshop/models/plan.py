"""
Plan model
Billing plans referenced by tenant subscriptions
"""

from sqlmodel import Field, SQLModel, Relationship
from sqlalchemy import Column, DateTime, JSON, Numeric
from decimal import Decimal
from datetime import datetime
from typing import Optional, TYPE_CHECKING

from rentalshop.models.base import utcnow

if TYPE_CHECKING:
    from rentalshop.models.subscription import Subscription


class Plan(SQLModel, table=True):
    """Subscription plan"""

    __tablename__ = "plans"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(index=True, max_length=100)
    description: Optional[str] = None
    base_price: Decimal = Field(
        default=Decimal("0.00"),
        sa_column=Column(Numeric(10, 2), nullable=False)
    )
    currency: str = Field(default="USD", max_length=3)
    trial_days: int = Field(default=14)

    # Limits and feature flags (JSONB in PostgreSQL)
    limits: Optional[dict] = Field(default=None, sa_column=Column(JSON, nullable=True))
    features: Optional[list] = Field(default=None, sa_column=Column(JSON, nullable=True))

    is_active: bool = Field(default=True, index=True)
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
    updated_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))

    subscriptions: list["Subscription"] = Relationship(back_populates="plan")
