"""
Schemas module
"""

from rentalshop.schemas.tenant import (
    PlanRead,
    SubscriptionRead,
    TenantContextRead,
    TenantIdentifier,
    TenantRead,
)

__all__ = [
    "PlanRead",
    "SubscriptionRead",
    "TenantContextRead",
    "TenantIdentifier",
    "TenantRead",
]
