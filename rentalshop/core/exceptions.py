"""
Tenant resolution errors

Every error raised by the tenant manager derives from TenantManagerError
and carries a stable ``code`` that request handlers can switch on.
"""

from typing import Any, Dict, Optional


class TenantManagerError(Exception):
    """Base class for tenant manager errors"""

    code = "TENANT_MANAGER_ERROR"
    status_code = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary"""
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class TenantIdentifierMissingError(TenantManagerError):
    """Neither a tenant id nor a tenant key was supplied"""

    code = "TENANT_IDENTIFIER_MISSING"
    status_code = 400

    def __init__(self):
        super().__init__("Tenant identifier is required (tenant_id or tenant_key)")


class TenantNotFoundError(TenantManagerError):
    """No registry row matches the identifier"""

    code = "TENANT_NOT_FOUND"
    status_code = 404

    def __init__(self, identifier: Dict[str, Optional[str]]):
        super().__init__(
            f"Tenant not found: {_describe(identifier)}",
            {"identifier": identifier},
        )
        self.identifier = identifier


class TenantInactiveError(TenantManagerError):
    """Tenant exists but is not ACTIVE"""

    code = "TENANT_INACTIVE"
    status_code = 403

    def __init__(self, identifier: Dict[str, Optional[str]], status: str):
        super().__init__(
            f"Tenant {_describe(identifier)} is {status}",
            {"identifier": identifier, "status": status},
        )
        self.identifier = identifier
        self.status = status


class TenantSubscriptionError(TenantManagerError):
    """Tenant has no subscription that grants access"""

    code = "TENANT_SUBSCRIPTION_INVALID"
    status_code = 402

    def __init__(
        self,
        identifier: Dict[str, Optional[str]],
        subscription_status: Optional[str] = None,
    ):
        if subscription_status is None:
            message = f"Tenant {_describe(identifier)} has no subscription"
        else:
            message = (
                f"Tenant {_describe(identifier)} subscription is not valid "
                f"(status: {subscription_status})"
            )
        super().__init__(
            message,
            {"identifier": identifier, "subscription_status": subscription_status},
        )
        self.identifier = identifier
        self.subscription_status = subscription_status


def _describe(identifier: Dict[str, Optional[str]]) -> str:
    if identifier.get("tenant_id"):
        return f"id={identifier['tenant_id']}"
    return f"key={identifier.get('tenant_key')}"
