from rentalshop.models.tenant import Tenant, TenantStatus
from rentalshop.models.plan import Plan
from rentalshop.models.subscription import Subscription, SubscriptionStatus
