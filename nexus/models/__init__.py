# Import all models so they register with Base.metadata
from nexus.models.base import Base
from nexus.models.user import User
from nexus.models.organization import Organization
from nexus.models.organization_membership import OrganizationMembership
from nexus.models.product import Product
from nexus.models.building import Building
from nexus.models.tenant import Tenant
from nexus.models.payment import Payment
from nexus.models.receipt import Receipt
from nexus.models.customer import Customer
from nexus.models.credit_account import CreditAccount
from nexus.models.credit_transaction import CreditTransaction
from nexus.models.loyalty_account import LoyaltyAccount
from nexus.models.loyalty_transaction import LoyaltyTransaction

__all__ = [
    "Base",
    "User",
    "Organization",
    "OrganizationMembership",
    "Product",
    "Building",
    "Tenant",
    "Payment",
    "Receipt",
    "Customer",
    "CreditAccount",
    "CreditTransaction",
    "LoyaltyAccount",
    "LoyaltyTransaction",
]
