"""String enumerations shared by models, schemas and services."""

from enum import Enum as PyEnum


class StockStatus(str, PyEnum):
    IN_STOCK = "in_stock"
    LOW_STOCK = "low_stock"
    OUT_OF_STOCK = "out_of_stock"


class TenantStatus(str, PyEnum):
    ACTIVE = "active"
    DELETED = "deleted"


class PaymentStatus(str, PyEnum):
    """Rent status of a tenant"""

    PENDING = "pending"
    PAID = "paid"
    OVERDUE = "overdue"


class PaymentMethod(str, PyEnum):
    CASH = "cash"
    BANK_TRANSFER = "bank_transfer"
    MOBILE_MONEY = "mobile_money"
    CHECK = "check"
    OTHER = "other"


class PaymentRecordStatus(str, PyEnum):
    COMPLETED = "completed"


class CustomerStatus(str, PyEnum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"


class CustomerType(str, PyEnum):
    REGULAR = "regular"
    VIP = "vip"
    WHOLESALE = "wholesale"


class CreditStatus(str, PyEnum):
    """Derived standing of a credit account, used for customer filtering"""

    GOOD = "good"
    OVERDUE = "overdue"
    AT_LIMIT = "at_limit"


class CreditTransactionType(str, PyEnum):
    PURCHASE = "purchase"
    PAYMENT = "payment"
    ADJUSTMENT = "adjustment"


class LoyaltyTier(str, PyEnum):
    BRONZE = "bronze"
    SILVER = "silver"
    GOLD = "gold"
    PLATINUM = "platinum"


class LoyaltyTransactionType(str, PyEnum):
    EARNED = "earned"
    REDEEMED = "redeemed"
    EXPIRED = "expired"
    BONUS = "bonus"


class CreditScore(str, PyEnum):
    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"
