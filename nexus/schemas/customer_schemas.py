from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

from nexus.models.enums import CustomerStatus, CustomerType
from nexus.schemas.credit_schemas import CreditAccountResponse, CreditAccountSettings
from nexus.schemas.loyalty_schemas import LoyaltyAccountResponse, LoyaltyEnrollment


class CustomerCreate(BaseModel):
    """
    Schema for creating a customer.

    Passing `credit` opens a credit account and passing `loyalty` enrolls the
    customer in the loyalty program, in the same commit.
    """

    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    address_street: Optional[str] = Field(None, max_length=255)
    address_city: Optional[str] = Field(None, max_length=100)
    address_state: Optional[str] = Field(None, max_length=100)
    address_zip_code: Optional[str] = Field(None, max_length=20)
    address_country: Optional[str] = Field(None, max_length=100)
    status: CustomerStatus = CustomerStatus.ACTIVE
    customer_type: CustomerType = CustomerType.REGULAR
    notes: Optional[str] = Field(None, max_length=2000)
    tags: Optional[list[str]] = Field(default_factory=list)
    credit: Optional[CreditAccountSettings] = None
    loyalty: Optional[LoyaltyEnrollment] = None


class CustomerUpdate(BaseModel):
    """Partial update; `credit` / `loyalty` open the account when it is missing"""

    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    address_street: Optional[str] = Field(None, max_length=255)
    address_city: Optional[str] = Field(None, max_length=100)
    address_state: Optional[str] = Field(None, max_length=100)
    address_zip_code: Optional[str] = Field(None, max_length=20)
    address_country: Optional[str] = Field(None, max_length=100)
    status: Optional[CustomerStatus] = None
    customer_type: Optional[CustomerType] = None
    notes: Optional[str] = Field(None, max_length=2000)
    tags: Optional[list[str]] = None
    credit: Optional[CreditAccountSettings] = None
    loyalty: Optional[LoyaltyEnrollment] = None


class CustomerResponse(BaseModel):
    model_config = {"from_attributes": True}

    id: int
    org_id: int
    customer_number: str
    first_name: str
    last_name: str
    full_name: str
    email: Optional[str]
    phone: Optional[str]
    address_street: Optional[str]
    address_city: Optional[str]
    address_state: Optional[str]
    address_zip_code: Optional[str]
    address_country: Optional[str]
    status: CustomerStatus
    customer_type: CustomerType
    notes: Optional[str]
    tags: Optional[list[str]]
    total_purchases: int
    total_spent: float
    last_purchase_date: Optional[datetime]
    credit_account: Optional[CreditAccountResponse]
    loyalty_account: Optional[LoyaltyAccountResponse]
    created_at: datetime
    updated_at: datetime


class CustomerListResponse(BaseModel):
    customers: list[CustomerResponse]
    total: int


class SaleRecord(BaseModel):
    """Purchase made by a customer"""

    amount: float = Field(..., gt=0)
    award_points: bool = Field(
        default=True, description="Earn 1 loyalty point per whole currency unit"
    )
    order_id: Optional[str] = Field(None, max_length=100)


class TopCustomer(BaseModel):
    id: int
    customer_number: str
    name: str
    total_spent: float
    total_purchases: int


class CustomerStats(BaseModel):
    total_customers: int
    active_customers: int
    credit_accounts: int
    active_credit_accounts: int
    loyalty_accounts: int
    total_credit_outstanding: float
    average_credit_balance: float
    customers_with_overdue: int
    new_this_month: int
    top_customers: list[TopCustomer]
