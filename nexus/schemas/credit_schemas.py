from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

from nexus.models.enums import CreditScore, CreditStatus, CreditTransactionType


class CreditAccountSettings(BaseModel):
    """Terms used when opening a credit account"""

    credit_limit: float = Field(default=0.00, ge=0)
    payment_terms: int = Field(default=30, ge=0, le=365, description="Days until payment is due")
    is_active: bool = True
    credit_score: CreditScore = CreditScore.GOOD


class CreditAccountUpdate(BaseModel):
    """Balance changes go through transactions; only terms are set here"""

    is_active: Optional[bool] = None
    credit_limit: Optional[float] = Field(None, ge=0)
    payment_terms: Optional[int] = Field(None, ge=0, le=365)
    credit_score: Optional[CreditScore] = None
    overdue_amount: Optional[float] = Field(None, ge=0)


class CreditAccountResponse(BaseModel):
    model_config = {"from_attributes": True}

    id: int
    customer_id: int
    is_active: bool
    credit_limit: float
    current_balance: float
    available_credit: float
    payment_terms: int
    last_payment_date: Optional[datetime]
    last_payment_amount: Optional[float]
    overdue_amount: float
    credit_score: CreditScore
    credit_status: CreditStatus
    created_at: datetime
    updated_at: datetime


class CreditAccountSummary(CreditAccountResponse):
    """Credit account with the owning customer's name and number"""

    customer_number: str
    customer_name: str


class CreditAccountListResponse(BaseModel):
    accounts: list[CreditAccountSummary]
    total: int


class CreditTransactionCreate(BaseModel):
    """
    Purchases and payments take a positive amount.
    Adjustments are signed: positive raises the balance, negative lowers it.
    """

    type: CreditTransactionType
    amount: float
    description: Optional[str] = Field(None, max_length=1000)
    reference: Optional[str] = Field(None, max_length=100)


class CreditTransactionResponse(BaseModel):
    model_config = {"from_attributes": True}

    id: int
    customer_id: int
    credit_account_id: int
    type: CreditTransactionType
    amount: float
    description: Optional[str]
    reference: Optional[str]
    balance_after: float
    created_by: Optional[str]
    created_at: datetime


class CreditTransactionListResponse(BaseModel):
    transactions: list[CreditTransactionResponse]
    total: int


class CreditStats(BaseModel):
    total_credit_limit: float
    total_outstanding: float
    total_overdue: float
    total_accounts: int
    active_accounts: int
    accounts_with_overdue: int
    utilization_rate: float
