from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

from nexus.models.enums import LoyaltyTier, LoyaltyTransactionType


class LoyaltyEnrollment(BaseModel):
    """Opening a loyalty account; a LOY- card number is issued when omitted"""

    card_number: Optional[str] = Field(None, min_length=1, max_length=50)


class LoyaltyAccountUpdate(BaseModel):
    card_number: Optional[str] = Field(None, min_length=1, max_length=50)


class LoyaltyAccountResponse(BaseModel):
    model_config = {"from_attributes": True}

    id: int
    customer_id: int
    card_number: Optional[str]
    current_points: int
    lifetime_points: int
    tier: LoyaltyTier
    tier_points: int
    next_tier_points: int
    points_to_next_tier: int
    tier_progress: float
    last_earned_date: Optional[datetime]
    last_redeemed_date: Optional[datetime]
    created_at: datetime
    updated_at: datetime


class LoyaltyAccountSummary(LoyaltyAccountResponse):
    customer_number: str
    customer_name: str


class LoyaltyAccountListResponse(BaseModel):
    accounts: list[LoyaltyAccountSummary]
    total: int


class LoyaltyTransactionCreate(BaseModel):
    """Points are always positive; the type decides whether they are added or removed"""

    type: LoyaltyTransactionType
    points: int = Field(..., gt=0)
    description: Optional[str] = Field(None, max_length=1000)
    order_id: Optional[str] = Field(None, max_length=100)


class LoyaltyTransactionResponse(BaseModel):
    model_config = {"from_attributes": True}

    id: int
    customer_id: int
    loyalty_account_id: int
    type: LoyaltyTransactionType
    points: int
    description: Optional[str]
    order_id: Optional[str]
    balance_after: int
    created_at: datetime


class LoyaltyTransactionListResponse(BaseModel):
    transactions: list[LoyaltyTransactionResponse]
    total: int


class LoyaltyStats(BaseModel):
    total_accounts: int
    total_current_points: int
    total_lifetime_points: int
    average_points: float
    tier_distribution: dict[str, int]


class TierRequirement(BaseModel):
    tier: LoyaltyTier
    min_lifetime_points: int
    next_tier: Optional[LoyaltyTier]
    next_tier_points: int
