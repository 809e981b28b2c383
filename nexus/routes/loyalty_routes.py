from typing import Optional
from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.orm import Session

from nexus.database import get_db
from nexus.dependencies import get_org_context
from nexus.models.enums import LoyaltyTier
from nexus.models.org_context import OrgContext
from nexus.services.loyalty_service import LoyaltyService
from nexus.schemas.loyalty_schemas import (
    LoyaltyAccountListResponse,
    LoyaltyAccountResponse,
    LoyaltyAccountUpdate,
    LoyaltyStats,
    LoyaltyTransactionCreate,
    LoyaltyTransactionListResponse,
    LoyaltyTransactionResponse,
    TierRequirement,
)

router = APIRouter()


@router.get("/accounts", response_model=LoyaltyAccountListResponse)
async def list_loyalty_accounts(
    tier: Optional[LoyaltyTier] = Query(None),
    context: OrgContext = Depends(get_org_context),
    db: Session = Depends(get_db),
):
    service = LoyaltyService(db)
    accounts = service.get_accounts(context, tier=tier)
    return LoyaltyAccountListResponse(accounts=accounts, total=len(accounts))


@router.get("/stats", response_model=LoyaltyStats)
async def get_loyalty_stats(
    context: OrgContext = Depends(get_org_context),
    db: Session = Depends(get_db),
):
    service = LoyaltyService(db)
    return service.get_stats(context)


@router.get("/tiers", response_model=list[TierRequirement])
async def get_tier_requirements():
    """Lifetime points needed for each tier."""
    return LoyaltyService.get_tier_requirements()


@router.get("/accounts/{customer_id}", response_model=LoyaltyAccountResponse)
async def get_loyalty_account(
    customer_id: int,
    context: OrgContext = Depends(get_org_context),
    db: Session = Depends(get_db),
):
    service = LoyaltyService(db)
    return service.get_account(customer_id, context)


@router.patch("/accounts/{customer_id}", response_model=LoyaltyAccountResponse)
async def update_loyalty_account(
    customer_id: int,
    account_data: LoyaltyAccountUpdate,
    context: OrgContext = Depends(get_org_context),
    db: Session = Depends(get_db),
):
    """Reissue the loyalty card. Returns 409 if the card number is taken."""
    service = LoyaltyService(db)
    return service.update_account(customer_id, account_data, context)


@router.get(
    "/accounts/{customer_id}/transactions", response_model=LoyaltyTransactionListResponse
)
async def list_loyalty_transactions(
    customer_id: int,
    context: OrgContext = Depends(get_org_context),
    db: Session = Depends(get_db),
):
    service = LoyaltyService(db)
    transactions = service.get_transactions(customer_id, context)
    return LoyaltyTransactionListResponse(transactions=transactions, total=len(transactions))


@router.post(
    "/accounts/{customer_id}/transactions",
    response_model=LoyaltyTransactionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_loyalty_transaction(
    customer_id: int,
    transaction_data: LoyaltyTransactionCreate,
    context: OrgContext = Depends(get_org_context),
    db: Session = Depends(get_db),
):
    """
    Earn, redeem, expire or grant bonus points.

    - earned / bonus also count toward lifetime points and the tier
    - redeemed / expired cannot exceed the current balance (400)
    """
    service = LoyaltyService(db)
    return service.add_transaction(customer_id, transaction_data, context)
