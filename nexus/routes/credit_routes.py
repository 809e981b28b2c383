from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.orm import Session

from nexus.database import get_db
from nexus.dependencies import get_org_context
from nexus.models.org_context import OrgContext
from nexus.services.credit_service import CreditService
from nexus.schemas.credit_schemas import (
    CreditAccountListResponse,
    CreditAccountResponse,
    CreditAccountUpdate,
    CreditStats,
    CreditTransactionCreate,
    CreditTransactionListResponse,
    CreditTransactionResponse,
)

router = APIRouter()


@router.get("/accounts", response_model=CreditAccountListResponse)
async def list_credit_accounts(
    account_filter: str = Query(
        "all", alias="filter", pattern="^(all|active|overdue|suspended)$"
    ),
    context: OrgContext = Depends(get_org_context),
    db: Session = Depends(get_db),
):
    service = CreditService(db)
    accounts = service.get_accounts(context, account_filter=account_filter)
    return CreditAccountListResponse(accounts=accounts, total=len(accounts))


@router.get("/stats", response_model=CreditStats)
async def get_credit_stats(
    context: OrgContext = Depends(get_org_context),
    db: Session = Depends(get_db),
):
    service = CreditService(db)
    return service.get_stats(context)


@router.get("/accounts/{customer_id}", response_model=CreditAccountResponse)
async def get_credit_account(
    customer_id: int,
    context: OrgContext = Depends(get_org_context),
    db: Session = Depends(get_db),
):
    """Returns 404 if the customer has no credit account."""
    service = CreditService(db)
    return service.get_account(customer_id, context)


@router.patch("/accounts/{customer_id}", response_model=CreditAccountResponse)
async def update_credit_account(
    customer_id: int,
    account_data: CreditAccountUpdate,
    context: OrgContext = Depends(get_org_context),
    db: Session = Depends(get_db),
):
    """
    Change credit settings.

    - Returns 400 if the new limit is below the current balance
    """
    service = CreditService(db)
    return service.update_account(customer_id, account_data, context)


@router.get(
    "/accounts/{customer_id}/transactions", response_model=CreditTransactionListResponse
)
async def list_credit_transactions(
    customer_id: int,
    context: OrgContext = Depends(get_org_context),
    db: Session = Depends(get_db),
):
    service = CreditService(db)
    transactions = service.get_transactions(customer_id, context)
    return CreditTransactionListResponse(transactions=transactions, total=len(transactions))


@router.post(
    "/accounts/{customer_id}/transactions",
    response_model=CreditTransactionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_credit_transaction(
    customer_id: int,
    transaction_data: CreditTransactionCreate,
    context: OrgContext = Depends(get_org_context),
    db: Session = Depends(get_db),
):
    """
    Post a purchase, payment or adjustment.

    - purchase: must fit in available credit on an active account
    - payment: at most the balance; pays down the overdue amount first
    - adjustment: signed; the balance cannot go negative
    """
    service = CreditService(db)
    return service.add_transaction(customer_id, transaction_data, context)
