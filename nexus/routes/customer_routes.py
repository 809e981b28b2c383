from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.orm import Session

from nexus.core import csv_export
from nexus.database import get_db
from nexus.dependencies import get_org_context
from nexus.models.enums import CreditStatus, CustomerStatus, CustomerType, LoyaltyTier
from nexus.models.org_context import OrgContext
from nexus.routes.csv_response import csv_response
from nexus.services.customer_service import CustomerService
from nexus.schemas.customer_schemas import (
    CustomerCreate,
    CustomerListResponse,
    CustomerResponse,
    CustomerStats,
    CustomerUpdate,
    SaleRecord,
)

router = APIRouter()


@router.post("", response_model=CustomerResponse, status_code=status.HTTP_201_CREATED)
async def create_customer(
    customer_data: CustomerCreate,
    context: OrgContext = Depends(get_org_context),
    db: Session = Depends(get_db),
):
    """
    Create a customer.

    - Customer number (CUST-000001, ...) is assigned automatically
    - Optional `credit` and `loyalty` blocks open the accounts in the same step
    """
    service = CustomerService(db)
    return service.create_customer(customer_data, context)


@router.get("", response_model=CustomerListResponse)
async def list_customers(
    search: Optional[str] = Query(None, description="Match first name, last name, email or phone"),
    status: Optional[CustomerStatus] = Query(None),
    customer_type: Optional[CustomerType] = Query(None),
    credit_status: Optional[CreditStatus] = Query(None),
    loyalty_tier: Optional[LoyaltyTier] = Query(None),
    created_from: Optional[date] = Query(None),
    created_to: Optional[date] = Query(None, description="Inclusive of the whole day"),
    limit: int = Query(100, ge=1, le=1000, description="Max results"),
    offset: int = Query(0, ge=0, description="Pagination offset"),
    context: OrgContext = Depends(get_org_context),
    db: Session = Depends(get_db),
):
    """List customers newest first. Every given filter must match."""
    service = CustomerService(db)
    customers, total = service.get_customers(
        context,
        search=search,
        status=status,
        customer_type=customer_type,
        credit_status=credit_status,
        loyalty_tier=loyalty_tier,
        created_from=created_from,
        created_to=created_to,
        limit=limit,
        offset=offset,
    )
    return CustomerListResponse(customers=customers, total=total)


@router.get("/stats", response_model=CustomerStats)
async def get_customer_stats(
    context: OrgContext = Depends(get_org_context),
    db: Session = Depends(get_db),
):
    service = CustomerService(db)
    return service.get_stats(context)


@router.get("/export")
async def export_customers(
    search: Optional[str] = Query(None),
    status: Optional[CustomerStatus] = Query(None),
    customer_type: Optional[CustomerType] = Query(None),
    credit_status: Optional[CreditStatus] = Query(None),
    loyalty_tier: Optional[LoyaltyTier] = Query(None),
    created_from: Optional[date] = Query(None),
    created_to: Optional[date] = Query(None),
    context: OrgContext = Depends(get_org_context),
    db: Session = Depends(get_db),
):
    service = CustomerService(db)
    content = service.export_customers_csv(
        context,
        search=search,
        status=status,
        customer_type=customer_type,
        credit_status=credit_status,
        loyalty_tier=loyalty_tier,
        created_from=created_from,
        created_to=created_to,
    )
    return csv_response(content, csv_export.export_filename("customers"))


@router.get("/{customer_id}", response_model=CustomerResponse)
async def get_customer(
    customer_id: int,
    context: OrgContext = Depends(get_org_context),
    db: Session = Depends(get_db),
):
    service = CustomerService(db)
    return service.get_customer(customer_id, context)


@router.patch("/{customer_id}", response_model=CustomerResponse)
async def update_customer(
    customer_id: int,
    customer_data: CustomerUpdate,
    context: OrgContext = Depends(get_org_context),
    db: Session = Depends(get_db),
):
    """
    Update customer details.

    - `credit` updates the credit account, opening one if needed
    - `loyalty` reissues the card, enrolling the customer if needed
    """
    service = CustomerService(db)
    return service.update_customer(customer_id, customer_data, context)


@router.post("/{customer_id}/sales", response_model=CustomerResponse)
async def record_sale(
    customer_id: int,
    sale: SaleRecord,
    context: OrgContext = Depends(get_org_context),
    db: Session = Depends(get_db),
):
    """
    Record a purchase.

    Earns one loyalty point per whole currency unit when the customer is
    enrolled and `award_points` is set.
    """
    service = CustomerService(db)
    return service.record_sale(customer_id, sale, context)


@router.delete("/{customer_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_customer(
    customer_id: int,
    context: OrgContext = Depends(get_org_context),
    db: Session = Depends(get_db),
):
    service = CustomerService(db)
    service.delete_customer(customer_id, context)
