from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.orm import Session

from nexus.core import calculations, csv_export
from nexus.database import get_db
from nexus.dependencies import get_org_context
from nexus.models.enums import PaymentMethod
from nexus.models.org_context import OrgContext
from nexus.routes.csv_response import csv_response
from nexus.services.payment_service import (
    DEFAULT_REPORT_MONTHS,
    MAX_REPORT_MONTHS,
    PaymentService,
)
from nexus.schemas.payment_schemas import (
    PaymentBulkCreate,
    PaymentBulkResponse,
    PaymentCreate,
    PaymentListResponse,
    PaymentReport,
    PaymentResponse,
    PaymentUpdate,
)

router = APIRouter()


@router.post("", response_model=PaymentResponse, status_code=status.HTTP_201_CREATED)
async def add_payment(
    payment_data: PaymentCreate,
    context: OrgContext = Depends(get_org_context),
    db: Session = Depends(get_db),
):
    """
    Record a rent payment.

    - Tenant must be active and live in the given building
    - Marks the tenant as paid and adds the amount to collected_rent
    """
    service = PaymentService(db)
    return service.add_payment(payment_data, context)


@router.post("/bulk", response_model=PaymentBulkResponse, status_code=status.HTTP_201_CREATED)
async def add_bulk_payments(
    bulk_data: PaymentBulkCreate,
    context: OrgContext = Depends(get_org_context),
    db: Session = Depends(get_db),
):
    """
    Record the same payment for several tenants of one building.

    All payments are recorded or none are.
    """
    service = PaymentService(db)
    payments = service.add_bulk_payments(bulk_data, context)
    return PaymentBulkResponse(
        payments=payments,
        total_amount=calculations.round_money(bulk_data.amount * len(payments)),
        count=len(payments),
    )


@router.get("", response_model=PaymentListResponse)
async def list_payments(
    tenant_id: Optional[int] = Query(None),
    building_id: Optional[int] = Query(None),
    start_date: Optional[date] = Query(None, description="Inclusive"),
    end_date: Optional[date] = Query(None, description="Inclusive"),
    payment_method: Optional[PaymentMethod] = Query(None),
    limit: int = Query(100, ge=1, le=1000, description="Max results"),
    offset: int = Query(0, ge=0, description="Pagination offset"),
    context: OrgContext = Depends(get_org_context),
    db: Session = Depends(get_db),
):
    """List payments newest first."""
    service = PaymentService(db)
    payments, total = service.get_payments(
        context,
        tenant_id=tenant_id,
        building_id=building_id,
        start_date=start_date,
        end_date=end_date,
        payment_method=payment_method,
        limit=limit,
        offset=offset,
    )
    return PaymentListResponse(payments=payments, total=total)


@router.get("/report", response_model=PaymentReport)
async def get_payment_report(
    months: int = Query(DEFAULT_REPORT_MONTHS, description=f"1 to {MAX_REPORT_MONTHS}"),
    building_id: Optional[int] = Query(None),
    context: OrgContext = Depends(get_org_context),
    db: Session = Depends(get_db),
):
    """
    Payment totals, method breakdown and monthly trends.

    Trends cover the last `months` months including the current one.
    """
    service = PaymentService(db)
    return service.get_payment_report(context, months=months, building_id=building_id)


@router.get("/export")
async def export_payments(
    tenant_id: Optional[int] = Query(None),
    building_id: Optional[int] = Query(None),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    payment_method: Optional[PaymentMethod] = Query(None),
    context: OrgContext = Depends(get_org_context),
    db: Session = Depends(get_db),
):
    service = PaymentService(db)
    content = service.export_payments_csv(
        context,
        tenant_id=tenant_id,
        building_id=building_id,
        start_date=start_date,
        end_date=end_date,
        payment_method=payment_method,
    )
    return csv_response(content, csv_export.export_filename("payments"))


@router.get("/{payment_id}", response_model=PaymentResponse)
async def get_payment(
    payment_id: int,
    context: OrgContext = Depends(get_org_context),
    db: Session = Depends(get_db),
):
    service = PaymentService(db)
    return service.get_payment(payment_id, context)


@router.patch("/{payment_id}", response_model=PaymentResponse)
async def update_payment(
    payment_id: int,
    payment_data: PaymentUpdate,
    context: OrgContext = Depends(get_org_context),
    db: Session = Depends(get_db),
):
    service = PaymentService(db)
    return service.update_payment(payment_id, payment_data, context)


@router.delete("/{payment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_payment(
    payment_id: int,
    context: OrgContext = Depends(get_org_context),
    db: Session = Depends(get_db),
):
    service = PaymentService(db)
    service.delete_payment(payment_id, context)
