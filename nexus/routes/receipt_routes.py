from typing import Optional
from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.orm import Session

from nexus.database import get_db
from nexus.dependencies import get_org_context
from nexus.models.org_context import OrgContext
from nexus.services.receipt_service import ReceiptService
from nexus.schemas.receipt_schemas import (
    ReceiptCreate,
    ReceiptListResponse,
    ReceiptResponse,
    ReceiptUpdate,
)

router = APIRouter()


@router.post("", response_model=ReceiptResponse, status_code=status.HTTP_201_CREATED)
async def add_receipt(
    receipt_data: ReceiptCreate,
    context: OrgContext = Depends(get_org_context),
    db: Session = Depends(get_db),
):
    """
    Issue a receipt.

    - Receipt number is generated unless one is given (409 if taken)
    - Subtotal and total are computed from the items
    """
    service = ReceiptService(db)
    return service.add_receipt(receipt_data, context)


@router.get("", response_model=ReceiptListResponse)
async def list_receipts(
    tenant_id: Optional[int] = Query(None),
    building_id: Optional[int] = Query(None),
    context: OrgContext = Depends(get_org_context),
    db: Session = Depends(get_db),
):
    service = ReceiptService(db)
    receipts = service.get_receipts(context, tenant_id=tenant_id, building_id=building_id)
    return ReceiptListResponse(receipts=receipts, total=len(receipts))


@router.get("/{receipt_id}", response_model=ReceiptResponse)
async def get_receipt(
    receipt_id: int,
    context: OrgContext = Depends(get_org_context),
    db: Session = Depends(get_db),
):
    service = ReceiptService(db)
    return service.get_receipt(receipt_id, context)


@router.patch("/{receipt_id}", response_model=ReceiptResponse)
async def update_receipt(
    receipt_id: int,
    receipt_data: ReceiptUpdate,
    context: OrgContext = Depends(get_org_context),
    db: Session = Depends(get_db),
):
    service = ReceiptService(db)
    return service.update_receipt(receipt_id, receipt_data, context)


@router.delete("/{receipt_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_receipt(
    receipt_id: int,
    context: OrgContext = Depends(get_org_context),
    db: Session = Depends(get_db),
):
    service = ReceiptService(db)
    service.delete_receipt(receipt_id, context)
