import datetime
from typing import Optional
from pydantic import BaseModel, Field

from nexus.models.enums import PaymentMethod


class ReceiptItem(BaseModel):
    description: str = Field(..., min_length=1, max_length=255)
    quantity: int = Field(default=1, ge=1)
    price: float = Field(..., ge=0)


class ReceiptCreate(BaseModel):
    """Schema for issuing a receipt; number is generated when omitted"""

    tenant_id: int = Field(..., gt=0)
    building_id: int = Field(..., gt=0)
    payment_id: Optional[int] = Field(None, gt=0)
    receipt_number: Optional[str] = Field(None, min_length=1, max_length=100)
    date: datetime.date
    due_date: Optional[datetime.date] = None
    items: list[ReceiptItem] = Field(..., min_length=1)
    payment_method: Optional[PaymentMethod] = None
    notes: Optional[str] = Field(None, max_length=1000)


class ReceiptUpdate(BaseModel):
    """Changing items recomputes subtotal and total"""

    date: Optional[datetime.date] = None
    due_date: Optional[datetime.date] = None
    items: Optional[list[ReceiptItem]] = Field(None, min_length=1)
    payment_method: Optional[PaymentMethod] = None
    notes: Optional[str] = Field(None, max_length=1000)


class ReceiptResponse(BaseModel):
    model_config = {"from_attributes": True}

    id: int
    org_id: int
    receipt_number: str
    date: datetime.date
    due_date: Optional[datetime.date]
    tenant_id: int
    building_id: int
    payment_id: Optional[int]
    items: list[ReceiptItem]
    subtotal: float
    tax_amount: float
    total: float
    payment_method: Optional[PaymentMethod]
    notes: Optional[str]
    created_at: datetime.datetime
    updated_at: datetime.datetime


class ReceiptListResponse(BaseModel):
    receipts: list[ReceiptResponse]
    total: int
