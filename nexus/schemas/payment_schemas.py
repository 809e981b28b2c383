from datetime import date, datetime
from typing import Optional
from pydantic import BaseModel, Field

from nexus.models.enums import PaymentMethod, PaymentRecordStatus


class PaymentCreate(BaseModel):
    """Schema for recording a rent payment"""

    tenant_id: int = Field(..., gt=0)
    building_id: int = Field(..., gt=0)
    amount: float = Field(..., gt=0)
    payment_date: date
    payment_method: PaymentMethod
    receipt_number: Optional[str] = Field(None, max_length=100)
    notes: Optional[str] = Field(None, max_length=1000)


class PaymentBulkCreate(BaseModel):
    """Same payment recorded for several tenants of one building (all or nothing)"""

    building_id: int = Field(..., gt=0)
    tenant_ids: list[int] = Field(..., min_length=1, max_length=500)
    amount: float = Field(..., gt=0)
    payment_date: date
    payment_method: PaymentMethod
    notes: Optional[str] = Field(None, max_length=1000)


class PaymentUpdate(BaseModel):
    amount: Optional[float] = Field(None, gt=0)
    payment_date: Optional[date] = None
    payment_method: Optional[PaymentMethod] = None
    receipt_number: Optional[str] = Field(None, max_length=100)
    notes: Optional[str] = Field(None, max_length=1000)


class PaymentResponse(BaseModel):
    model_config = {"from_attributes": True}

    id: int
    org_id: int
    tenant_id: int
    building_id: int
    amount: float
    payment_date: date
    payment_method: PaymentMethod
    receipt_number: Optional[str]
    status: PaymentRecordStatus
    notes: Optional[str]
    created_at: datetime
    updated_at: datetime


class PaymentListResponse(BaseModel):
    payments: list[PaymentResponse]
    total: int


class PaymentBulkResponse(BaseModel):
    payments: list[PaymentResponse]
    total_amount: float
    count: int


class MonthlyPaymentTrend(BaseModel):
    month: str = Field(..., description="Month label, e.g. 'Jan 2025'")
    year: int
    month_number: int
    amount: float
    count: int


class PaymentReport(BaseModel):
    """Collection summary with method breakdown and monthly trends"""

    total_payments: int
    total_amount: float
    paid_tenants: int
    overdue_tenants: int
    collection_rate: float
    method_breakdown: dict[str, int]
    monthly_trends: list[MonthlyPaymentTrend]
