from datetime import date, datetime
from typing import Optional
from pydantic import BaseModel, Field

from nexus.models.enums import PaymentStatus, TenantStatus


class TenantCreate(BaseModel):
    """Schema for adding a tenant to a building"""

    building_id: int = Field(..., gt=0)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    emergency_contact_name: Optional[str] = Field(None, max_length=200)
    emergency_contact_phone: Optional[str] = Field(None, max_length=50)
    lease_start_date: date
    lease_end_date: Optional[date] = None
    monthly_rent: float = Field(..., ge=0)
    security_deposit: float = Field(default=0.00, ge=0)
    payment_status: PaymentStatus = PaymentStatus.PENDING
    payment_due_date: Optional[date] = None
    notes: Optional[str] = Field(None, max_length=2000)


class TenantUpdate(BaseModel):
    """Schema for updating a tenant; the building cannot be changed"""

    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    emergency_contact_name: Optional[str] = Field(None, max_length=200)
    emergency_contact_phone: Optional[str] = Field(None, max_length=50)
    lease_start_date: Optional[date] = None
    lease_end_date: Optional[date] = None
    monthly_rent: Optional[float] = Field(None, ge=0)
    security_deposit: Optional[float] = Field(None, ge=0)
    payment_status: Optional[PaymentStatus] = None
    payment_due_date: Optional[date] = None
    notes: Optional[str] = Field(None, max_length=2000)


class TenantResponse(BaseModel):
    model_config = {"from_attributes": True}

    id: int
    org_id: int
    building_id: int
    first_name: str
    last_name: str
    full_name: str
    email: Optional[str]
    phone: Optional[str]
    emergency_contact_name: Optional[str]
    emergency_contact_phone: Optional[str]
    lease_start_date: date
    lease_end_date: Optional[date]
    monthly_rent: float
    security_deposit: float
    payment_status: PaymentStatus
    payment_due_date: Optional[date]
    notes: Optional[str]
    status: TenantStatus
    created_at: datetime
    updated_at: datetime


class TenantListResponse(BaseModel):
    tenants: list[TenantResponse]
    total: int
