from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class BuildingCreate(BaseModel):
    """Schema for creating a building"""

    name: str = Field(..., min_length=1, max_length=255)
    address: str = Field(..., min_length=1, max_length=500)
    description: Optional[str] = Field(None, max_length=2000)
    total_units: int = Field(default=1, ge=1)


class BuildingUpdate(BaseModel):
    """Occupancy and rent totals are maintained by tenants and payments, not set here"""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    address: Optional[str] = Field(None, min_length=1, max_length=500)
    description: Optional[str] = Field(None, max_length=2000)
    total_units: Optional[int] = Field(None, ge=1)


class BuildingResponse(BaseModel):
    model_config = {"from_attributes": True}

    id: int
    org_id: int
    name: str
    address: str
    description: Optional[str]
    total_units: int
    occupied_units: int
    vacant_units: int
    total_rent: float
    collected_rent: float
    occupancy_rate: float
    collection_rate: float
    created_at: datetime
    updated_at: datetime


class BuildingListResponse(BaseModel):
    buildings: list[BuildingResponse]
    total: int


class PortfolioOverview(BaseModel):
    """Occupancy and rent collection across all buildings"""

    total_buildings: int
    total_units: int
    occupied_units: int
    vacant_units: int
    occupancy_rate: float
    total_rent: float
    collected_rent: float
    collection_rate: float
    active_tenants: int
    overdue_tenants: int
