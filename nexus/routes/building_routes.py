from typing import Optional
from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.orm import Session

from nexus.database import get_db
from nexus.dependencies import get_org_context
from nexus.models.enums import PaymentStatus
from nexus.models.org_context import OrgContext
from nexus.services.building_service import BuildingService
from nexus.services.tenant_service import TenantService
from nexus.schemas.building_schemas import (
    BuildingCreate,
    BuildingListResponse,
    BuildingResponse,
    BuildingUpdate,
    PortfolioOverview,
)
from nexus.schemas.tenant_schemas import TenantListResponse

router = APIRouter()


@router.post("", response_model=BuildingResponse, status_code=status.HTTP_201_CREATED)
async def create_building(
    building_data: BuildingCreate,
    context: OrgContext = Depends(get_org_context),
    db: Session = Depends(get_db),
):
    """
    Create a building.

    - Starts with no occupied units and no rent
    - Requires MEMBER or higher permissions
    """
    service = BuildingService(db)
    return service.create_building(building_data, context)


@router.get("", response_model=BuildingListResponse)
async def list_buildings(
    search: Optional[str] = Query(None, description="Match name or address"),
    context: OrgContext = Depends(get_org_context),
    db: Session = Depends(get_db),
):
    service = BuildingService(db)
    buildings = service.get_buildings(context, search=search)
    return BuildingListResponse(buildings=buildings, total=len(buildings))


@router.get("/overview", response_model=PortfolioOverview)
async def get_portfolio_overview(
    context: OrgContext = Depends(get_org_context),
    db: Session = Depends(get_db),
):
    """Occupancy and collection totals across all buildings."""
    service = BuildingService(db)
    return service.get_portfolio_overview(context)


@router.get("/{building_id}", response_model=BuildingResponse)
async def get_building(
    building_id: int,
    context: OrgContext = Depends(get_org_context),
    db: Session = Depends(get_db),
):
    service = BuildingService(db)
    return service.get_building(building_id, context)


@router.get("/{building_id}/tenants", response_model=TenantListResponse)
async def list_building_tenants(
    building_id: int,
    payment_status: Optional[PaymentStatus] = Query(None),
    search: Optional[str] = Query(None),
    context: OrgContext = Depends(get_org_context),
    db: Session = Depends(get_db),
):
    """Active tenants of one building. Returns 404 for an unknown building."""
    service = TenantService(db)
    tenants = service.get_tenants(
        context, building_id=building_id, payment_status=payment_status, search=search
    )
    return TenantListResponse(tenants=tenants, total=len(tenants))


@router.patch("/{building_id}", response_model=BuildingResponse)
async def update_building(
    building_id: int,
    building_data: BuildingUpdate,
    context: OrgContext = Depends(get_org_context),
    db: Session = Depends(get_db),
):
    """
    Update building details.

    - Returns 400 if total_units would drop below occupied units
    """
    service = BuildingService(db)
    return service.update_building(building_id, building_data, context)


@router.delete("/{building_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_building(
    building_id: int,
    context: OrgContext = Depends(get_org_context),
    db: Session = Depends(get_db),
):
    """
    Delete a building.

    - Returns 400 while the building still has active tenants
    """
    service = BuildingService(db)
    service.delete_building(building_id, context)
