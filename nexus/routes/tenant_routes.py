from typing import Optional
from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.orm import Session

from nexus.database import get_db
from nexus.dependencies import get_org_context
from nexus.models.enums import PaymentStatus
from nexus.models.org_context import OrgContext
from nexus.services.tenant_service import TenantService
from nexus.schemas.tenant_schemas import (
    TenantCreate,
    TenantListResponse,
    TenantResponse,
    TenantUpdate,
)

router = APIRouter()


@router.post("", response_model=TenantResponse, status_code=status.HTTP_201_CREATED)
async def add_tenant(
    tenant_data: TenantCreate,
    context: OrgContext = Depends(get_org_context),
    db: Session = Depends(get_db),
):
    """
    Add a tenant to a building.

    - Building must exist and have a vacant unit (400 otherwise)
    - Occupies one unit and adds the rent to the building's total_rent
    """
    service = TenantService(db)
    return service.add_tenant(tenant_data, context)


@router.get("", response_model=TenantListResponse)
async def list_tenants(
    building_id: Optional[int] = Query(None, description="Limit to one building"),
    payment_status: Optional[PaymentStatus] = Query(None),
    search: Optional[str] = Query(None, description="Match first name, last name or email"),
    context: OrgContext = Depends(get_org_context),
    db: Session = Depends(get_db),
):
    service = TenantService(db)
    tenants = service.get_tenants(
        context, building_id=building_id, payment_status=payment_status, search=search
    )
    return TenantListResponse(tenants=tenants, total=len(tenants))


@router.get("/{tenant_id}", response_model=TenantResponse)
async def get_tenant(
    tenant_id: int,
    context: OrgContext = Depends(get_org_context),
    db: Session = Depends(get_db),
):
    service = TenantService(db)
    return service.get_tenant(tenant_id, context)


@router.patch("/{tenant_id}", response_model=TenantResponse)
async def update_tenant(
    tenant_id: int,
    tenant_data: TenantUpdate,
    context: OrgContext = Depends(get_org_context),
    db: Session = Depends(get_db),
):
    service = TenantService(db)
    return service.update_tenant(tenant_id, tenant_data, context)


@router.delete("/{tenant_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_tenant(
    tenant_id: int,
    context: OrgContext = Depends(get_org_context),
    db: Session = Depends(get_db),
):
    """
    Remove a tenant.

    - Soft delete: payment and receipt history is kept
    - Frees the unit and takes the rent off the building
    """
    service = TenantService(db)
    service.delete_tenant(tenant_id, context)
