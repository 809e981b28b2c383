import logging
from typing import Optional
from sqlalchemy.orm import Session

from nexus.core import calculations
from nexus.core.exceptions import NotFoundException, ValidationException
from nexus.models.building import Building
from nexus.models.enums import PaymentStatus, TenantStatus
from nexus.models.org_context import OrgContext
from nexus.models.tenant import Tenant
from nexus.repositories.building_repository import BuildingRepository
from nexus.repositories.tenant_repository import TenantRepository
from nexus.schemas.tenant_schemas import TenantCreate, TenantUpdate
from nexus.services.permissions import require_write

logger = logging.getLogger(__name__)


class TenantService:
    """
    Service layer for rental tenants.

    Adding, re-pricing and removing tenants keeps the building's
    occupied_units and total_rent in step, in the same commit.
    """

    def __init__(self, db: Session):
        self.db = db
        self.tenant_repo = TenantRepository(db)
        self.building_repo = BuildingRepository(db)

    def _get_building(self, building_id: int, context: OrgContext) -> Building:
        building = self.building_repo.get_by_id_and_org(building_id, context.org_id)
        if not building:
            raise NotFoundException(f"Building {building_id} not found")
        return building

    def _get_active(self, tenant_id: int, context: OrgContext) -> Tenant:
        tenant = self.tenant_repo.get_by_id_and_org(tenant_id, context.org_id)
        if not tenant or tenant.status != TenantStatus.ACTIVE:
            raise NotFoundException(f"Tenant {tenant_id} not found")
        return tenant

    def add_tenant(self, tenant_data: TenantCreate, context: OrgContext) -> Tenant:
        """
        Add a tenant to a building with a vacant unit.

        Args:
            tenant_data: Tenant details including building_id
            context: Organization context

        Returns:
            Created tenant

        Raises:
            NotFoundException: If building doesn't exist in the organization
            ValidationException: If the building has no vacant unit
        """
        require_write(context)
        building = self._get_building(tenant_data.building_id, context)

        if building.occupied_units >= building.total_units:
            logger.warning("Building %s is full; tenant not added", building.id)
            raise ValidationException(f"Building '{building.name}' has no vacant units")

        tenant = Tenant(
            org_id=context.org_id,
            status=TenantStatus.ACTIVE,
            **tenant_data.model_dump(),
        )
        tenant = self.tenant_repo.create_no_commit(tenant)

        building.occupied_units += 1
        building.total_rent = calculations.round_money(
            calculations.to_float(building.total_rent) + tenant_data.monthly_rent
        )

        tenant = self.tenant_repo.commit(tenant)
        logger.info("Added tenant %s to building %s", tenant.id, building.id)
        return tenant

    def get_tenant(self, tenant_id: int, context: OrgContext) -> Tenant:
        return self._get_active(tenant_id, context)

    def get_tenants(
        self,
        context: OrgContext,
        building_id: Optional[int] = None,
        payment_status: Optional[PaymentStatus] = None,
        search: Optional[str] = None,
    ) -> list[Tenant]:
        """Active tenants, optionally limited to one building."""
        if building_id is not None:
            self._get_building(building_id, context)
        return self.tenant_repo.get_active(
            context.org_id,
            building_id=building_id,
            payment_status=payment_status,
            search=search,
        )

    def update_tenant(
        self, tenant_id: int, tenant_data: TenantUpdate, context: OrgContext
    ) -> Tenant:
        """
        Update tenant details.

        A monthly_rent change moves the building's total_rent by the difference.
        """
        require_write(context)
        tenant = self._get_active(tenant_id, context)

        old_rent = calculations.to_float(tenant.monthly_rent)
        for field, value in tenant_data.model_dump(exclude_none=True).items():
            setattr(tenant, field, value)

        if tenant_data.monthly_rent is not None and tenant_data.monthly_rent != old_rent:
            building = tenant.building
            building.total_rent = calculations.round_money(
                calculations.to_float(building.total_rent) - old_rent + tenant_data.monthly_rent
            )

        return self.tenant_repo.commit(tenant)

    def delete_tenant(self, tenant_id: int, context: OrgContext) -> None:
        """
        Soft-delete a tenant and release the unit.

        Payments and receipts keep pointing at the deleted tenant.
        """
        require_write(context)
        tenant = self._get_active(tenant_id, context)
        building = tenant.building

        tenant.status = TenantStatus.DELETED
        building.occupied_units = max(building.occupied_units - 1, 0)
        building.total_rent = calculations.round_money(
            max(
                calculations.to_float(building.total_rent)
                - calculations.to_float(tenant.monthly_rent),
                0,
            )
        )

        self.tenant_repo.commit(tenant)
        logger.info("Removed tenant %s from building %s", tenant.id, building.id)
