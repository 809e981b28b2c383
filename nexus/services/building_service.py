import logging
from typing import Optional
from sqlalchemy.orm import Session

from nexus.core import calculations
from nexus.core.exceptions import NotFoundException, ValidationException
from nexus.models.building import Building
from nexus.models.enums import PaymentStatus
from nexus.models.org_context import OrgContext
from nexus.repositories.building_repository import BuildingRepository
from nexus.repositories.tenant_repository import TenantRepository
from nexus.schemas.building_schemas import BuildingCreate, BuildingUpdate
from nexus.services.permissions import require_write

logger = logging.getLogger(__name__)


class BuildingService:
    """Service layer for rental buildings and portfolio figures"""

    def __init__(self, db: Session):
        self.db = db
        self.building_repo = BuildingRepository(db)
        self.tenant_repo = TenantRepository(db)

    def create_building(self, building_data: BuildingCreate, context: OrgContext) -> Building:
        """New buildings start empty: no occupied units and no rent."""
        require_write(context)
        building = Building(
            org_id=context.org_id,
            name=building_data.name,
            address=building_data.address,
            description=building_data.description,
            total_units=building_data.total_units,
            occupied_units=0,
            total_rent=0,
            collected_rent=0,
        )
        building = self.building_repo.create(building)
        logger.info("Created building %s in org %s", building.id, context.org_id)
        return building

    def get_building(self, building_id: int, context: OrgContext) -> Building:
        building = self.building_repo.get_by_id_and_org(building_id, context.org_id)
        if not building:
            raise NotFoundException(f"Building {building_id} not found")
        return building

    def get_buildings(self, context: OrgContext, search: Optional[str] = None) -> list[Building]:
        return self.building_repo.get_by_org(context.org_id, search=search)

    def update_building(
        self, building_id: int, building_data: BuildingUpdate, context: OrgContext
    ) -> Building:
        """
        Update building details.

        Raises:
            ValidationException: If total_units would drop below occupied units
        """
        require_write(context)
        building = self.get_building(building_id, context)

        changes = building_data.model_dump(exclude_none=True)
        total_units = changes.get("total_units")
        if total_units is not None and total_units < building.occupied_units:
            raise ValidationException(
                f"Building has {building.occupied_units} occupied units; "
                f"total_units cannot be {total_units}"
            )

        for field, value in changes.items():
            setattr(building, field, value)

        return self.building_repo.update(building)

    def delete_building(self, building_id: int, context: OrgContext) -> None:
        """
        Delete a building.

        Raises:
            ValidationException: While the building still has active tenants
        """
        require_write(context)
        building = self.get_building(building_id, context)

        active_tenants = self.tenant_repo.count_active_in_building(building.id)
        if active_tenants:
            logger.warning(
                "Refused to delete building %s with %s active tenants", building.id, active_tenants
            )
            raise ValidationException(
                f"Cannot delete building with {active_tenants} active tenant(s); "
                "remove the tenants first"
            )

        self.building_repo.delete(building)
        logger.info("Deleted building %s from org %s", building_id, context.org_id)

    def get_portfolio_overview(self, context: OrgContext) -> dict:
        """Occupancy and collection across every building of the organization."""
        buildings = self.building_repo.get_by_org(context.org_id)
        tenants = self.tenant_repo.get_active(context.org_id)

        total_units = sum(b.total_units for b in buildings)
        occupied_units = sum(b.occupied_units for b in buildings)
        total_rent = calculations.round_money(
            sum(calculations.to_float(b.total_rent) for b in buildings)
        )
        collected_rent = calculations.round_money(
            sum(calculations.to_float(b.collected_rent) for b in buildings)
        )

        return {
            "total_buildings": len(buildings),
            "total_units": total_units,
            "occupied_units": occupied_units,
            "vacant_units": total_units - occupied_units,
            "occupancy_rate": calculations.round_money(
                calculations.percentage(occupied_units, total_units)
            ),
            "total_rent": total_rent,
            "collected_rent": collected_rent,
            "collection_rate": calculations.round_money(
                calculations.percentage(collected_rent, total_rent)
            ),
            "active_tenants": len(tenants),
            "overdue_tenants": sum(
                1 for t in tenants if t.payment_status == PaymentStatus.OVERDUE
            ),
        }
