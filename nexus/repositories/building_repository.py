from typing import Optional
from sqlalchemy import or_
from sqlalchemy.orm import Session

from nexus.models.building import Building
from nexus.repositories.search import LIKE_ESCAPE, contains_pattern


class BuildingRepository:
    """Repository for Building data access"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id_and_org(self, building_id: int, org_id: int) -> Optional[Building]:
        return (
            self.db.query(Building)
            .filter(Building.id == building_id, Building.org_id == org_id)
            .first()
        )

    def get_by_org(self, org_id: int, search: Optional[str] = None) -> list[Building]:
        """All buildings of an organization, optionally matching name/address."""
        query = self.db.query(Building).filter(Building.org_id == org_id)
        if search:
            pattern = contains_pattern(search)
            query = query.filter(
                or_(
                    Building.name.ilike(pattern, escape=LIKE_ESCAPE),
                    Building.address.ilike(pattern, escape=LIKE_ESCAPE),
                )
            )
        return query.order_by(Building.name, Building.id).all()

    def create(self, building: Building) -> Building:
        self.db.add(building)
        self.db.commit()
        self.db.refresh(building)
        return building

    def update(self, building: Building) -> Building:
        self.db.commit()
        self.db.refresh(building)
        return building

    def delete(self, building: Building) -> None:
        self.db.delete(building)
        self.db.commit()
