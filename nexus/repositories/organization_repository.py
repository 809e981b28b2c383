"""Repository for Organization model operations."""

from sqlalchemy.orm import Session
from nexus.models.organization import Organization


class OrganizationRepository:
    """Repository for Organization model operations"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, org_id: int) -> Organization | None:
        return self.db.query(Organization).filter(Organization.id == org_id).first()

    def create_no_commit(self, organization: Organization) -> Organization:
        """Add organization and flush to assign its ID (caller commits)."""
        self.db.add(organization)
        self.db.flush()
        return organization

    def update(self, organization: Organization) -> Organization:
        self.db.commit()
        self.db.refresh(organization)
        return organization
