"""Repository for OrganizationMembership model operations."""

from sqlalchemy.orm import Session
from nexus.models.organization_membership import OrganizationMembership


class OrganizationMembershipRepository:
    """Repository for OrganizationMembership model operations"""

    def __init__(self, db: Session):
        self.db = db

    def get_membership(self, user_id: int, org_id: int) -> OrganizationMembership | None:
        """
        Get membership for a specific user in a specific organization.

        Returns:
            OrganizationMembership or None if the user is not a member
        """
        return (
            self.db.query(OrganizationMembership)
            .filter(
                OrganizationMembership.user_id == user_id,
                OrganizationMembership.org_id == org_id,
            )
            .first()
        )

    def get_org_members(self, org_id: int) -> list[OrganizationMembership]:
        return (
            self.db.query(OrganizationMembership)
            .filter(OrganizationMembership.org_id == org_id)
            .order_by(OrganizationMembership.id)
            .all()
        )

    def get_user_memberships(self, user_id: int) -> list[OrganizationMembership]:
        """All memberships of a user, oldest first."""
        return (
            self.db.query(OrganizationMembership)
            .filter(OrganizationMembership.user_id == user_id)
            .order_by(OrganizationMembership.id)
            .all()
        )

    def create(self, membership: OrganizationMembership) -> OrganizationMembership:
        self.db.add(membership)
        self.db.commit()
        self.db.refresh(membership)
        return membership

    def update(self, membership: OrganizationMembership) -> OrganizationMembership:
        self.db.commit()
        self.db.refresh(membership)
        return membership

    def delete(self, membership: OrganizationMembership) -> None:
        self.db.delete(membership)
        self.db.commit()
