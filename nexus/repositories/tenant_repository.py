"""Repository for rental Tenant model operations."""

from typing import Optional
from sqlalchemy import or_
from sqlalchemy.orm import Session

from nexus.models.enums import PaymentStatus, TenantStatus
from nexus.models.tenant import Tenant
from nexus.repositories.search import LIKE_ESCAPE, contains_pattern


class TenantRepository:
    """Repository for Tenant model operations"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id_and_org(self, tenant_id: int, org_id: int) -> Optional[Tenant]:
        """
        Get tenant by ID within an organization.

        Soft-deleted tenants are still returned; callers decide whether a
        deleted tenant is acceptable.
        """
        return (
            self.db.query(Tenant)
            .filter(Tenant.id == tenant_id, Tenant.org_id == org_id)
            .first()
        )

    def get_active(
        self,
        org_id: int,
        building_id: Optional[int] = None,
        payment_status: Optional[PaymentStatus] = None,
        search: Optional[str] = None,
    ) -> list[Tenant]:
        """
        Active tenants ordered by first name.

        Args:
            org_id: Organization ID for isolation
            building_id: Only tenants of this building
            payment_status: pending / paid / overdue
            search: Case-insensitive match on first name, last name or email
        """
        query = self.db.query(Tenant).filter(
            Tenant.org_id == org_id, Tenant.status == TenantStatus.ACTIVE
        )

        if building_id is not None:
            query = query.filter(Tenant.building_id == building_id)

        if payment_status is not None:
            query = query.filter(Tenant.payment_status == payment_status)

        if search:
            pattern = contains_pattern(search)
            query = query.filter(
                or_(
                    Tenant.first_name.ilike(pattern, escape=LIKE_ESCAPE),
                    Tenant.last_name.ilike(pattern, escape=LIKE_ESCAPE),
                    Tenant.email.ilike(pattern, escape=LIKE_ESCAPE),
                )
            )

        return query.order_by(Tenant.first_name, Tenant.id).all()

    def count_active_in_building(self, building_id: int) -> int:
        return (
            self.db.query(Tenant)
            .filter(Tenant.building_id == building_id, Tenant.status == TenantStatus.ACTIVE)
            .count()
        )

    def create_no_commit(self, tenant: Tenant) -> Tenant:
        """Create tenant without committing (building totals change in the same commit)"""
        self.db.add(tenant)
        self.db.flush()
        return tenant

    def commit(self, tenant: Tenant) -> Tenant:
        self.db.commit()
        self.db.refresh(tenant)
        return tenant
