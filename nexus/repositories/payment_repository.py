from datetime import date
from typing import Optional
from sqlalchemy.orm import Session

from nexus.models.enums import PaymentMethod
from nexus.models.payment import Payment


class PaymentRepository:
    """Repository for rent Payment data access"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id_and_org(self, payment_id: int, org_id: int) -> Optional[Payment]:
        return (
            self.db.query(Payment)
            .filter(Payment.id == payment_id, Payment.org_id == org_id)
            .first()
        )

    def get_with_filters(
        self,
        org_id: int,
        tenant_id: Optional[int] = None,
        building_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        payment_method: Optional[PaymentMethod] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> tuple[list[Payment], int]:
        """
        Payments newest first, with optional filters.

        Returns:
            Tuple of (payments list, total count)
        """
        query = self.db.query(Payment).filter(Payment.org_id == org_id)

        if tenant_id is not None:
            query = query.filter(Payment.tenant_id == tenant_id)

        if building_id is not None:
            query = query.filter(Payment.building_id == building_id)

        if start_date is not None:
            query = query.filter(Payment.payment_date >= start_date)

        if end_date is not None:
            query = query.filter(Payment.payment_date <= end_date)

        if payment_method is not None:
            query = query.filter(Payment.payment_method == payment_method)

        total = query.count()

        query = query.order_by(Payment.payment_date.desc(), Payment.id.desc()).offset(offset)
        if limit is not None:
            query = query.limit(limit)

        return query.all(), total

    def create_no_commit(self, payment: Payment) -> Payment:
        self.db.add(payment)
        self.db.flush()
        return payment

    def create_bulk(self, payments: list[Payment]) -> list[Payment]:
        """
        Add several payments without committing.
        Caller responsible for commit. Enables atomic batch operations.
        """
        self.db.add_all(payments)
        self.db.flush()
        return payments

    def delete_no_commit(self, payment: Payment) -> None:
        self.db.delete(payment)
        self.db.flush()
