from typing import Optional
from sqlalchemy.orm import Session

from nexus.models.receipt import Receipt


class ReceiptRepository:
    """Repository for Receipt data access"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id_and_org(self, receipt_id: int, org_id: int) -> Optional[Receipt]:
        return (
            self.db.query(Receipt)
            .filter(Receipt.id == receipt_id, Receipt.org_id == org_id)
            .first()
        )

    def get_by_number(self, receipt_number: str, org_id: int) -> Optional[Receipt]:
        return (
            self.db.query(Receipt)
            .filter(Receipt.receipt_number == receipt_number, Receipt.org_id == org_id)
            .first()
        )

    def get_with_filters(
        self,
        org_id: int,
        tenant_id: Optional[int] = None,
        building_id: Optional[int] = None,
    ) -> list[Receipt]:
        """Receipts newest first."""
        query = self.db.query(Receipt).filter(Receipt.org_id == org_id)
        if tenant_id is not None:
            query = query.filter(Receipt.tenant_id == tenant_id)
        if building_id is not None:
            query = query.filter(Receipt.building_id == building_id)
        return query.order_by(Receipt.date.desc(), Receipt.id.desc()).all()

    def create(self, receipt: Receipt) -> Receipt:
        self.db.add(receipt)
        self.db.commit()
        self.db.refresh(receipt)
        return receipt

    def update(self, receipt: Receipt) -> Receipt:
        self.db.commit()
        self.db.refresh(receipt)
        return receipt

    def delete(self, receipt: Receipt) -> None:
        self.db.delete(receipt)
        self.db.commit()
