from typing import Optional
from sqlalchemy.orm import Session

from nexus.models.customer import Customer
from nexus.models.enums import LoyaltyTier
from nexus.models.loyalty_account import LoyaltyAccount
from nexus.models.loyalty_transaction import LoyaltyTransaction


class LoyaltyRepository:
    """Repository for loyalty accounts and their transactions"""

    def __init__(self, db: Session):
        self.db = db

    def get_account_by_customer(self, customer_id: int, org_id: int) -> Optional[LoyaltyAccount]:
        return (
            self.db.query(LoyaltyAccount)
            .join(Customer, Customer.id == LoyaltyAccount.customer_id)
            .filter(LoyaltyAccount.customer_id == customer_id, Customer.org_id == org_id)
            .first()
        )

    def get_by_card_number(self, card_number: str, org_id: int) -> Optional[LoyaltyAccount]:
        return (
            self.db.query(LoyaltyAccount)
            .filter(LoyaltyAccount.card_number == card_number, LoyaltyAccount.org_id == org_id)
            .first()
        )

    def get_accounts(self, org_id: int, tier: Optional[LoyaltyTier] = None) -> list[LoyaltyAccount]:
        query = (
            self.db.query(LoyaltyAccount)
            .join(Customer, Customer.id == LoyaltyAccount.customer_id)
            .filter(Customer.org_id == org_id)
        )
        if tier is not None:
            query = query.filter(LoyaltyAccount.tier == tier)
        return query.order_by(LoyaltyAccount.current_points.desc(), LoyaltyAccount.id).all()

    def get_transactions(self, loyalty_account_id: int) -> list[LoyaltyTransaction]:
        """Transactions newest first."""
        return (
            self.db.query(LoyaltyTransaction)
            .filter(LoyaltyTransaction.loyalty_account_id == loyalty_account_id)
            .order_by(LoyaltyTransaction.created_at.desc(), LoyaltyTransaction.id.desc())
            .all()
        )

    def create_account_no_commit(self, account: LoyaltyAccount) -> LoyaltyAccount:
        self.db.add(account)
        self.db.flush()
        return account

    def add_transaction_no_commit(self, transaction: LoyaltyTransaction) -> LoyaltyTransaction:
        self.db.add(transaction)
        self.db.flush()
        return transaction

    def commit(self, account: LoyaltyAccount) -> LoyaltyAccount:
        self.db.commit()
        self.db.refresh(account)
        return account
