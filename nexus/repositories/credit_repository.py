from typing import Optional
from sqlalchemy.orm import Session

from nexus.models.credit_account import CreditAccount
from nexus.models.credit_transaction import CreditTransaction
from nexus.models.customer import Customer


class CreditRepository:
    """Repository for credit accounts and their transactions"""

    def __init__(self, db: Session):
        self.db = db

    def get_account_by_customer(self, customer_id: int, org_id: int) -> Optional[CreditAccount]:
        """Credit account of a customer, joined through Customer for org isolation."""
        return (
            self.db.query(CreditAccount)
            .join(Customer, Customer.id == CreditAccount.customer_id)
            .filter(CreditAccount.customer_id == customer_id, Customer.org_id == org_id)
            .first()
        )

    def get_accounts(self, org_id: int) -> list[CreditAccount]:
        return (
            self.db.query(CreditAccount)
            .join(Customer, Customer.id == CreditAccount.customer_id)
            .filter(Customer.org_id == org_id)
            .order_by(CreditAccount.id)
            .all()
        )

    def get_transactions(self, credit_account_id: int) -> list[CreditTransaction]:
        """Transactions newest first."""
        return (
            self.db.query(CreditTransaction)
            .filter(CreditTransaction.credit_account_id == credit_account_id)
            .order_by(CreditTransaction.created_at.desc(), CreditTransaction.id.desc())
            .all()
        )

    def create_account_no_commit(self, account: CreditAccount) -> CreditAccount:
        self.db.add(account)
        self.db.flush()
        return account

    def add_transaction(
        self, account: CreditAccount, transaction: CreditTransaction
    ) -> CreditTransaction:
        """Persist a transaction together with the account balance it changed."""
        self.db.add(transaction)
        self.db.commit()
        self.db.refresh(transaction)
        self.db.refresh(account)
        return transaction

    def update_account(self, account: CreditAccount) -> CreditAccount:
        self.db.commit()
        self.db.refresh(account)
        return account
