import logging
from sqlalchemy.orm import Session

from nexus.core import calculations
from nexus.core.exceptions import NotFoundException, ValidationException
from nexus.models.base import utcnow
from nexus.models.credit_account import CreditAccount
from nexus.models.credit_transaction import CreditTransaction
from nexus.models.customer import Customer
from nexus.models.enums import CreditTransactionType
from nexus.models.org_context import OrgContext
from nexus.repositories.credit_repository import CreditRepository
from nexus.schemas.credit_schemas import (
    CreditAccountSettings,
    CreditAccountUpdate,
    CreditTransactionCreate,
)
from nexus.services.permissions import require_write

logger = logging.getLogger(__name__)

ACCOUNT_FILTERS = ("all", "active", "overdue", "suspended")


def summarize_account(account: CreditAccount) -> dict:
    """Account fields plus the owning customer's number and name."""
    return {
        "id": account.id,
        "customer_id": account.customer_id,
        "is_active": account.is_active,
        "credit_limit": calculations.to_float(account.credit_limit),
        "current_balance": calculations.to_float(account.current_balance),
        "available_credit": account.available_credit,
        "payment_terms": account.payment_terms,
        "last_payment_date": account.last_payment_date,
        "last_payment_amount": account.last_payment_amount,
        "overdue_amount": calculations.to_float(account.overdue_amount),
        "credit_score": account.credit_score,
        "credit_status": account.credit_status,
        "created_at": account.created_at,
        "updated_at": account.updated_at,
        "customer_number": account.customer.customer_number,
        "customer_name": account.customer.full_name,
    }


def _matches_filter(account: CreditAccount, account_filter: str) -> bool:
    if account_filter == "active":
        return account.is_active
    if account_filter == "suspended":
        return not account.is_active
    if account_filter == "overdue":
        return calculations.to_float(account.overdue_amount) > 0
    return True


class CreditService:
    """
    Service layer for customer credit accounts.

    current_balance only changes through transactions, each of which records
    the balance it left behind.
    """

    def __init__(self, db: Session):
        self.db = db
        self.credit_repo = CreditRepository(db)

    def _get_account(self, customer_id: int, context: OrgContext) -> CreditAccount:
        account = self.credit_repo.get_account_by_customer(customer_id, context.org_id)
        if not account:
            raise NotFoundException(f"Customer {customer_id} has no credit account")
        return account

    def open_account_no_commit(
        self, customer: Customer, account_settings: CreditAccountSettings
    ) -> CreditAccount:
        """Open a credit account with a zero balance for a flushed customer; caller commits."""
        account = CreditAccount(
            customer_id=customer.id,
            is_active=account_settings.is_active,
            credit_limit=account_settings.credit_limit,
            current_balance=0,
            payment_terms=account_settings.payment_terms,
            overdue_amount=0,
            credit_score=account_settings.credit_score,
        )
        customer.credit_account = account
        return self.credit_repo.create_account_no_commit(account)

    def apply_settings(self, account: CreditAccount, changes: dict) -> None:
        """
        Apply setting changes to an account in memory.

        Raises:
            ValidationException: If the new limit is below the current balance
        """
        new_limit = changes.get("credit_limit")
        if new_limit is not None and new_limit < calculations.to_float(account.current_balance):
            raise ValidationException(
                f"Credit limit {new_limit:.2f} is below the current balance "
                f"{calculations.to_float(account.current_balance):.2f}"
            )
        for field, value in changes.items():
            setattr(account, field, value)

    def get_accounts(self, context: OrgContext, account_filter: str = "all") -> list[dict]:
        if account_filter not in ACCOUNT_FILTERS:
            raise ValidationException(f"Unknown credit account filter '{account_filter}'")
        return [
            summarize_account(account)
            for account in self.credit_repo.get_accounts(context.org_id)
            if _matches_filter(account, account_filter)
        ]

    def get_account(self, customer_id: int, context: OrgContext) -> CreditAccount:
        return self._get_account(customer_id, context)

    def update_account(
        self, customer_id: int, account_data: CreditAccountUpdate, context: OrgContext
    ) -> CreditAccount:
        """Change limit, terms, score, active flag or overdue amount."""
        require_write(context)
        account = self._get_account(customer_id, context)
        self.apply_settings(account, account_data.model_dump(exclude_none=True))
        return self.credit_repo.update_account(account)

    def get_transactions(self, customer_id: int, context: OrgContext) -> list[CreditTransaction]:
        account = self._get_account(customer_id, context)
        return self.credit_repo.get_transactions(account.id)

    def add_transaction(
        self, customer_id: int, transaction_data: CreditTransactionCreate, context: OrgContext
    ) -> CreditTransaction:
        """
        Post a purchase, payment or adjustment to a customer's credit account.

        - purchase: positive amount, must fit in available credit on an active account
        - payment: positive amount, at most the balance; pays down overdue first
        - adjustment: signed non-zero amount; balance must stay >= 0

        Raises:
            ValidationException: If the transaction breaks any of the rules above
        """
        require_write(context)
        account = self._get_account(customer_id, context)

        amount = calculations.round_money(transaction_data.amount)
        balance = calculations.to_float(account.current_balance)
        kind = transaction_data.type

        if kind == CreditTransactionType.PURCHASE:
            if amount <= 0:
                raise ValidationException("Purchase amount must be positive")
            if not account.is_active:
                raise ValidationException("Credit account is not active")
            if amount > account.available_credit:
                logger.warning(
                    "Rejected credit purchase of %.2f for customer %s (available %.2f)",
                    amount,
                    customer_id,
                    account.available_credit,
                )
                raise ValidationException(
                    f"Purchase of {amount:.2f} exceeds available credit "
                    f"{account.available_credit:.2f}"
                )
            new_balance = balance + amount

        elif kind == CreditTransactionType.PAYMENT:
            if amount <= 0:
                raise ValidationException("Payment amount must be positive")
            if amount > balance:
                raise ValidationException(
                    f"Payment of {amount:.2f} exceeds the outstanding balance {balance:.2f}"
                )
            new_balance = balance - amount
            overdue = calculations.to_float(account.overdue_amount)
            account.overdue_amount = calculations.round_money(overdue - min(overdue, amount))
            account.last_payment_date = utcnow()
            account.last_payment_amount = amount

        else:
            if amount == 0:
                raise ValidationException("Adjustment amount cannot be zero")
            new_balance = balance + amount
            if new_balance < 0:
                raise ValidationException("Adjustment would make the balance negative")

        account.current_balance = calculations.round_money(new_balance)

        transaction = CreditTransaction(
            customer_id=account.customer_id,
            credit_account_id=account.id,
            type=kind,
            amount=amount,
            description=transaction_data.description,
            reference=transaction_data.reference,
            balance_after=account.current_balance,
            created_by=context.user.auth_user_id,
        )
        transaction = self.credit_repo.add_transaction(account, transaction)
        logger.info(
            "Credit %s of %.2f for customer %s, balance now %.2f",
            kind.value,
            amount,
            customer_id,
            calculations.to_float(account.current_balance),
        )
        return transaction

    def get_stats(self, context: OrgContext) -> dict:
        accounts = self.credit_repo.get_accounts(context.org_id)

        total_limit = calculations.round_money(
            sum(calculations.to_float(a.credit_limit) for a in accounts)
        )
        outstanding = calculations.round_money(
            sum(calculations.to_float(a.current_balance) for a in accounts)
        )
        return {
            "total_credit_limit": total_limit,
            "total_outstanding": outstanding,
            "total_overdue": calculations.round_money(
                sum(calculations.to_float(a.overdue_amount) for a in accounts)
            ),
            "total_accounts": len(accounts),
            "active_accounts": sum(1 for a in accounts if a.is_active),
            "accounts_with_overdue": sum(
                1 for a in accounts if calculations.to_float(a.overdue_amount) > 0
            ),
            "utilization_rate": calculations.round_money(
                calculations.percentage(outstanding, total_limit)
            ),
        }
