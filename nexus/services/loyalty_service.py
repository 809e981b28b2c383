import logging
from typing import Optional
from sqlalchemy.orm import Session

from nexus.core import calculations
from nexus.core.exceptions import ConflictException, NotFoundException, ValidationException
from nexus.models.base import utcnow
from nexus.models.customer import Customer
from nexus.models.enums import LoyaltyTier, LoyaltyTransactionType
from nexus.models.loyalty_account import LoyaltyAccount
from nexus.models.loyalty_transaction import LoyaltyTransaction
from nexus.models.org_context import OrgContext
from nexus.repositories.loyalty_repository import LoyaltyRepository
from nexus.schemas.loyalty_schemas import (
    LoyaltyAccountUpdate,
    LoyaltyEnrollment,
    LoyaltyTransactionCreate,
)
from nexus.services.permissions import require_write

logger = logging.getLogger(__name__)

EARNING_TYPES = (LoyaltyTransactionType.EARNED, LoyaltyTransactionType.BONUS)


def card_number_for(customer: Customer) -> str:
    return f"LOY-{customer.id:08d}"


def summarize_account(account: LoyaltyAccount) -> dict:
    """Account fields plus the owning customer's number and name."""
    return {
        "id": account.id,
        "customer_id": account.customer_id,
        "card_number": account.card_number,
        "current_points": account.current_points,
        "lifetime_points": account.lifetime_points,
        "tier": account.tier,
        "tier_points": account.tier_points,
        "next_tier_points": account.next_tier_points,
        "points_to_next_tier": account.points_to_next_tier,
        "tier_progress": account.tier_progress,
        "last_earned_date": account.last_earned_date,
        "last_redeemed_date": account.last_redeemed_date,
        "created_at": account.created_at,
        "updated_at": account.updated_at,
        "customer_number": account.customer.customer_number,
        "customer_name": account.customer.full_name,
    }


class LoyaltyService:
    """
    Service layer for loyalty points.

    Earned and bonus points raise both current and lifetime points and may
    promote the tier; redeemed and expired points only lower current points.
    """

    def __init__(self, db: Session):
        self.db = db
        self.loyalty_repo = LoyaltyRepository(db)

    def _get_account(self, customer_id: int, context: OrgContext) -> LoyaltyAccount:
        account = self.loyalty_repo.get_account_by_customer(customer_id, context.org_id)
        if not account:
            raise NotFoundException(f"Customer {customer_id} has no loyalty account")
        return account

    def ensure_card_free(
        self, card_number: str, org_id: int, account_id: Optional[int] = None
    ) -> None:
        existing = self.loyalty_repo.get_by_card_number(card_number, org_id)
        if existing and existing.id != account_id:
            raise ConflictException(f"Card number '{card_number}' is already issued")

    def open_account_no_commit(
        self, customer: Customer, enrollment: LoyaltyEnrollment
    ) -> LoyaltyAccount:
        """
        Enroll a flushed customer; caller commits.

        Raises:
            ConflictException: If the requested card number is taken
        """
        card_number = enrollment.card_number or card_number_for(customer)
        self.ensure_card_free(card_number, customer.org_id)

        account = LoyaltyAccount(
            org_id=customer.org_id,
            customer_id=customer.id,
            card_number=card_number,
            current_points=0,
            lifetime_points=0,
        )
        account.refresh_tier()
        customer.loyalty_account = account
        return self.loyalty_repo.create_account_no_commit(account)

    def apply_points_no_commit(
        self,
        account: LoyaltyAccount,
        transaction_type: LoyaltyTransactionType,
        points: int,
        description: Optional[str] = None,
        order_id: Optional[str] = None,
    ) -> LoyaltyTransaction:
        """
        Move points on an account and record the transaction; caller commits.

        Raises:
            ValidationException: If redeeming or expiring more than the current balance
        """
        if points <= 0:
            raise ValidationException("Points must be positive")

        now = utcnow()
        if transaction_type in EARNING_TYPES:
            account.current_points += points
            account.lifetime_points += points
            account.last_earned_date = now
            old_tier = account.tier
            account.refresh_tier()
            if account.tier != old_tier:
                logger.info(
                    "Loyalty account %s promoted from %s to %s",
                    account.id,
                    old_tier.value,
                    account.tier.value,
                )
        else:
            if points > account.current_points:
                logger.warning(
                    "Rejected %s of %s points on account %s (balance %s)",
                    transaction_type.value,
                    points,
                    account.id,
                    account.current_points,
                )
                raise ValidationException(
                    f"Insufficient points: balance is {account.current_points}, "
                    f"requested {points}"
                )
            account.current_points -= points
            if transaction_type == LoyaltyTransactionType.REDEEMED:
                account.last_redeemed_date = now

        transaction = LoyaltyTransaction(
            customer_id=account.customer_id,
            loyalty_account_id=account.id,
            type=transaction_type,
            points=points,
            description=description,
            order_id=order_id,
            balance_after=account.current_points,
        )
        return self.loyalty_repo.add_transaction_no_commit(transaction)

    def get_accounts(self, context: OrgContext, tier: Optional[LoyaltyTier] = None) -> list[dict]:
        """Loyalty accounts with customer details, highest balance first."""
        return [
            summarize_account(account)
            for account in self.loyalty_repo.get_accounts(context.org_id, tier=tier)
        ]

    def get_account(self, customer_id: int, context: OrgContext) -> LoyaltyAccount:
        return self._get_account(customer_id, context)

    def update_account(
        self, customer_id: int, account_data: LoyaltyAccountUpdate, context: OrgContext
    ) -> LoyaltyAccount:
        """Points only move through transactions; the card number can be reissued here."""
        require_write(context)
        account = self._get_account(customer_id, context)

        if account_data.card_number is not None:
            self.ensure_card_free(
                account_data.card_number, context.org_id, account_id=account.id
            )
            account.card_number = account_data.card_number

        return self.loyalty_repo.commit(account)

    def get_transactions(self, customer_id: int, context: OrgContext) -> list[LoyaltyTransaction]:
        account = self._get_account(customer_id, context)
        return self.loyalty_repo.get_transactions(account.id)

    def add_transaction(
        self, customer_id: int, transaction_data: LoyaltyTransactionCreate, context: OrgContext
    ) -> LoyaltyTransaction:
        require_write(context)
        account = self._get_account(customer_id, context)

        transaction = self.apply_points_no_commit(
            account,
            transaction_data.type,
            transaction_data.points,
            description=transaction_data.description,
            order_id=transaction_data.order_id,
        )
        self.db.commit()
        self.db.refresh(transaction)
        return transaction

    def get_stats(self, context: OrgContext) -> dict:
        accounts = self.loyalty_repo.get_accounts(context.org_id)
        total_current = sum(a.current_points for a in accounts)

        distribution = {tier.value: 0 for tier in LoyaltyTier}
        for account in accounts:
            distribution[account.tier.value] += 1

        return {
            "total_accounts": len(accounts),
            "total_current_points": total_current,
            "total_lifetime_points": sum(a.lifetime_points for a in accounts),
            "average_points": calculations.round_money(
                total_current / len(accounts) if accounts else 0
            ),
            "tier_distribution": distribution,
        }

    @staticmethod
    def get_tier_requirements() -> list[dict]:
        """Lifetime points needed for each tier and for the one after it."""
        requirements = []
        for tier in calculations.TIER_ORDER:
            following = calculations.next_tier(tier)
            requirements.append(
                {
                    "tier": tier,
                    "min_lifetime_points": calculations.TIER_THRESHOLDS[tier],
                    "next_tier": following if following != tier else None,
                    "next_tier_points": calculations.next_tier_points(tier),
                }
            )
        return requirements
