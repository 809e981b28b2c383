import logging
import math
from datetime import date
from typing import Optional
from sqlalchemy.orm import Session

from nexus.config import settings
from nexus.core import calculations, csv_export
from nexus.core.exceptions import NotFoundException
from nexus.models.base import utcnow
from nexus.models.customer import Customer
from nexus.models.enums import (
    CreditStatus,
    CustomerStatus,
    CustomerType,
    LoyaltyTier,
    LoyaltyTransactionType,
)
from nexus.models.org_context import OrgContext
from nexus.repositories.customer_repository import CustomerRepository
from nexus.schemas.customer_schemas import CustomerCreate, CustomerUpdate, SaleRecord
from nexus.services.credit_service import CreditService
from nexus.services.loyalty_service import LoyaltyService
from nexus.services.permissions import require_write

logger = logging.getLogger(__name__)

TOP_CUSTOMERS = 5
ACCOUNT_FIELDS = ("credit", "loyalty")

CUSTOMER_COLUMNS = [
    "Customer Number",
    "First Name",
    "Last Name",
    "Email",
    "Phone",
    "City",
    "Status",
    "Type",
    "Total Purchases",
    csv_export.money_header("Total Spent"),
    csv_export.money_header("Credit Limit"),
    csv_export.money_header("Credit Balance"),
    "Loyalty Tier",
    "Loyalty Points",
    "Created Date",
]


class CustomerService:
    """Service layer for customers and the accounts opened alongside them"""

    def __init__(self, db: Session):
        self.db = db
        self.customer_repo = CustomerRepository(db)
        self.credit_service = CreditService(db)
        self.loyalty_service = LoyaltyService(db)

    def _get_owned(self, customer_id: int, context: OrgContext) -> Customer:
        customer = self.customer_repo.get_by_id_and_org(customer_id, context.org_id)
        if not customer:
            raise NotFoundException(f"Customer {customer_id} not found")
        return customer

    def create_customer(self, customer_data: CustomerCreate, context: OrgContext) -> Customer:
        """
        Create a customer with the next CUST- number of the organization.

        Credit and loyalty accounts requested in the payload are opened in
        the same commit.

        Raises:
            ConflictException: If a requested loyalty card number is taken
        """
        require_write(context)

        fields = customer_data.model_dump(exclude=set(ACCOUNT_FIELDS))
        if not fields.get("address_country"):
            fields["address_country"] = settings.DEFAULT_COUNTRY
        if fields.get("tags") is None:
            fields["tags"] = []

        customer = Customer(
            org_id=context.org_id,
            customer_number=self.customer_repo.next_customer_number(context.org_id),
            total_purchases=0,
            total_spent=0,
            **fields,
        )

        try:
            customer = self.customer_repo.create_no_commit(customer)
            if customer_data.credit is not None:
                self.credit_service.open_account_no_commit(customer, customer_data.credit)
            if customer_data.loyalty is not None:
                self.loyalty_service.open_account_no_commit(customer, customer_data.loyalty)
        except Exception:
            self.db.rollback()
            raise

        customer = self.customer_repo.commit(customer)
        logger.info(
            "Created customer %s (%s) in org %s",
            customer.id,
            customer.customer_number,
            context.org_id,
        )
        return customer

    def get_customer(self, customer_id: int, context: OrgContext) -> Customer:
        return self._get_owned(customer_id, context)

    def get_customers(
        self,
        context: OrgContext,
        search: Optional[str] = None,
        status: Optional[CustomerStatus] = None,
        customer_type: Optional[CustomerType] = None,
        credit_status: Optional[CreditStatus] = None,
        loyalty_tier: Optional[LoyaltyTier] = None,
        created_from: Optional[date] = None,
        created_to: Optional[date] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> tuple[list[Customer], int]:
        """Customers matching every given filter, newest first."""
        return self.customer_repo.get_with_filters(
            org_id=context.org_id,
            search=search,
            status=status,
            customer_type=customer_type,
            credit_status=credit_status,
            loyalty_tier=loyalty_tier,
            created_from=created_from,
            created_to=created_to,
            limit=limit,
            offset=offset,
        )

    def update_customer(
        self, customer_id: int, customer_data: CustomerUpdate, context: OrgContext
    ) -> Customer:
        """
        Update customer details.

        `credit` updates the terms of an existing credit account or opens one;
        `loyalty` reissues the card number or enrolls the customer.

        Raises:
            ValidationException: If a new credit limit is below the balance
            ConflictException: If a loyalty card number is taken
        """
        require_write(context)
        customer = self._get_owned(customer_id, context)

        try:
            for field, value in customer_data.model_dump(
                exclude=set(ACCOUNT_FIELDS), exclude_none=True
            ).items():
                setattr(customer, field, value)

            if customer_data.credit is not None:
                if customer.credit_account is None:
                    self.credit_service.open_account_no_commit(customer, customer_data.credit)
                else:
                    self.credit_service.apply_settings(
                        customer.credit_account,
                        customer_data.credit.model_dump(exclude_unset=True),
                    )

            if customer_data.loyalty is not None:
                account = customer.loyalty_account
                if account is None:
                    self.loyalty_service.open_account_no_commit(customer, customer_data.loyalty)
                elif customer_data.loyalty.card_number:
                    self.loyalty_service.ensure_card_free(
                        customer_data.loyalty.card_number, customer.org_id, account_id=account.id
                    )
                    account.card_number = customer_data.loyalty.card_number
        except Exception:
            self.db.rollback()
            raise

        return self.customer_repo.commit(customer)

    def delete_customer(self, customer_id: int, context: OrgContext) -> None:
        """Delete a customer together with its credit and loyalty history."""
        require_write(context)
        customer = self._get_owned(customer_id, context)
        self.customer_repo.delete(customer)
        logger.info("Deleted customer %s from org %s", customer_id, context.org_id)

    def record_sale(self, customer_id: int, sale: SaleRecord, context: OrgContext) -> Customer:
        """
        Record a purchase against a customer.

        Increments total_purchases, adds the amount to total_spent and, when
        requested and the customer is enrolled, earns 1 loyalty point per
        whole currency unit.
        """
        require_write(context)
        customer = self._get_owned(customer_id, context)

        try:
            customer.total_purchases += 1
            customer.total_spent = calculations.round_money(
                calculations.to_float(customer.total_spent) + sale.amount
            )
            customer.last_purchase_date = utcnow()

            points = math.floor(sale.amount)
            if sale.award_points and customer.loyalty_account is not None and points > 0:
                self.loyalty_service.apply_points_no_commit(
                    customer.loyalty_account,
                    LoyaltyTransactionType.EARNED,
                    points,
                    description=f"Purchase of {sale.amount:.2f}",
                    order_id=sale.order_id,
                )
        except Exception:
            self.db.rollback()
            raise

        customer = self.customer_repo.commit(customer)
        logger.info("Recorded sale of %.2f for customer %s", sale.amount, customer.id)
        return customer

    def get_stats(self, context: OrgContext) -> dict:
        """Headline customer, credit and loyalty figures for the organization."""
        customers = self.customer_repo.get_by_org(context.org_id)
        credit_accounts = [c.credit_account for c in customers if c.credit_account is not None]
        outstanding = calculations.round_money(
            sum(calculations.to_float(a.current_balance) for a in credit_accounts)
        )
        month_start = utcnow().replace(day=1, hour=0, minute=0, second=0, microsecond=0)

        top = sorted(
            customers, key=lambda c: calculations.to_float(c.total_spent), reverse=True
        )[:TOP_CUSTOMERS]

        return {
            "total_customers": len(customers),
            "active_customers": sum(1 for c in customers if c.status == CustomerStatus.ACTIVE),
            "credit_accounts": len(credit_accounts),
            "active_credit_accounts": sum(1 for a in credit_accounts if a.is_active),
            "loyalty_accounts": sum(1 for c in customers if c.loyalty_account is not None),
            "total_credit_outstanding": outstanding,
            "average_credit_balance": calculations.round_money(
                outstanding / len(credit_accounts) if credit_accounts else 0
            ),
            "customers_with_overdue": sum(
                1 for a in credit_accounts if calculations.to_float(a.overdue_amount) > 0
            ),
            "new_this_month": sum(1 for c in customers if c.created_at >= month_start),
            "top_customers": [
                {
                    "id": c.id,
                    "customer_number": c.customer_number,
                    "name": c.full_name,
                    "total_spent": calculations.to_float(c.total_spent),
                    "total_purchases": c.total_purchases,
                }
                for c in top
            ],
        }

    def export_customers_csv(self, context: OrgContext, **filters) -> str:
        """Filtered customers as CSV with a TOTALS row for the numeric columns."""
        customers, _ = self.get_customers(context, **filters)

        rows = []
        total_purchases = 0
        total_spent = total_limit = total_balance = 0.0
        total_points = 0
        for customer in customers:
            credit = customer.credit_account
            loyalty = customer.loyalty_account
            spent = calculations.round_money(customer.total_spent)
            limit = calculations.round_money(credit.credit_limit) if credit else 0.0
            balance = calculations.round_money(credit.current_balance) if credit else 0.0
            points = loyalty.current_points if loyalty else 0

            total_purchases += customer.total_purchases
            total_spent += spent
            total_limit += limit
            total_balance += balance
            total_points += points

            rows.append(
                [
                    customer.customer_number,
                    customer.first_name,
                    customer.last_name,
                    customer.email,
                    customer.phone,
                    customer.address_city,
                    csv_export.humanize(customer.status),
                    csv_export.humanize(customer.customer_type),
                    customer.total_purchases,
                    csv_export.format_money(spent),
                    csv_export.format_money(limit) if credit else "",
                    csv_export.format_money(balance) if credit else "",
                    csv_export.humanize(loyalty.tier) if loyalty else "",
                    points if loyalty else "",
                    csv_export.format_date(customer.created_at),
                ]
            )

        rows.append(
            [
                csv_export.TOTALS_LABEL,
                "",
                "",
                "",
                "",
                "",
                "",
                "",
                total_purchases,
                csv_export.format_money(total_spent),
                csv_export.format_money(total_limit),
                csv_export.format_money(total_balance),
                "",
                total_points,
                "",
            ]
        )
        logger.debug("Exported %s customers to CSV for org %s", len(customers), context.org_id)
        return csv_export.render_csv(CUSTOMER_COLUMNS, rows)
