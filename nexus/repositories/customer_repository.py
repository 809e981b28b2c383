from datetime import date, datetime, time, timedelta
from typing import Optional
from sqlalchemy import and_, or_
from sqlalchemy.orm import Session

from nexus.models.credit_account import CreditAccount
from nexus.models.customer import Customer
from nexus.models.enums import CreditStatus, CustomerStatus, CustomerType, LoyaltyTier
from nexus.models.loyalty_account import LoyaltyAccount
from nexus.repositories.search import LIKE_ESCAPE, contains_pattern

CUSTOMER_NUMBER_PREFIX = "CUST-"


class CustomerRepository:
    """Repository for Customer data access with organization isolation"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id_and_org(self, customer_id: int, org_id: int) -> Optional[Customer]:
        return (
            self.db.query(Customer)
            .filter(Customer.id == customer_id, Customer.org_id == org_id)
            .first()
        )

    def get_by_org(self, org_id: int) -> list[Customer]:
        return self.db.query(Customer).filter(Customer.org_id == org_id).all()

    def get_with_filters(
        self,
        org_id: int,
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
        """
        Customers matching every given filter, newest first.

        Args:
            org_id: Organization ID for isolation
            search: Case-insensitive match on first/last name, email or phone
            status: active / inactive / suspended
            customer_type: regular / vip / wholesale
            credit_status: good / overdue / at_limit (customers without a
                credit account never match)
            loyalty_tier: bronze / silver / gold / platinum
            created_from: Created on or after this date
            created_to: Created on or before this date (whole day included)
            limit: Maximum number of results (None = all)
            offset: Pagination offset

        Returns:
            Tuple of (customers list, total count)
        """
        query = self.db.query(Customer).filter(Customer.org_id == org_id)

        if search:
            pattern = contains_pattern(search)
            query = query.filter(
                or_(
                    Customer.first_name.ilike(pattern, escape=LIKE_ESCAPE),
                    Customer.last_name.ilike(pattern, escape=LIKE_ESCAPE),
                    Customer.email.ilike(pattern, escape=LIKE_ESCAPE),
                    Customer.phone.ilike(pattern, escape=LIKE_ESCAPE),
                )
            )

        if status is not None:
            query = query.filter(Customer.status == status)

        if customer_type is not None:
            query = query.filter(Customer.customer_type == customer_type)

        if credit_status is not None:
            query = query.join(CreditAccount, CreditAccount.customer_id == Customer.id)
            overdue = CreditAccount.overdue_amount > 0
            at_limit = and_(
                CreditAccount.credit_limit > 0,
                CreditAccount.current_balance >= CreditAccount.credit_limit,
            )
            if credit_status == CreditStatus.OVERDUE:
                query = query.filter(overdue)
            elif credit_status == CreditStatus.AT_LIMIT:
                query = query.filter(~overdue, at_limit)
            else:
                query = query.filter(~overdue, ~at_limit)

        if loyalty_tier is not None:
            query = query.join(LoyaltyAccount, LoyaltyAccount.customer_id == Customer.id).filter(
                LoyaltyAccount.tier == loyalty_tier
            )

        if created_from is not None:
            query = query.filter(Customer.created_at >= datetime.combine(created_from, time.min))

        if created_to is not None:
            next_day = datetime.combine(created_to + timedelta(days=1), time.min)
            query = query.filter(Customer.created_at < next_day)

        total = query.count()

        query = query.order_by(Customer.created_at.desc(), Customer.id.desc()).offset(offset)
        if limit is not None:
            query = query.limit(limit)

        return query.all(), total

    def next_customer_number(self, org_id: int) -> str:
        """Next CUST-NNNNNN number in the organization's sequence."""
        last = (
            self.db.query(Customer.customer_number)
            .filter(Customer.org_id == org_id)
            .order_by(Customer.id.desc())
            .first()
        )
        sequence = 1
        if last is not None:
            sequence = int(last[0].removeprefix(CUSTOMER_NUMBER_PREFIX)) + 1
        return f"{CUSTOMER_NUMBER_PREFIX}{sequence:06d}"

    def create_no_commit(self, customer: Customer) -> Customer:
        """Create customer without committing (accounts are opened in the same commit)"""
        self.db.add(customer)
        self.db.flush()
        return customer

    def commit(self, customer: Customer) -> Customer:
        self.db.commit()
        self.db.refresh(customer)
        return customer

    def delete(self, customer: Customer) -> None:
        """Delete customer (cascades to credit and loyalty accounts)"""
        self.db.delete(customer)
        self.db.commit()
