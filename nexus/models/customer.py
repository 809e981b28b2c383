from datetime import datetime
from sqlalchemy import String, Integer, Numeric, ForeignKey, DateTime, Text, JSON, Enum, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import TYPE_CHECKING, Optional

from nexus.models.base import Base, TimestampMixin, enum_values
from nexus.models.enums import CustomerStatus, CustomerType

if TYPE_CHECKING:
    from nexus.models.credit_account import CreditAccount
    from nexus.models.loyalty_account import LoyaltyAccount


class Customer(Base, TimestampMixin):
    """
    Retail customer, optionally with a credit account and a loyalty account.

    customer_number is issued sequentially per organization (CUST-000001).
    """

    __tablename__ = "customers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    org_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    customer_number: Mapped[str] = mapped_column(String(20), nullable=False)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)

    address_street: Mapped[str | None] = mapped_column(String(255), nullable=True)
    address_city: Mapped[str | None] = mapped_column(String(100), nullable=True)
    address_state: Mapped[str | None] = mapped_column(String(100), nullable=True)
    address_zip_code: Mapped[str | None] = mapped_column(String(20), nullable=True)
    address_country: Mapped[str | None] = mapped_column(String(100), nullable=True)

    status: Mapped[CustomerStatus] = mapped_column(
        Enum(CustomerStatus, native_enum=False, values_callable=enum_values),
        nullable=False,
        default=CustomerStatus.ACTIVE,
    )
    customer_type: Mapped[CustomerType] = mapped_column(
        Enum(CustomerType, native_enum=False, values_callable=enum_values),
        nullable=False,
        default=CustomerType.REGULAR,
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    tags: Mapped[list[str] | None] = mapped_column(JSON, nullable=True, default=list)

    total_purchases: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_spent: Mapped[float] = mapped_column(
        Numeric(precision=15, scale=2), nullable=False, default=0
    )
    last_purchase_date: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    credit_account: Mapped[Optional["CreditAccount"]] = relationship(
        "CreditAccount",
        back_populates="customer",
        uselist=False,
        cascade="all, delete-orphan",
    )
    loyalty_account: Mapped[Optional["LoyaltyAccount"]] = relationship(
        "LoyaltyAccount",
        back_populates="customer",
        uselist=False,
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        UniqueConstraint("org_id", "customer_number", name="uq_customers_org_number"),
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def __repr__(self) -> str:
        return f"<Customer(id={self.id}, number='{self.customer_number}')>"
