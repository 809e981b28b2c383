from datetime import datetime
from sqlalchemy import Integer, Numeric, ForeignKey, DateTime, Boolean, Enum
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import TYPE_CHECKING

from nexus.core import calculations
from nexus.models.base import Base, TimestampMixin, enum_values
from nexus.models.enums import CreditScore, CreditStatus

if TYPE_CHECKING:
    from nexus.models.customer import Customer
    from nexus.models.credit_transaction import CreditTransaction


class CreditAccount(Base, TimestampMixin):
    """
    Store credit extended to a customer.

    current_balance is what the customer owes. It only moves through credit
    transactions; available_credit is always derived from limit and balance.
    """

    __tablename__ = "credit_accounts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    customer_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("customers.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    credit_limit: Mapped[float] = mapped_column(
        Numeric(precision=15, scale=2), nullable=False, default=0
    )
    current_balance: Mapped[float] = mapped_column(
        Numeric(precision=15, scale=2), nullable=False, default=0
    )
    payment_terms: Mapped[int] = mapped_column(Integer, nullable=False, default=30)
    last_payment_date: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    last_payment_amount: Mapped[float | None] = mapped_column(
        Numeric(precision=15, scale=2), nullable=True
    )
    overdue_amount: Mapped[float] = mapped_column(
        Numeric(precision=15, scale=2), nullable=False, default=0
    )
    credit_score: Mapped[CreditScore] = mapped_column(
        Enum(CreditScore, native_enum=False, values_callable=enum_values),
        nullable=False,
        default=CreditScore.GOOD,
    )

    customer: Mapped["Customer"] = relationship("Customer", back_populates="credit_account")
    transactions: Mapped[list["CreditTransaction"]] = relationship(
        "CreditTransaction",
        back_populates="credit_account",
        cascade="all, delete-orphan",
    )

    @property
    def available_credit(self) -> float:
        return calculations.available_credit(self.credit_limit, self.current_balance)

    @property
    def credit_status(self) -> CreditStatus:
        return calculations.credit_status(
            self.credit_limit, self.current_balance, self.overdue_amount
        )
