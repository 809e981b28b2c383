from sqlalchemy import String, Integer, Numeric, ForeignKey, Text, Enum, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import TYPE_CHECKING

from nexus.models.base import Base, TimestampMixin, enum_values
from nexus.models.enums import CreditTransactionType

if TYPE_CHECKING:
    from nexus.models.credit_account import CreditAccount


class CreditTransaction(Base, TimestampMixin):
    """
    Movement on a credit account.

    Purchases and payments carry a positive amount; adjustments are signed.
    balance_after is the account balance once this transaction applied.
    """

    __tablename__ = "credit_transactions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    customer_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("customers.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    credit_account_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("credit_accounts.id", ondelete="CASCADE"),
        nullable=False,
    )
    type: Mapped[CreditTransactionType] = mapped_column(
        Enum(CreditTransactionType, native_enum=False, values_callable=enum_values),
        nullable=False,
    )
    amount: Mapped[float] = mapped_column(Numeric(precision=15, scale=2), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    reference: Mapped[str | None] = mapped_column(String(100), nullable=True)
    balance_after: Mapped[float] = mapped_column(Numeric(precision=15, scale=2), nullable=False)
    created_by: Mapped[str | None] = mapped_column(String(255), nullable=True)

    credit_account: Mapped["CreditAccount"] = relationship(
        "CreditAccount", back_populates="transactions"
    )

    __table_args__ = (Index("ix_credit_transactions_account_created", "credit_account_id", "created_at"),)
