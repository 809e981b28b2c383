from sqlalchemy import String, Integer, ForeignKey, Text, Enum
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import TYPE_CHECKING

from nexus.models.base import Base, TimestampMixin, enum_values
from nexus.models.enums import LoyaltyTransactionType

if TYPE_CHECKING:
    from nexus.models.loyalty_account import LoyaltyAccount


class LoyaltyTransaction(Base, TimestampMixin):
    """Points movement; points is always positive, the type gives the direction."""

    __tablename__ = "loyalty_transactions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    customer_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("customers.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    loyalty_account_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("loyalty_accounts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    type: Mapped[LoyaltyTransactionType] = mapped_column(
        Enum(LoyaltyTransactionType, native_enum=False, values_callable=enum_values),
        nullable=False,
    )
    points: Mapped[int] = mapped_column(Integer, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    order_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    balance_after: Mapped[int] = mapped_column(Integer, nullable=False)

    loyalty_account: Mapped["LoyaltyAccount"] = relationship(
        "LoyaltyAccount", back_populates="transactions"
    )
