from datetime import datetime
from sqlalchemy import String, Integer, ForeignKey, DateTime, Enum, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import TYPE_CHECKING

from nexus.core import calculations
from nexus.models.base import Base, TimestampMixin, enum_values
from nexus.models.enums import LoyaltyTier

if TYPE_CHECKING:
    from nexus.models.customer import Customer
    from nexus.models.loyalty_transaction import LoyaltyTransaction


class LoyaltyAccount(Base, TimestampMixin):
    """
    Points balance and tier of a customer.

    Tier fields (tier, tier_points, next_tier_points, points_to_next_tier)
    are rewritten from lifetime_points whenever points are earned.
    """

    __tablename__ = "loyalty_accounts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    org_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    customer_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("customers.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    card_number: Mapped[str | None] = mapped_column(String(50), nullable=True)
    current_points: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    lifetime_points: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    tier: Mapped[LoyaltyTier] = mapped_column(
        Enum(LoyaltyTier, native_enum=False, values_callable=enum_values),
        nullable=False,
        default=LoyaltyTier.BRONZE,
        index=True,
    )
    tier_points: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    next_tier_points: Mapped[int] = mapped_column(Integer, nullable=False, default=1000)
    points_to_next_tier: Mapped[int] = mapped_column(Integer, nullable=False, default=1000)
    last_earned_date: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    last_redeemed_date: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    __table_args__ = (
        UniqueConstraint("org_id", "card_number", name="uq_loyalty_accounts_org_card"),
    )

    customer: Mapped["Customer"] = relationship("Customer", back_populates="loyalty_account")
    transactions: Mapped[list["LoyaltyTransaction"]] = relationship(
        "LoyaltyTransaction",
        back_populates="loyalty_account",
        cascade="all, delete-orphan",
    )

    @property
    def tier_progress(self) -> float:
        return calculations.tier_progress(self.tier_points, self.next_tier_points)

    def refresh_tier(self) -> None:
        """Recompute the tier fields from lifetime_points."""
        self.tier = calculations.tier_for_points(self.lifetime_points)
        self.tier_points = self.lifetime_points
        self.next_tier_points = calculations.next_tier_points(self.tier)
        self.points_to_next_tier = calculations.points_to_next_tier(
            self.lifetime_points, self.tier
        )
