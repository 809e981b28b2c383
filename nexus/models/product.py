from sqlalchemy import String, Integer, Numeric, ForeignKey, Boolean, Index, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from nexus.config import settings
from nexus.core import calculations
from nexus.models.base import Base, TimestampMixin
from nexus.models.enums import StockStatus


class Product(Base, TimestampMixin):
    """
    Stocked product with cost and selling price.

    Stock value figures are derived from quantity and prices on read; only
    the raw quantities and prices are stored.
    """

    __tablename__ = "products"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    org_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    sku: Mapped[str | None] = mapped_column(String(100), nullable=True)
    barcode: Mapped[str | None] = mapped_column(String(100), nullable=True)
    category: Mapped[str | None] = mapped_column(String(100), nullable=True)
    price: Mapped[float] = mapped_column(Numeric(precision=15, scale=2), nullable=False, default=0)
    cost_price: Mapped[float] = mapped_column(
        Numeric(precision=15, scale=2), nullable=False, default=0
    )
    stock_quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    min_stock_level: Mapped[int | None] = mapped_column(Integer, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    __table_args__ = (
        UniqueConstraint("org_id", "sku", name="uq_products_org_sku"),
        Index("ix_products_org_category", "org_id", "category"),
    )

    @property
    def stock_threshold(self) -> int:
        return calculations.stock_threshold(
            self.min_stock_level, settings.DEFAULT_MIN_STOCK_LEVEL
        )

    @property
    def stock_status(self) -> StockStatus:
        return calculations.stock_status(self.stock_quantity, self.stock_threshold)

    @property
    def profit_margin(self) -> float:
        return calculations.profit_margin(self.price, self.cost_price)

    @property
    def total_cost_value(self) -> float:
        return calculations.round_money(calculations.to_float(self.cost_price) * self.stock_quantity)

    @property
    def total_selling_value(self) -> float:
        return calculations.round_money(calculations.to_float(self.price) * self.stock_quantity)

    @property
    def expected_profit(self) -> float:
        return calculations.round_money(self.total_selling_value - self.total_cost_value)

    def __repr__(self) -> str:
        return f"<Product(id={self.id}, sku='{self.sku}', qty={self.stock_quantity})>"
