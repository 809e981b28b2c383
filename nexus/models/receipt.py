import datetime
from sqlalchemy import String, Integer, Numeric, ForeignKey, Date, Text, JSON, Enum, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from nexus.models.base import Base, TimestampMixin, enum_values
from nexus.models.enums import PaymentMethod


class Receipt(Base, TimestampMixin):
    """
    Itemised receipt issued to a tenant.

    items is a JSON list of {"description", "quantity", "price"} objects;
    subtotal and total are recomputed from it by the receipt service.
    """

    __tablename__ = "property_receipts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    org_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    receipt_number: Mapped[str] = mapped_column(String(100), nullable=False)
    due_date: Mapped[datetime.date | None] = mapped_column(Date, nullable=True)
    date: Mapped[datetime.date] = mapped_column(Date, nullable=False, index=True)
    tenant_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("property_tenants.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    building_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("property_buildings.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    payment_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("property_payments.id", ondelete="SET NULL"),
        nullable=True,
    )
    items: Mapped[list[dict]] = mapped_column(JSON, nullable=False, default=list)
    subtotal: Mapped[float] = mapped_column(Numeric(precision=15, scale=2), nullable=False, default=0)
    tax_amount: Mapped[float] = mapped_column(
        Numeric(precision=15, scale=2), nullable=False, default=0
    )
    total: Mapped[float] = mapped_column(Numeric(precision=15, scale=2), nullable=False, default=0)
    payment_method: Mapped[PaymentMethod | None] = mapped_column(
        Enum(PaymentMethod, native_enum=False, values_callable=enum_values),
        nullable=True,
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        UniqueConstraint("org_id", "receipt_number", name="uq_property_receipts_org_number"),
    )
