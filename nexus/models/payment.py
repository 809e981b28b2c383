from datetime import date
from sqlalchemy import String, Integer, Numeric, ForeignKey, Date, Text, Enum, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import TYPE_CHECKING

from nexus.models.base import Base, TimestampMixin, enum_values
from nexus.models.enums import PaymentMethod, PaymentRecordStatus

if TYPE_CHECKING:
    from nexus.models.tenant import Tenant


class Payment(Base, TimestampMixin):
    """Rent payment received from a tenant for a building."""

    __tablename__ = "property_payments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    org_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
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
    amount: Mapped[float] = mapped_column(Numeric(precision=15, scale=2), nullable=False)
    payment_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    payment_method: Mapped[PaymentMethod] = mapped_column(
        Enum(PaymentMethod, native_enum=False, values_callable=enum_values),
        nullable=False,
    )
    receipt_number: Mapped[str | None] = mapped_column(String(100), nullable=True)
    status: Mapped[PaymentRecordStatus] = mapped_column(
        Enum(PaymentRecordStatus, native_enum=False, values_callable=enum_values),
        nullable=False,
        default=PaymentRecordStatus.COMPLETED,
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    tenant: Mapped["Tenant"] = relationship("Tenant", back_populates="payments")

    __table_args__ = (Index("ix_property_payments_org_date", "org_id", "payment_date"),)
