from datetime import date
from sqlalchemy import String, Integer, Numeric, ForeignKey, Date, Text, Enum, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import TYPE_CHECKING

from nexus.models.base import Base, TimestampMixin, enum_values
from nexus.models.enums import PaymentStatus, TenantStatus

if TYPE_CHECKING:
    from nexus.models.building import Building
    from nexus.models.payment import Payment


class Tenant(Base, TimestampMixin):
    """
    Person renting a unit in a building.

    Removal is a soft delete (status=deleted) so payments and receipts
    keep their tenant reference.
    """

    __tablename__ = "property_tenants"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    org_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    building_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("property_buildings.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    emergency_contact_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    emergency_contact_phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    lease_start_date: Mapped[date] = mapped_column(Date, nullable=False)
    lease_end_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    monthly_rent: Mapped[float] = mapped_column(Numeric(precision=15, scale=2), nullable=False)
    security_deposit: Mapped[float] = mapped_column(
        Numeric(precision=15, scale=2), nullable=False, default=0
    )
    payment_status: Mapped[PaymentStatus] = mapped_column(
        Enum(PaymentStatus, native_enum=False, values_callable=enum_values),
        nullable=False,
        default=PaymentStatus.PENDING,
    )
    payment_due_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[TenantStatus] = mapped_column(
        Enum(TenantStatus, native_enum=False, values_callable=enum_values),
        nullable=False,
        default=TenantStatus.ACTIVE,
        index=True,
    )

    building: Mapped["Building"] = relationship("Building", back_populates="tenants")
    payments: Mapped[list["Payment"]] = relationship(
        "Payment", back_populates="tenant", passive_deletes="all"
    )

    __table_args__ = (Index("ix_property_tenants_org_building", "org_id", "building_id"),)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def __repr__(self) -> str:
        return f"<Tenant(id={self.id}, name='{self.full_name}', status={self.status.value})>"
